"""Domain layer DI providers."""

from dishka import Scope, provide

from lynkr.config import Settings
from lynkr.domain.repository import (
    AccountRepository,
    LinkingTokenRepository,
    UserRepository,
)
from lynkr.domain.service import (
    AccountService,
    AuthService,
    Gatekeeper,
    JWTService,
    LinkingTokenService,
    OAuthClient,
    SessionResolver,
    UserService,
)
from lynkr.domain.value import AuthProvider
from lynkr.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    Each HTTP request gets fresh service instances with their own transaction.
    """

    scope = Scope.REQUEST

    @provide
    def get_auth_service(
        self, oauth_clients: dict[AuthProvider, OAuthClient]
    ) -> AuthService:
        """Provide multi-provider authentication domain service."""
        return AuthService(oauth_clients=oauth_clients)

    @provide
    def get_jwt_service(self, settings: Settings) -> JWTService:
        """Provide JWT token domain service."""
        return JWTService(auth_settings=settings.auth)

    @provide
    def get_user_service(self, user_repository: UserRepository) -> UserService:
        return UserService(user_repository=user_repository)

    @provide
    def get_account_service(
        self,
        account_repository: AccountRepository,
        user_repository: UserRepository,
    ) -> AccountService:
        return AccountService(
            account_repository=account_repository,
            user_repository=user_repository,
        )

    @provide
    def get_linking_token_service(
        self, linking_token_repository: LinkingTokenRepository, settings: Settings
    ) -> LinkingTokenService:
        return LinkingTokenService(
            linking_token_repository=linking_token_repository,
            linking_settings=settings.linking,
        )

    @provide
    def get_session_resolver(
        self,
        jwt_service: JWTService,
        user_repository: UserRepository,
        settings: Settings,
    ) -> SessionResolver:
        """Provide the resolver the gatekeeper middleware runs per request."""
        return SessionResolver(
            jwt_service=jwt_service,
            user_repository=user_repository,
            revalidate=settings.auth.revalidate_ban_on_request,
        )

    @provide(scope=Scope.APP)
    def get_gatekeeper(self, settings: Settings) -> Gatekeeper:
        """Provide the gatekeeper; it holds no per-request state."""
        return Gatekeeper(settings.gatekeeper, settings.linking)
