"""Application layer DI providers."""

from dishka import Scope, provide

from lynkr.application.usecase.auth import GetCurrentUserUseCase, LoginUseCase
from lynkr.application.usecase.linking import (
    BeginHandshakeUseCase,
    CompleteHandshakeUseCase,
    CompleteReauthUseCase,
    ListLinkedAccountsUseCase,
    ProcessLinkUseCase,
    StartLinkUseCase,
    UnlinkAccountUseCase,
)
from lynkr.application.usecase.staff import BanUserUseCase, PromoteUserUseCase
from lynkr.application.usecase.user import ClaimHandleUseCase
from lynkr.config import Settings
from lynkr.domain.service import (
    AccountService,
    AuthService,
    JWTService,
    LinkingTokenService,
    UserService,
)
from lynkr.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Auth use cases
    @provide(scope=Scope.REQUEST)
    def get_login_use_case(
        self,
        auth_service: AuthService,
        jwt_service: JWTService,
        user_service: UserService,
        account_service: AccountService,
        settings: Settings,
    ) -> LoginUseCase:
        """Provide login use case."""
        return LoginUseCase(
            auth_service=auth_service,
            jwt_service=jwt_service,
            user_service=user_service,
            account_service=account_service,
            settings=settings,
        )

    @provide(scope=Scope.REQUEST)
    def get_current_user_use_case(
        self, user_service: UserService, account_service: AccountService
    ) -> GetCurrentUserUseCase:
        """Provide get current user use case."""
        return GetCurrentUserUseCase(
            user_service=user_service, account_service=account_service
        )

    # Linking use cases
    @provide(scope=Scope.REQUEST)
    def get_start_link_use_case(
        self,
        auth_service: AuthService,
        jwt_service: JWTService,
        account_service: AccountService,
    ) -> StartLinkUseCase:
        return StartLinkUseCase(
            auth_service=auth_service,
            jwt_service=jwt_service,
            account_service=account_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_complete_reauth_use_case(
        self,
        auth_service: AuthService,
        jwt_service: JWTService,
        user_service: UserService,
        account_service: AccountService,
        linking_token_service: LinkingTokenService,
        settings: Settings,
    ) -> CompleteReauthUseCase:
        return CompleteReauthUseCase(
            auth_service=auth_service,
            jwt_service=jwt_service,
            user_service=user_service,
            account_service=account_service,
            linking_token_service=linking_token_service,
            settings=settings,
        )

    @provide(scope=Scope.REQUEST)
    def get_begin_handshake_use_case(
        self,
        auth_service: AuthService,
        jwt_service: JWTService,
        linking_token_service: LinkingTokenService,
    ) -> BeginHandshakeUseCase:
        return BeginHandshakeUseCase(
            auth_service=auth_service,
            jwt_service=jwt_service,
            linking_token_service=linking_token_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_complete_handshake_use_case(
        self,
        auth_service: AuthService,
        linking_token_service: LinkingTokenService,
        settings: Settings,
    ) -> CompleteHandshakeUseCase:
        return CompleteHandshakeUseCase(
            auth_service=auth_service,
            linking_token_service=linking_token_service,
            settings=settings,
        )

    @provide(scope=Scope.REQUEST)
    def get_process_link_use_case(
        self,
        linking_token_service: LinkingTokenService,
        account_service: AccountService,
    ) -> ProcessLinkUseCase:
        """Provide process link use case."""
        return ProcessLinkUseCase(
            linking_token_service=linking_token_service,
            account_service=account_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_list_linked_accounts_use_case(
        self, account_service: AccountService
    ) -> ListLinkedAccountsUseCase:
        return ListLinkedAccountsUseCase(account_service=account_service)

    @provide(scope=Scope.REQUEST)
    def get_unlink_account_use_case(
        self, account_service: AccountService
    ) -> UnlinkAccountUseCase:
        return UnlinkAccountUseCase(account_service=account_service)

    # Staff use cases
    @provide(scope=Scope.REQUEST)
    def get_ban_user_use_case(
        self, account_service: AccountService, user_service: UserService
    ) -> BanUserUseCase:
        return BanUserUseCase(account_service=account_service, user_service=user_service)

    @provide(scope=Scope.REQUEST)
    def get_promote_user_use_case(
        self, account_service: AccountService
    ) -> PromoteUserUseCase:
        return PromoteUserUseCase(account_service=account_service)

    # User use cases
    @provide(scope=Scope.REQUEST)
    def get_claim_handle_use_case(
        self, user_service: UserService, jwt_service: JWTService
    ) -> ClaimHandleUseCase:
        """Provide claim handle use case."""
        return ClaimHandleUseCase(user_service=user_service, jwt_service=jwt_service)
