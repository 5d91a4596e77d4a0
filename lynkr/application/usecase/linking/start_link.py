"""Start link use case (UNLINKED -> REAUTH_IN_PROGRESS)."""

import logfire
from pydantic import BaseModel

from lynkr.application.usecase.base import AuthorizationResponse, BaseUseCase, store_errors
from lynkr.domain.error import AuthError, ProviderAlreadyLinkedError, ValidationError
from lynkr.domain.service import AccountService, AuthService, JWTService
from lynkr.domain.value import AuthProvider, UserId
from lynkr.util.jwt import StatePurpose


class StartLinkRequest(BaseModel):
    user_id: UserId
    provider: AuthProvider  # Provider the user wants to add


class StartLinkResponse(AuthorizationResponse):
    reauth_provider: AuthProvider


class StartLinkUseCase(BaseUseCase):
    """Send the user to re-authenticate with an identity they already own.

    The new provider's handshake is never started here. Only a caller who
    re-proves control of the signed-in user gets a linking token.
    """

    def __init__(
        self,
        auth_service: AuthService,
        jwt_service: JWTService,
        account_service: AccountService,
    ) -> None:
        self.auth_service = auth_service
        self.jwt_service = jwt_service
        self.account_service = account_service

    async def execute(self, request: StartLinkRequest) -> StartLinkResponse:
        """Build the re-authentication URL.

        Raises:
            ValidationError: Provider not configured
            ProviderAlreadyLinkedError: Provider already linked
            AuthError: User has no account to re-authenticate with
        """
        if request.provider not in self.auth_service.oauth_clients:
            raise ValidationError(f"Unsupported provider: {request.provider.value}")

        with store_errors("start_link"):
            accounts = await self.account_service.list_by_user(request.user_id)

        if any(a.provider == request.provider for a in accounts):
            raise ProviderAlreadyLinkedError(request.provider.value)
        if not accounts:
            raise AuthError("No linked account to re-authenticate with")

        # Re-authenticate with the identity the user signed up with
        reauth_provider = accounts[0].provider
        state = self.jwt_service.create_state(
            StatePurpose.REAUTH,
            reauth_provider.value,
            user_id=str(request.user_id),
            link_provider=request.provider.value,
        )
        url = await self.auth_service.initiate_login(reauth_provider, state)

        logfire.info(
            "Link started",
            user_id=str(request.user_id),
            link_provider=request.provider.value,
            reauth_provider=reauth_provider.value,
        )
        return StartLinkResponse(authorization_url=url, reauth_provider=reauth_provider)
