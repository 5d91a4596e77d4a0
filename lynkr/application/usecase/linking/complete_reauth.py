"""Complete re-authentication use case (REAUTH_IN_PROGRESS -> REAUTH_DONE)."""

from urllib.parse import urlencode

import logfire
from pydantic import BaseModel

from lynkr.application.usecase.base import BaseUseCase, CallbackResponse, store_errors
from lynkr.config import Settings
from lynkr.domain.error import AuthError, ProviderAlreadyLinkedError
from lynkr.domain.service import (
    AccountService,
    AuthService,
    JWTService,
    LinkingTokenService,
    UserService,
)
from lynkr.domain.value import AuthProvider, LinkAction, UserId


class CompleteReauthRequest(BaseModel):
    provider: AuthProvider  # Provider the user re-authenticated with
    code: str
    state: str
    user_id: UserId  # From the signed state
    link_provider: AuthProvider  # From the signed state
    session_user_id: UserId | None = None  # Session cookie on the callback


class CompleteReauthUseCase(BaseUseCase):
    """Verify the re-auth identity belongs to the user, then issue a token."""

    def __init__(
        self,
        auth_service: AuthService,
        jwt_service: JWTService,
        user_service: UserService,
        account_service: AccountService,
        linking_token_service: LinkingTokenService,
        settings: Settings,
    ) -> None:
        self.auth_service = auth_service
        self.jwt_service = jwt_service
        self.user_service = user_service
        self.account_service = account_service
        self.linking_token_service = linking_token_service
        self.settings = settings

    async def execute(self, request: CompleteReauthRequest) -> CallbackResponse:
        """Issue a linking token scoped to (user, link_provider).

        Raises:
            AuthError: Re-auth identity or session does not match the user
            ProviderAlreadyLinkedError: Provider got linked in the meantime
            ProviderError: Provider handshake failed
        """
        if request.session_user_id is not None and request.session_user_id != request.user_id:
            raise AuthError("Session changed during re-authentication")

        info = await self.auth_service.complete_login(
            request.provider, request.code, request.state
        )

        with store_errors("complete_reauth"):
            account = await self.account_service.find_by_provider(
                info.provider, info.provider_user_id
            )
            if not account or account.user_id != request.user_id:
                logfire.warn(
                    "Re-authentication identity mismatch",
                    user_id=str(request.user_id),
                    provider=request.provider.value,
                )
                raise AuthError("Re-authentication did not match the signed-in user")

            user = await self.user_service.get_by_id(request.user_id)
            if user.banned:
                raise AuthError("User is banned")

            accounts = await self.account_service.list_by_user(user.id)
            if any(a.provider == request.link_provider for a in accounts):
                raise ProviderAlreadyLinkedError(request.link_provider.value)

            token = await self.linking_token_service.issue(user.id, request.link_provider)

        query = urlencode(
            {
                "action": LinkAction.REAUTH.value,
                "token": token.token,
                "linkProvider": request.link_provider.value,
            }
        )
        return CallbackResponse(
            redirect_url=f"{self.settings.linking_page_url}&{query}",
            session_token=self.jwt_service.create_token(user),
        )
