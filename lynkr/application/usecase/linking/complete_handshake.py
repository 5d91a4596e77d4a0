"""Complete handshake use case.

Records the target provider's identity on the linking token and sends the
browser to the completion step. The session is left untouched so the user
stays signed in as themselves.
"""

from urllib.parse import urlencode

from pydantic import BaseModel

from lynkr.application.usecase.base import BaseUseCase, CallbackResponse, store_errors
from lynkr.config import Settings
from lynkr.domain.error import AuthError, TokenError
from lynkr.domain.service import AuthService, LinkingTokenService
from lynkr.domain.value import AuthProvider, LinkAction, UserId


class CompleteHandshakeRequest(BaseModel):
    provider: AuthProvider
    code: str
    state: str
    user_id: UserId  # From the signed state
    link_token: str  # From the signed state
    session_user_id: UserId | None = None


class CompleteHandshakeUseCase(BaseUseCase):
    """Attach the handshake result to the pending token."""

    def __init__(
        self,
        auth_service: AuthService,
        linking_token_service: LinkingTokenService,
        settings: Settings,
    ) -> None:
        self.auth_service = auth_service
        self.linking_token_service = linking_token_service
        self.settings = settings

    async def execute(self, request: CompleteHandshakeRequest) -> CallbackResponse:
        """Record the handshake and redirect to the completion step.

        Raises:
            AuthError: Session belongs to another user
            TokenError: Token expired, consumed or mis-scoped
            ProviderError: Provider handshake failed
        """
        if request.session_user_id is not None and request.session_user_id != request.user_id:
            raise AuthError("Session changed during provider handshake")

        info = await self.auth_service.complete_login(
            request.provider, request.code, request.state
        )

        with store_errors("complete_handshake"):
            recorded = await self.linking_token_service.record_handshake(
                request.link_token,
                request.user_id,
                request.provider,
                info.provider_user_id,
                info.handle,
            )
        if not recorded:
            raise TokenError()

        query = urlencode(
            {
                "action": LinkAction.COMPLETE.value,
                "token": request.link_token,
                "linkProvider": request.provider.value,
            }
        )
        return CallbackResponse(redirect_url=f"{self.settings.linking_page_url}&{query}")
