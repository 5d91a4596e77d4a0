"""Begin handshake use case (REAUTH_DONE -> PROVIDER_HANDSHAKE_IN_PROGRESS)."""

from pydantic import BaseModel

from lynkr.application.usecase.base import AuthorizationResponse, BaseUseCase, store_errors
from lynkr.domain.error import TokenError
from lynkr.domain.service import AuthService, JWTService, LinkingTokenService
from lynkr.domain.value import AuthProvider, UserId
from lynkr.util.jwt import StatePurpose


class BeginHandshakeRequest(BaseModel):
    user_id: UserId
    token: str
    provider: AuthProvider


class BeginHandshakeUseCase(BaseUseCase):
    """Start the target provider's handshake, carrying the linking token."""

    def __init__(
        self,
        auth_service: AuthService,
        jwt_service: JWTService,
        linking_token_service: LinkingTokenService,
    ) -> None:
        self.auth_service = auth_service
        self.jwt_service = jwt_service
        self.linking_token_service = linking_token_service

    async def execute(self, request: BeginHandshakeRequest) -> AuthorizationResponse:
        """Return the target provider's authorization URL.

        The token is only read here; it is consumed by process-link.

        Raises:
            TokenError: Token unusable for this user and provider
        """
        with store_errors("begin_handshake"):
            token = await self.linking_token_service.peek(request.token)

        if (
            token is None
            or not token.is_scoped_to(request.user_id, request.provider)
            or token.handshake_done
        ):
            raise TokenError()

        state = self.jwt_service.create_state(
            StatePurpose.LINK,
            request.provider.value,
            user_id=str(request.user_id),
            link_provider=request.provider.value,
            link_token=request.token,
        )
        url = await self.auth_service.initiate_login(request.provider, state)
        return AuthorizationResponse(authorization_url=url)
