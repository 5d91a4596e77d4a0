"""JWT token domain service."""

import logfire

from lynkr.config import AuthSettings
from lynkr.domain.model.user import User
from lynkr.util.jwt import (
    StatePayload,
    StatePurpose,
    TokenPayload,
    create_state,
    create_token,
    verify_state,
    verify_token,
)

from .base import Service


class JWTService(Service):
    """Domain service for session tokens and signed OAuth state."""

    def __init__(self, auth_settings: AuthSettings) -> None:
        """Initialize JWT service.

        Args:
            auth_settings: Authentication settings
        """
        self.auth_settings = auth_settings

    def create_token(self, user: User) -> str:
        """Create a session JWT for the user.

        Args:
            user: Signed-in user

        Returns:
            JWT token string
        """
        with logfire.span("jwt_service.create_token", user_id=str(user.id)):
            token = create_token(
                user_id=str(user.id),
                handle=str(user.handle) if user.handle else None,
                role=user.role.value,
                banned=user.banned,
                settings=self.auth_settings,
            )
            logfire.info("JWT token created", user_id=str(user.id))
            return token

    def verify_token(self, token: str) -> TokenPayload:
        """Verify session JWT and extract payload.

        Raises:
            JWTError: If token is invalid or expired
        """
        with logfire.span("jwt_service.verify_token"):
            try:
                return verify_token(token, self.auth_settings)
            except Exception as e:
                logfire.warn("JWT token verification failed", error=str(e))
                raise

    def create_state(
        self,
        purpose: StatePurpose,
        provider: str,
        user_id: str | None = None,
        link_provider: str | None = None,
        link_token: str | None = None,
        next_url: str | None = None,
    ) -> str:
        """Sign an OAuth state value for one provider round-trip."""
        return create_state(
            purpose,
            provider,
            self.auth_settings,
            user_id=user_id,
            link_provider=link_provider,
            link_token=link_token,
            next_url=next_url,
        )

    def verify_state(self, state: str) -> StatePayload:
        """Verify an OAuth state value.

        Raises:
            JWTError: If state is invalid or expired
        """
        with logfire.span("jwt_service.verify_state"):
            return verify_state(state, self.auth_settings)
