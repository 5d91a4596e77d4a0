"""Session resolver.

Turns the session cookie of an inbound request into a Session, or None for
anonymous callers.
"""

from uuid import UUID

import logfire

from lynkr.domain.model.session import Session
from lynkr.domain.repository import UserRepository
from lynkr.domain.value import UserId
from lynkr.domain.value.types import UserRole
from lynkr.util.jwt import JWTError

from .base import Service
from .jwt_service import JWTService


class SessionResolver(Service):
    """Resolves session credentials.

    With ``revalidate`` enabled the ban flag, role and handle come from the
    user row on every call, so a ban applies to sessions issued before it.
    Without it the values signed into the cookie are used until it expires.
    """

    def __init__(
        self,
        jwt_service: JWTService,
        user_repository: UserRepository,
        revalidate: bool = True,
    ) -> None:
        self.jwt_service = jwt_service
        self.user_repository = user_repository
        self.revalidate = revalidate

    async def resolve(self, credential: str | None) -> Session | None:
        """Resolve a session cookie.

        Args:
            credential: Raw ``auth_token`` cookie value

        Returns:
            Session, or None for missing, invalid, expired or orphaned
            credentials

        Raises:
            Exception: Store failures propagate to the caller
        """
        if not credential:
            return None

        try:
            payload = self.jwt_service.verify_token(credential)
            user_id = UserId(UUID(payload.user_id))
            role = UserRole(payload.role)
        except (JWTError, ValueError):
            return None

        if not self.revalidate:
            return Session(
                user_id=user_id,
                handle=payload.handle,
                banned=payload.banned,
                role=role,
            )

        with logfire.span("session_resolver.revalidate", user_id=str(user_id)):
            user = await self.user_repository.find_by_id(user_id)
            if not user:
                logfire.warn("Session for unknown user", user_id=str(user_id))
                return None

            if user.banned and not payload.banned:
                logfire.info("Ban applied to existing session", user_id=str(user_id))

            return Session(
                user_id=user.id,
                handle=str(user.handle) if user.handle else None,
                banned=user.banned,
                role=user.role,
            )
