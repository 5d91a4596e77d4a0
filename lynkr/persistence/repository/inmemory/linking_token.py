"""In-memory linking token repository for testing."""

from datetime import datetime
from typing import Optional

from lynkr.domain.model.linking_token import LinkingToken
from lynkr.domain.repository.linking_token import LinkingTokenRepository
from lynkr.domain.value import AuthProvider, UserId


class InMemoryLinkingTokenRepository(LinkingTokenRepository):
    """In-memory implementation of LinkingTokenRepository for testing."""

    def __init__(self) -> None:
        self._tokens: dict[str, LinkingToken] = {}

    async def add(self, token: LinkingToken) -> LinkingToken:
        self._tokens[token.token] = token
        return token

    async def find(self, token: str) -> Optional[LinkingToken]:
        return self._tokens.get(token)

    async def consume(
        self,
        token: str,
        user_id: UserId,
        provider: AuthProvider,
        now: datetime,
        require_handshake: bool = False,
    ) -> Optional[LinkingToken]:
        found = self._tokens.get(token)
        if not found or found.is_expired(now) or not found.is_scoped_to(user_id, provider):
            return None
        if require_handshake and not found.handshake_done:
            return None
        return self._tokens.pop(token)

    async def record_handshake(
        self,
        token: str,
        user_id: UserId,
        provider: AuthProvider,
        subject_id: str,
        subject_handle: str | None,
        now: datetime,
    ) -> bool:
        found = self._tokens.get(token)
        if (
            not found
            or found.is_expired(now)
            or not found.is_scoped_to(user_id, provider)
            or found.handshake_done
        ):
            return False
        self._tokens[token] = found.model_copy(
            update={"subject_id": subject_id, "subject_handle": subject_handle}
        )
        return True

    async def delete_expired(self, now: datetime) -> int:
        expired = [value for value, t in self._tokens.items() if t.is_expired(now)]
        for value in expired:
            del self._tokens[value]
        return len(expired)
