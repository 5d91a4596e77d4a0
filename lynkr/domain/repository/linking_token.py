"""Linking token repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from lynkr.domain.model.linking_token import LinkingToken
from lynkr.domain.value import AuthProvider, UserId


class LinkingTokenRepository(ABC):
    """Repository for LinkingToken entity."""

    @abstractmethod
    async def add(self, token: LinkingToken) -> LinkingToken:
        """Persist a newly issued token.

        Args:
            token: The token to store

        Returns:
            The stored token
        """
        pass

    @abstractmethod
    async def find(self, token: str) -> Optional[LinkingToken]:
        """Read a token without consuming it.

        Args:
            token: The token value

        Returns:
            The token if present (expired or not), None otherwise
        """
        pass

    @abstractmethod
    async def consume(
        self,
        token: str,
        user_id: UserId,
        provider: AuthProvider,
        now: datetime,
        require_handshake: bool = False,
    ) -> Optional[LinkingToken]:
        """Atomically delete and return a matching, unexpired token.

        Concurrent callers for the same token get at most one non-None result.

        Args:
            token: The token value
            user_id: User the token must be scoped to
            provider: Provider the token must be scoped to
            now: Reference time for expiry
            require_handshake: Only match a token whose handshake identity
                is recorded; a pending token is left in place

        Returns:
            The deleted token, or None if absent, expired, mis-scoped, or
            still pending when a handshake is required
        """
        pass

    @abstractmethod
    async def record_handshake(
        self,
        token: str,
        user_id: UserId,
        provider: AuthProvider,
        subject_id: str,
        subject_handle: str | None,
        now: datetime,
    ) -> bool:
        """Attach the target provider's identity to a pending token.

        Only an unexpired, correctly scoped token whose handshake has not
        been recorded yet is updated.

        Returns:
            True if the token was updated, False otherwise
        """
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete every token that expired before ``now``.

        Returns:
            Number of deleted tokens
        """
        pass
