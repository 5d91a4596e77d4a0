"""Linking token domain service."""

import secrets
from datetime import datetime, timedelta, timezone

import logfire

from lynkr.config import LinkingSettings
from lynkr.domain.model.linking_token import LinkingToken
from lynkr.domain.repository import LinkingTokenRepository
from lynkr.domain.value import AuthProvider, UserId
from lynkr.util.logging import redact_token

from .base import Service


class LinkingTokenService(Service):
    """Issues, verifies and consumes single-use linking tokens."""

    def __init__(
        self,
        linking_token_repository: LinkingTokenRepository,
        linking_settings: LinkingSettings,
    ) -> None:
        """Initialize linking token service.

        Args:
            linking_token_repository: Linking token repository
            linking_settings: Token lifetime and entropy
        """
        self.linking_token_repository = linking_token_repository
        self.linking_settings = linking_settings

    async def issue(
        self, user_id: UserId, provider: AuthProvider, ttl: timedelta | None = None
    ) -> LinkingToken:
        """Issue a token authorizing ``user_id`` to link ``provider``.

        Args:
            user_id: User who just re-authenticated
            provider: Provider the user is adding
            ttl: Lifetime override, defaults to the configured TTL

        Returns:
            The stored token
        """
        with logfire.span(
            "linking_token_service.issue", user_id=str(user_id), provider=provider.value
        ):
            now = datetime.now(timezone.utc)
            lifetime = ttl or timedelta(seconds=self.linking_settings.token_ttl_seconds)

            purged = await self.linking_token_repository.delete_expired(now)
            if purged:
                logfire.info("Expired linking tokens purged", count=purged)

            token = LinkingToken(
                token=secrets.token_urlsafe(self.linking_settings.token_bytes),
                user_id=user_id,
                provider=provider,
                expires_at=now + lifetime,
                created_at=now,
            )
            stored = await self.linking_token_repository.add(token)
            logfire.info(
                "Linking token issued",
                user_id=str(user_id),
                provider=provider.value,
                token=redact_token(stored.token),
                expires_at=stored.expires_at.isoformat(),
            )
            return stored

    async def peek(self, token: str) -> LinkingToken | None:
        """Read a token without consuming it. Advisory only."""
        found = await self.linking_token_repository.find(token)
        if found and found.is_expired():
            return None
        return found

    async def record_handshake(
        self,
        token: str,
        user_id: UserId,
        provider: AuthProvider,
        subject_id: str,
        subject_handle: str | None,
    ) -> bool:
        """Store the identity returned by the target provider on the token."""
        with logfire.span(
            "linking_token_service.record_handshake",
            user_id=str(user_id),
            provider=provider.value,
        ):
            recorded = await self.linking_token_repository.record_handshake(
                token,
                user_id,
                provider,
                subject_id,
                subject_handle,
                datetime.now(timezone.utc),
            )
            if not recorded:
                logfire.warn(
                    "Handshake not recorded",
                    user_id=str(user_id),
                    provider=provider.value,
                    token=redact_token(token),
                )
            return recorded

    async def consume(
        self,
        token: str,
        user_id: UserId,
        provider: AuthProvider,
        require_handshake: bool = False,
    ) -> LinkingToken | None:
        """Consume a token exactly once.

        With ``require_handshake`` a token whose handshake is still pending
        is refused and left usable.

        Returns:
            The consumed token, or None if it is absent, expired, already
            consumed, or scoped to another user or provider
        """
        with logfire.span(
            "linking_token_service.consume", user_id=str(user_id), provider=provider.value
        ):
            consumed = await self.linking_token_repository.consume(
                token,
                user_id,
                provider,
                datetime.now(timezone.utc),
                require_handshake=require_handshake,
            )
            if consumed is None:
                logfire.warn(
                    "Linking token rejected",
                    user_id=str(user_id),
                    provider=provider.value,
                    token=redact_token(token),
                )
            else:
                logfire.info(
                    "Linking token consumed",
                    user_id=str(user_id),
                    provider=provider.value,
                )
            return consumed

    async def purge_expired(self) -> int:
        """Delete all expired tokens."""
        with logfire.span("linking_token_service.purge_expired"):
            count = await self.linking_token_repository.delete_expired(
                datetime.now(timezone.utc)
            )
            logfire.info("Expired linking tokens purged", count=count)
            return count
