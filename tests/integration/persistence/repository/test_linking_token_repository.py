"""Integration tests for PostgresLinkingTokenRepository.

These tests verify the conditional DELETE ... RETURNING that makes a
linking token single-use, including under concurrent sessions.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from secrets import token_urlsafe
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lynkr.domain.model.linking_token import LinkingToken
from lynkr.domain.repository import LinkingTokenRepository
from lynkr.domain.value import AuthProvider
from lynkr.persistence.repository import PostgresLinkingTokenRepository
from tests.harness import create_env_fixture, repositories_of, seed_user

# Integration test fixture - real PostgreSQL, mocked external services
integration_env = create_env_fixture(unmock={"persistence"})


@pytest_asyncio.fixture(autouse=True)
async def clean_database(integration_env):
    """Clean database before each test."""
    session = await integration_env.get(AsyncSession)

    # Truncate all tables (CASCADE removes foreign key constraints)
    await session.execute(text("TRUNCATE TABLE linking_tokens, accounts, users CASCADE"))
    await session.commit()

    yield


async def _stored_token(
    integration_env,
    provider: AuthProvider = AuthProvider.DISCORD,
    ttl: timedelta = timedelta(minutes=5),
    subject_id: str | None = None,
) -> LinkingToken:
    """Commit a user and one token for them, visible to other sessions."""
    repos = await repositories_of(integration_env)
    user = await seed_user(repos, AuthProvider.GITHUB, handle=f"u{uuid4().hex[:8]}")
    token = LinkingToken(
        token=token_urlsafe(32),
        user_id=user.id,
        provider=provider,
        expires_at=datetime.now(timezone.utc) + ttl,
        subject_id=subject_id,
    )
    await repos.linking_tokens.add(token)
    await (await integration_env.get(AsyncSession)).commit()
    return token


async def _consume_in_own_session(
    session_factory: async_sessionmaker[AsyncSession], token: LinkingToken
) -> LinkingToken | None:
    async with session_factory() as session:
        consumed = await PostgresLinkingTokenRepository(session).consume(
            token.token, token.user_id, token.provider, datetime.now(timezone.utc)
        )
        await session.commit()
        return consumed


class TestConsume:
    """Tests for consume()."""

    @pytest.mark.asyncio
    async def test_consume_once(self, integration_env):
        # Arrange
        repo = await integration_env.get(LinkingTokenRepository)
        token = await _stored_token(integration_env)
        now = datetime.now(timezone.utc)

        # Act
        first = await repo.consume(token.token, token.user_id, token.provider, now)
        second = await repo.consume(token.token, token.user_id, token.provider, now)

        # Assert
        assert first is not None
        assert first.token == token.token
        assert first.provider == AuthProvider.DISCORD
        assert second is None
        assert await repo.find(token.token) is None

    @pytest.mark.asyncio
    async def test_expired_token_is_not_consumed(self, integration_env):
        repo = await integration_env.get(LinkingTokenRepository)
        token = await _stored_token(integration_env, ttl=timedelta(seconds=-1))

        consumed = await repo.consume(
            token.token, token.user_id, token.provider, datetime.now(timezone.utc)
        )

        assert consumed is None
        assert await repo.find(token.token) is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mismatch", ["user", "provider"])
    async def test_misscoped_token_is_not_consumed(self, integration_env, mismatch):
        """A token only opens for the user and provider it was issued to."""
        # Arrange
        repo = await integration_env.get(LinkingTokenRepository)
        token = await _stored_token(integration_env)
        other = await _stored_token(integration_env)
        user_id = other.user_id if mismatch == "user" else token.user_id
        provider = AuthProvider.GOOGLE if mismatch == "provider" else token.provider

        # Act
        consumed = await repo.consume(
            token.token, user_id, provider, datetime.now(timezone.utc)
        )

        # Assert
        assert consumed is None
        assert await repo.find(token.token) is not None

    @pytest.mark.asyncio
    async def test_required_handshake_leaves_pending_token(self, integration_env):
        # Arrange
        repo = await integration_env.get(LinkingTokenRepository)
        pending = await _stored_token(integration_env)
        ready = await _stored_token(integration_env, subject_id="discord-alice")
        now = datetime.now(timezone.utc)

        # Act
        refused = await repo.consume(
            pending.token, pending.user_id, pending.provider, now, require_handshake=True
        )
        accepted = await repo.consume(
            ready.token, ready.user_id, ready.provider, now, require_handshake=True
        )

        # Assert
        assert refused is None
        assert await repo.find(pending.token) is not None
        assert accepted is not None
        assert accepted.subject_id == "discord-alice"

    @pytest.mark.asyncio
    async def test_concurrent_consume_has_one_winner(self, integration_env):
        """Two sessions racing on one token: exactly one gets it."""
        # Arrange
        session_factory = await integration_env.get(async_sessionmaker[AsyncSession])
        token = await _stored_token(integration_env)

        # Act
        results = await asyncio.gather(
            _consume_in_own_session(session_factory, token),
            _consume_in_own_session(session_factory, token),
        )

        # Assert
        winners = [r for r in results if r is not None]
        assert len(winners) == 1
        assert winners[0].token == token.token


class TestRecordHandshake:
    """Tests for record_handshake()."""

    @pytest.mark.asyncio
    async def test_records_identity_once(self, integration_env):
        # Arrange
        repo = await integration_env.get(LinkingTokenRepository)
        token = await _stored_token(integration_env)
        now = datetime.now(timezone.utc)

        # Act
        first = await repo.record_handshake(
            token.token, token.user_id, token.provider, "discord-alice", "alice", now
        )
        second = await repo.record_handshake(
            token.token, token.user_id, token.provider, "discord-mallory", "mallory", now
        )

        # Assert
        assert first is True
        assert second is False
        stored = await repo.find(token.token)
        assert stored.subject_id == "discord-alice"
        assert stored.subject_handle == "alice"


class TestDeleteExpired:
    """Tests for delete_expired()."""

    @pytest.mark.asyncio
    async def test_removes_only_expired(self, integration_env):
        repo = await integration_env.get(LinkingTokenRepository)
        expired = await _stored_token(integration_env, ttl=timedelta(seconds=-1))
        live = await _stored_token(integration_env)

        removed = await repo.delete_expired(datetime.now(timezone.utc))

        assert removed == 1
        assert await repo.find(expired.token) is None
        assert await repo.find(live.token) is not None

