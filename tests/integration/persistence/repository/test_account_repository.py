"""Integration tests for PostgresAccountRepository.

These tests verify that unlinking serializes on the user row, so two
concurrent unlinks never leave a user without an account.
"""

import asyncio
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lynkr.domain.model.account import Account
from lynkr.domain.model.user import User
from lynkr.domain.repository import AccountRepository, DeleteOutcome
from lynkr.domain.value import AccountId, AuthProvider, UserId
from lynkr.persistence.repository import PostgresAccountRepository
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


async def _committed_user(integration_env, *providers: AuthProvider) -> User:
    repos = await repositories_of(integration_env)
    user = await seed_user(repos, *providers, handle=f"u{uuid4().hex[:8]}")
    await (await integration_env.get(AsyncSession)).commit()
    return user


async def _unlink_in_own_session(
    session_factory: async_sessionmaker[AsyncSession],
    account_id: AccountId,
    user_id: UserId,
) -> DeleteOutcome:
    async with session_factory() as session:
        outcome = await PostgresAccountRepository(session).delete_unless_last(
            account_id, user_id
        )
        await session.commit()
        return outcome


class TestAdd:
    """Tests for add()."""

    @pytest.mark.asyncio
    async def test_duplicate_identity_is_not_added(self, integration_env):
        """Unique (provider, subject_id): a second insert returns None."""
        # Arrange
        repo = await integration_env.get(AccountRepository)
        alice = await _committed_user(integration_env, AuthProvider.GITHUB)
        bob = await _committed_user(integration_env, AuthProvider.DISCORD)
        alices = (await repo.find_all_by_user_id(alice.id))[0]

        # Act
        added = await repo.add(
            Account(
                id=AccountId(uuid4()),
                user_id=bob.id,
                provider=alices.provider,
                subject_id=alices.subject_id,
            )
        )

        # Assert
        assert added is None
        owner = await repo.find_by_provider(alices.provider, alices.subject_id)
        assert owner.user_id == alice.id


class TestDeleteUnlessLast:
    """Tests for delete_unless_last()."""

    @pytest.mark.asyncio
    async def test_outcomes(self, integration_env):
        # Arrange
        repo = await integration_env.get(AccountRepository)
        user = await _committed_user(integration_env, AuthProvider.GITHUB, AuthProvider.DISCORD)
        github, discord = await repo.find_all_by_user_id(user.id)

        # Act
        deleted = await repo.delete_unless_last(discord.id, user.id)
        gone = await repo.delete_unless_last(discord.id, user.id)
        last = await repo.delete_unless_last(github.id, user.id)

        # Assert
        assert deleted == DeleteOutcome.DELETED
        assert gone == DeleteOutcome.NOT_FOUND
        assert last == DeleteOutcome.LAST_ACCOUNT
        assert [a.id for a in await repo.find_all_by_user_id(user.id)] == [github.id]

    @pytest.mark.asyncio
    async def test_account_of_other_user_is_not_found(self, integration_env):
        repo = await integration_env.get(AccountRepository)
        bob = await _committed_user(integration_env, AuthProvider.GITHUB, AuthProvider.DISCORD)
        alice = await _committed_user(integration_env, AuthProvider.GITHUB, AuthProvider.DISCORD)
        bobs = (await repo.find_all_by_user_id(bob.id))[0]

        outcome = await repo.delete_unless_last(bobs.id, alice.id)

        assert outcome == DeleteOutcome.NOT_FOUND
        assert len(await repo.find_all_by_user_id(bob.id)) == 2

    @pytest.mark.asyncio
    async def test_concurrent_unlink_keeps_one_account(self, integration_env):
        """Unlinking both of two accounts from two sessions leaves exactly one."""
        # Arrange
        session_factory = await integration_env.get(async_sessionmaker[AsyncSession])
        repo = await integration_env.get(AccountRepository)
        user = await _committed_user(integration_env, AuthProvider.GITHUB, AuthProvider.DISCORD)
        github, discord = await repo.find_all_by_user_id(user.id)

        # Act
        outcomes = await asyncio.gather(
            _unlink_in_own_session(session_factory, github.id, user.id),
            _unlink_in_own_session(session_factory, discord.id, user.id),
        )

        # Assert
        assert sorted(outcomes) == sorted([DeleteOutcome.DELETED, DeleteOutcome.LAST_ACCOUNT])
        await (await integration_env.get(AsyncSession)).commit()
        assert len(await repo.find_all_by_user_id(user.id)) == 1

    @pytest.mark.asyncio
    async def test_concurrent_unlink_of_same_account(self, integration_env):
        """The loser of a race on one account sees it missing, not last."""
        # Arrange
        session_factory = await integration_env.get(async_sessionmaker[AsyncSession])
        repo = await integration_env.get(AccountRepository)
        user = await _committed_user(
            integration_env, AuthProvider.GITHUB, AuthProvider.DISCORD, AuthProvider.GOOGLE
        )
        discord = (await repo.find_all_by_user_id(user.id))[1]

        # Act
        outcomes = await asyncio.gather(
            _unlink_in_own_session(session_factory, discord.id, user.id),
            _unlink_in_own_session(session_factory, discord.id, user.id),
        )

        # Assert
        assert sorted(outcomes) == sorted([DeleteOutcome.DELETED, DeleteOutcome.NOT_FOUND])
        await (await integration_env.get(AsyncSession)).commit()
        assert len(await repo.find_all_by_user_id(user.id)) == 2
