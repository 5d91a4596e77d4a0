"""Unit tests for dependency injection wiring."""

import pytest

from lynkr.config import Settings
from lynkr.domain.repository import UserRepository
from lynkr.domain.service import AccountService, Gatekeeper, LinkingTokenService
from lynkr.persistence.repository import PostgresUserRepository
from lynkr.persistence.repository.inmemory import (
    InMemoryAccountRepository,
    InMemoryUserRepository,
)
from lynkr.util.di import (
    PersistenceProvider,
    ProdDomainProvider,
    ProdPersistenceProvider,
    get_provider,
)
from lynkr.util.di.container import create_container
from tests.di import MockPersistenceProvider, build_test_container
from tests.harness import create_env_fixture, repositories_of

unit_env = create_env_fixture()


class TestGetProvider:
    def test_concrete_provider_is_used_as_is(self):
        assert get_provider(ProdDomainProvider) is ProdDomainProvider

    def test_mockable_component_selects_by_flag(self):
        assert get_provider(PersistenceProvider, use_mock=False) is ProdPersistenceProvider
        assert get_provider(PersistenceProvider, use_mock=True) is MockPersistenceProvider

    def test_unknown_component_rejected(self):
        with pytest.raises(ValueError, match="Unknown components"):
            build_test_container(unmock={"bluesky"})


class TestTestContainer:
    @pytest.mark.asyncio
    async def test_services_share_in_memory_repositories(self, unit_env):
        # Arrange
        repos = await repositories_of(unit_env)

        # Act
        service = await unit_env.get(AccountService)

        # Assert
        assert isinstance(repos.users, InMemoryUserRepository)
        assert isinstance(repos.accounts, InMemoryAccountRepository)
        assert service.account_repository is repos.accounts
        assert service.user_repository is repos.users

    @pytest.mark.asyncio
    async def test_settings_are_test_settings(self, unit_env):
        settings = await unit_env.get(Settings)
        tokens = await unit_env.get(LinkingTokenService)

        assert settings.environment == "test"
        assert tokens.linking_settings.quiescence_seconds == 0.0

    @pytest.mark.asyncio
    async def test_gatekeeper_is_app_scoped(self, unit_env):
        assert await unit_env.get(Gatekeeper) is await unit_env.get(Gatekeeper)


class TestProductionContainer:
    @pytest.mark.asyncio
    async def test_repositories_are_postgres_backed(self):
        """Engine and session are lazy; nothing connects until a query runs."""
        container = create_container()
        try:
            async with container() as request_container:
                repository = await request_container.get(UserRepository)

                assert isinstance(repository, PostgresUserRepository)
        finally:
            await container.close()
