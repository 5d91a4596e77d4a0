"""Mock persistence providers for testing."""

from dishka import Scope, provide

from lynkr.domain.repository import (
    AccountRepository,
    LinkingTokenRepository,
    UserRepository,
)
from lynkr.persistence.repository.inmemory import (
    InMemoryAccountRepository,
    InMemoryLinkingTokenRepository,
    InMemoryUserRepository,
)
from lynkr.util.di.infrastructure.persistence import PersistenceProvider


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider using in-memory repositories.

    Uses APP scope so every request against one app sees the same state.
    Each test builds its own container, so tests stay isolated.
    """

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_user_repository(self) -> UserRepository:
        """Provide in-memory user repository."""
        return InMemoryUserRepository()

    @provide(scope=Scope.APP)
    def get_account_repository(self) -> AccountRepository:
        """Provide in-memory account repository."""
        return InMemoryAccountRepository()

    @provide(scope=Scope.APP)
    def get_linking_token_repository(self) -> LinkingTokenRepository:
        """Provide in-memory linking token repository."""
        return InMemoryLinkingTokenRepository()
