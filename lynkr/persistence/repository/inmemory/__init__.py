"""In-memory repository implementations for testing."""

from .account import InMemoryAccountRepository
from .linking_token import InMemoryLinkingTokenRepository
from .user import InMemoryUserRepository

__all__ = [
    "InMemoryAccountRepository",
    "InMemoryLinkingTokenRepository",
    "InMemoryUserRepository",
]
