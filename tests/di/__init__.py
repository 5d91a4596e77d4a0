"""Mock providers for testing."""

from .config import MockConfigProvider, build_test_settings
from .oauth import MockOAuthProvider
from .persistence import MockPersistenceProvider
from .container import build_test_container

__all__ = [
    "MockConfigProvider",
    "MockOAuthProvider",
    "MockPersistenceProvider",
    "build_test_container",
    "build_test_settings",
]
