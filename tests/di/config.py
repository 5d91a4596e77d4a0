"""Mock config provider for testing."""

from typing import Any

from dishka import Scope, provide

from lynkr.config import AuthSettings, LinkingSettings, Settings
from lynkr.util.di.core import ConfigProvider


def build_test_settings(**overrides: Any) -> Settings:
    """Settings for tests: http URLs, no quiescence pause."""
    overrides.setdefault("auth", AuthSettings(jwt_secret="lynkr-test-suite-signing-secret-000"))
    overrides.setdefault("linking", LinkingSettings(quiescence_seconds=0.0))
    return Settings(environment="test", **overrides)


class MockConfigProvider(ConfigProvider):
    """Fixed test settings; the database URL still comes from the environment."""

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        return build_test_settings()
