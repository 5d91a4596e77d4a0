"""Core DI providers."""

from dishka import Scope, provide

from lynkr.config import Settings
from lynkr.util.di.base import ProviderBase


class ConfigProvider(ProviderBase):
    """Config component base.

    Mockable so tests can run with a fixed signing secret and no
    quiescence pause regardless of the environment.
    """

    __mock_component__ = "config"


class ProdConfigProvider(ConfigProvider):
    """Production config provider.

    Settings are loaded from environment variables and .env file automatically.
    """

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()
