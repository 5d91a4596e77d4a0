"""Mock OAuth client for tests and local development."""

from urllib.parse import urlencode

from lynkr.adapter.error import ProviderError
from lynkr.domain.service.auth_service import OAuthClient
from lynkr.domain.value.types import AuthProvider, OAuthProviderInfo


class MockOAuthClient(OAuthClient):
    """Deterministic OAuth client that makes no network calls.

    The authorization code doubles as the provider username, so tests pick
    which identity comes back: code ``alice`` on GitHub yields subject
    ``github-alice``. Codes starting with ``fail`` raise ProviderError.
    """

    def __init__(self, provider: AuthProvider) -> None:
        self.provider = provider

    async def initiate_authorization(self, state: str) -> str:
        params = urlencode({"state": state, "mock": "true"})
        return f"https://{self.provider.value}.example.com/oauth/authorize?{params}"

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        if code.startswith("fail"):
            raise ProviderError(f"Mock {self.provider.value} rejected code")
        return OAuthProviderInfo(
            provider=self.provider,
            provider_user_id=f"{self.provider.value}-{code}",
            handle=code,
            email=f"{code}@{self.provider.value}.example.com",
            display_name=code.title(),
        )
