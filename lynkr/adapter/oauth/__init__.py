"""OAuth provider clients."""

from lynkr.adapter.oauth.client import PROVIDER_ENDPOINTS, RealOAuthClient
from lynkr.adapter.oauth.mock import MockOAuthClient
from lynkr.config import AuthSettings
from lynkr.domain.service.auth_service import OAuthClient
from lynkr.domain.value.types import AuthProvider


def build_oauth_clients(settings: AuthSettings) -> dict[AuthProvider, OAuthClient]:
    """Create one real client per supported provider."""
    return {
        provider: RealOAuthClient(
            provider,
            getattr(settings, provider.value),
            timeout=settings.provider_timeout_seconds,
            state_expiry_seconds=settings.state_expiry_seconds,
        )
        for provider in PROVIDER_ENDPOINTS
    }


def build_mock_oauth_clients() -> dict[AuthProvider, OAuthClient]:
    """Create one mock client per supported provider."""
    return {provider: MockOAuthClient(provider) for provider in AuthProvider}


__all__ = [
    "MockOAuthClient",
    "RealOAuthClient",
    "build_oauth_clients",
    "build_mock_oauth_clients",
]
