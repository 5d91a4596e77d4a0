"""OAuth infrastructure providers for multi-provider authentication."""

from dishka import Scope, provide

from lynkr.adapter.oauth import build_oauth_clients
from lynkr.config import Settings
from lynkr.domain.service.auth_service import OAuthClient
from lynkr.domain.value import AuthProvider
from lynkr.util.di.base import ProviderBase


class OAuthProvider(ProviderBase):
    """OAuth component base."""

    __mock_component__ = "oauth"


class ProdOAuthProvider(OAuthProvider):
    """Production OAuth provider: one real client per identity provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_oauth_clients(self, settings: Settings) -> dict[AuthProvider, OAuthClient]:
        """Provide dictionary of all OAuth clients by provider.

        APP scope: a client keeps the PKCE verifier of every authorization
        it started until the callback arrives, so it must outlive the request.
        """
        return build_oauth_clients(settings.auth)
