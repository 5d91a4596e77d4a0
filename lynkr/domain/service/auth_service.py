"""Authentication domain service."""

import logfire

from lynkr.domain.error import ValidationError
from lynkr.domain.value.types import AuthProvider, OAuthProviderInfo

from .base import Service


class OAuthClient:
    """Generic OAuth client interface for all providers."""

    async def initiate_authorization(self, state: str) -> str:
        """Initiate OAuth authorization flow.

        Args:
            state: Signed state value round-tripped through the provider

        Returns:
            Authorization URL to redirect user to
        """
        raise NotImplementedError

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        """Complete OAuth authorization flow.

        Args:
            code: Authorization code from OAuth callback
            state: State parameter for verification

        Returns:
            Provider user information

        Raises:
            ProviderError: If the provider rejects the code or is unreachable
        """
        raise NotImplementedError


class AuthService(Service):
    """Domain service for multi-provider authentication operations.

    Coordinates OAuth round-trips across Google, GitHub and Discord.
    """

    def __init__(self, oauth_clients: dict[AuthProvider, OAuthClient]) -> None:
        """Initialize auth service.

        Args:
            oauth_clients: Map of provider to OAuth client implementation
        """
        self.oauth_clients = oauth_clients

    def _client(self, provider: AuthProvider) -> OAuthClient:
        client = self.oauth_clients.get(provider)
        if not client:
            raise ValidationError(f"Unsupported provider: {provider.value}")
        return client

    async def initiate_login(self, provider: AuthProvider, state: str) -> str:
        """Build the authorization URL for any provider.

        Args:
            provider: Identity provider to use
            state: Signed state value

        Returns:
            Authorization URL to redirect user to

        Raises:
            ValidationError: If provider not supported
        """
        with logfire.span("auth_service.initiate_login", provider=provider.value):
            return await self._client(provider).initiate_authorization(state)

    async def complete_login(
        self, provider: AuthProvider, code: str, state: str
    ) -> OAuthProviderInfo:
        """Exchange the callback code for the provider identity.

        Args:
            provider: Identity provider used
            code: Authorization code from OAuth callback
            state: State parameter for verification

        Returns:
            User identity from the provider

        Raises:
            ValidationError: If provider not supported
            ProviderError: If the handshake fails
        """
        with logfire.span("auth_service.complete_login", provider=provider.value):
            info = await self._client(provider).complete_authorization(code, state)
            logfire.info(
                "Provider handshake completed",
                provider=provider.value,
                provider_user_id=info.provider_user_id,
            )
            return info
