"""OAuth 2.0 authorization-code client for Google, GitHub and Discord.

Implements the authorization code flow with PKCE.
"""

import hashlib
import secrets
import time
from base64 import urlsafe_b64encode
from typing import Any, Callable
from urllib.parse import urlencode

import httpx
import logfire
from pydantic import BaseModel

from lynkr.adapter.error import ProviderError
from lynkr.config import OAuthProviderSettings
from lynkr.domain.service.auth_service import OAuthClient
from lynkr.domain.value.types import AuthProvider, OAuthProviderInfo


def _google_profile(data: dict[str, Any]) -> OAuthProviderInfo:
    return OAuthProviderInfo(
        provider=AuthProvider.GOOGLE,
        provider_user_id=str(data["sub"]),
        handle=data.get("email") or str(data["sub"]),
        email=data.get("email"),
        display_name=data.get("name"),
        avatar_url=data.get("picture"),
    )


def _github_profile(data: dict[str, Any]) -> OAuthProviderInfo:
    return OAuthProviderInfo(
        provider=AuthProvider.GITHUB,
        provider_user_id=str(data["id"]),  # Numeric id survives username changes
        handle=data["login"],
        email=data.get("email"),
        display_name=data.get("name"),
        avatar_url=data.get("avatar_url"),
    )


def _discord_profile(data: dict[str, Any]) -> OAuthProviderInfo:
    avatar = data.get("avatar")
    return OAuthProviderInfo(
        provider=AuthProvider.DISCORD,
        provider_user_id=str(data["id"]),
        handle=data["username"],
        email=data.get("email"),
        display_name=data.get("global_name"),
        avatar_url=(
            f"https://cdn.discordapp.com/avatars/{data['id']}/{avatar}.png"
            if avatar
            else None
        ),
    )


class ProviderEndpoints(BaseModel):
    """Static OAuth endpoints and scopes for one provider."""

    authorize_url: str
    token_url: str
    user_info_url: str
    scope: str


PROVIDER_ENDPOINTS: dict[AuthProvider, ProviderEndpoints] = {
    AuthProvider.GOOGLE: ProviderEndpoints(
        authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
        token_url="https://oauth2.googleapis.com/token",
        user_info_url="https://openidconnect.googleapis.com/v1/userinfo",
        scope="openid email profile",
    ),
    AuthProvider.GITHUB: ProviderEndpoints(
        authorize_url="https://github.com/login/oauth/authorize",
        token_url="https://github.com/login/oauth/access_token",
        user_info_url="https://api.github.com/user",
        scope="read:user user:email",
    ),
    AuthProvider.DISCORD: ProviderEndpoints(
        authorize_url="https://discord.com/oauth2/authorize",
        token_url="https://discord.com/api/oauth2/token",
        user_info_url="https://discord.com/api/users/@me",
        scope="identify email",
    ),
}

PROFILE_PARSERS: dict[AuthProvider, Callable[[dict[str, Any]], OAuthProviderInfo]] = {
    AuthProvider.GOOGLE: _google_profile,
    AuthProvider.GITHUB: _github_profile,
    AuthProvider.DISCORD: _discord_profile,
}


class RealOAuthClient(OAuthClient):
    """OAuth 2.0 client with PKCE for one provider."""

    def __init__(
        self,
        provider: AuthProvider,
        settings: OAuthProviderSettings,
        timeout: float = 30.0,
        state_expiry_seconds: int = 600,
    ) -> None:
        """Initialize OAuth client.

        Args:
            provider: Which provider this client talks to
            settings: Client credentials and callback URL
            timeout: Per-request timeout in seconds
            state_expiry_seconds: How long a started flow may take to come back
        """
        self.provider = provider
        self.client_id = settings.client_id
        self.client_secret = settings.client_secret
        self.redirect_uri = settings.callback_url
        self.endpoints = PROVIDER_ENDPOINTS[provider]
        self.timeout = timeout
        self.state_expiry_seconds = state_expiry_seconds

        # PKCE verifiers per state with their monotonic start time. Held in
        # process memory, so the callback must reach the worker that started
        # the flow; entries older than the state expiry are pruned.
        self._pkce_verifiers: dict[str, tuple[str, float]] = {}

    def _prune_verifiers(self, now: float) -> None:
        cutoff = now - self.state_expiry_seconds
        expired = [
            state
            for state, (_, started) in self._pkce_verifiers.items()
            if started <= cutoff
        ]
        for state in expired:
            del self._pkce_verifiers[state]

    def _generate_pkce_pair(self) -> tuple[str, str]:
        """Generate PKCE code verifier and challenge.

        Returns:
            Tuple of (verifier, challenge)
        """
        code_verifier = urlsafe_b64encode(secrets.token_bytes(32)).decode("utf-8")
        code_verifier = code_verifier.rstrip("=")

        challenge_bytes = hashlib.sha256(code_verifier.encode("utf-8")).digest()
        code_challenge = urlsafe_b64encode(challenge_bytes).decode("utf-8")
        code_challenge = code_challenge.rstrip("=")

        return code_verifier, code_challenge

    async def initiate_authorization(self, state: str) -> str:
        now = time.monotonic()
        self._prune_verifiers(now)

        code_verifier, code_challenge = self._generate_pkce_pair()
        self._pkce_verifiers[state] = (code_verifier, now)

        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": self.endpoints.scope,
            "state": state,
            "code_challenge": code_challenge,
            "code_challenge_method": "S256",
        }
        if self.provider == AuthProvider.GOOGLE:
            # Always show the account chooser, so re-auth proves presence
            params["prompt"] = "select_account"

        logfire.info(
            "OAuth authorization initiated",
            provider=self.provider.value,
            redirect_uri=self.redirect_uri,
        )

        return f"{self.endpoints.authorize_url}?{urlencode(params)}"

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        """Exchange the code and fetch the user's profile.

        Raises:
            ProviderError: If any step of the exchange fails
        """
        self._prune_verifiers(time.monotonic())
        entry = self._pkce_verifiers.pop(state, None)
        if not entry:
            raise ProviderError("Invalid state or PKCE verifier not found")
        code_verifier, _ = entry

        access_token = await self._exchange_code_for_token(code, code_verifier)
        profile = await self._get_user_info(access_token)

        try:
            info = PROFILE_PARSERS[self.provider](profile)
        except (KeyError, ValueError) as e:
            raise ProviderError(f"Unexpected {self.provider.value} profile: {e}")

        logfire.info(
            "OAuth completed",
            provider=self.provider.value,
            provider_user_id=info.provider_user_id,
        )
        return info

    async def _exchange_code_for_token(self, code: str, code_verifier: str) -> str:
        data = {
            "code": code,
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "code_verifier": code_verifier,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.endpoints.token_url,
                    data=data,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as e:
            logfire.error(
                "Token exchange HTTP error", provider=self.provider.value, error=str(e)
            )
            raise ProviderError(f"HTTP error during token exchange: {e}")

        if response.status_code != 200:
            logfire.error(
                "Token exchange failed",
                provider=self.provider.value,
                status_code=response.status_code,
                error=response.text,
            )
            raise ProviderError(f"Token exchange failed: {response.status_code}")

        result = response.json()
        if "access_token" not in result:
            # GitHub reports errors with a 200 status
            raise ProviderError(f"Token exchange failed: {result.get('error', 'unknown')}")
        return result["access_token"]

    async def _get_user_info(self, access_token: str) -> dict:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    self.endpoints.user_info_url,
                    headers={
                        "Authorization": f"Bearer {access_token}",
                        "Accept": "application/json",
                    },
                )
        except httpx.HTTPError as e:
            logfire.error(
                "User info HTTP error", provider=self.provider.value, error=str(e)
            )
            raise ProviderError(f"HTTP error fetching user info: {e}")

        if response.status_code != 200:
            logfire.error(
                "User info request failed",
                provider=self.provider.value,
                status_code=response.status_code,
                error=response.text,
            )
            raise ProviderError(f"User info request failed: {response.status_code}")

        return response.json()
