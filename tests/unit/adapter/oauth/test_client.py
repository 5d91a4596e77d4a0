"""Unit tests for the OAuth authorization-code client."""

import re
from base64 import urlsafe_b64encode
from hashlib import sha256
from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs, urlsplit

import pytest

from lynkr.adapter.error import ProviderError
from lynkr.adapter.oauth.client import RealOAuthClient
from lynkr.config import OAuthProviderSettings
from lynkr.domain.value.types import AuthProvider


def _client(provider: AuthProvider) -> RealOAuthClient:
    return RealOAuthClient(
        provider,
        OAuthProviderSettings(
            client_id="client-id",
            client_secret="client-secret",
            callback_url=f"http://localhost:8000/auth/callback/{provider.value}",
        ),
    )


class TestInitiateAuthorization:
    """Tests for RealOAuthClient.initiate_authorization."""

    @pytest.mark.asyncio
    async def test_builds_pkce_authorization_url(self):
        client = _client(AuthProvider.GITHUB)

        url = await client.initiate_authorization("signed-state")

        parts = urlsplit(url)
        params = {k: v[0] for k, v in parse_qs(parts.query).items()}
        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == (
            "https://github.com/login/oauth/authorize"
        )
        assert params["state"] == "signed-state"
        assert params["client_id"] == "client-id"
        assert params["redirect_uri"] == "http://localhost:8000/auth/callback/github"
        assert params["code_challenge_method"] == "S256"

        # Challenge is the SHA-256 of the stored verifier
        verifier, _ = client._pkce_verifiers["signed-state"]
        expected = urlsafe_b64encode(sha256(verifier.encode()).digest()).rstrip(b"=")
        assert params["code_challenge"] == expected.decode()
        assert re.match(r"^[A-Za-z0-9_-]+$", verifier)

    @pytest.mark.asyncio
    async def test_google_always_shows_account_chooser(self):
        url = await _client(AuthProvider.GOOGLE).initiate_authorization("s")

        assert parse_qs(urlsplit(url).query)["prompt"] == ["select_account"]

    @pytest.mark.asyncio
    async def test_abandoned_flows_are_pruned(self):
        """Verifiers older than the state expiry are dropped on the next start."""
        # Arrange
        client = _client(AuthProvider.GITHUB)
        with patch("lynkr.adapter.oauth.client.time.monotonic", return_value=1000.0):
            await client.initiate_authorization("abandoned")

        # Act
        with patch("lynkr.adapter.oauth.client.time.monotonic", return_value=1600.0):
            await client.initiate_authorization("fresh")

        # Assert
        assert set(client._pkce_verifiers) == {"fresh"}


class TestCompleteAuthorization:
    """Tests for RealOAuthClient.complete_authorization."""

    @pytest.mark.asyncio
    async def test_github_profile_uses_numeric_id(self):
        client = _client(AuthProvider.GITHUB)
        await client.initiate_authorization("s")

        with (
            patch.object(
                client, "_exchange_code_for_token", new_callable=AsyncMock
            ) as exchange,
            patch.object(client, "_get_user_info", new_callable=AsyncMock) as user_info,
        ):
            exchange.return_value = "access-token"
            user_info.return_value = {"id": 42, "login": "alice", "name": "Alice"}

            info = await client.complete_authorization("code", "s")

        assert info.provider == AuthProvider.GITHUB
        assert info.provider_user_id == "42"
        assert info.handle == "alice"
        assert info.display_name == "Alice"
        exchange.assert_awaited_once()
        assert "s" not in client._pkce_verifiers

    @pytest.mark.asyncio
    async def test_discord_avatar_url(self):
        client = _client(AuthProvider.DISCORD)
        await client.initiate_authorization("s")

        with (
            patch.object(
                client, "_exchange_code_for_token", new_callable=AsyncMock
            ) as exchange,
            patch.object(client, "_get_user_info", new_callable=AsyncMock) as user_info,
        ):
            exchange.return_value = "access-token"
            user_info.return_value = {"id": "99", "username": "alice", "avatar": "abc"}

            info = await client.complete_authorization("code", "s")

        assert info.avatar_url == "https://cdn.discordapp.com/avatars/99/abc.png"

    @pytest.mark.asyncio
    async def test_unknown_state(self):
        client = _client(AuthProvider.GITHUB)

        with pytest.raises(ProviderError):
            await client.complete_authorization("code", "never-issued")

    @pytest.mark.asyncio
    async def test_expired_state(self):
        client = _client(AuthProvider.GITHUB)
        with patch("lynkr.adapter.oauth.client.time.monotonic", return_value=1000.0):
            await client.initiate_authorization("s")

        with patch("lynkr.adapter.oauth.client.time.monotonic", return_value=1601.0):
            with pytest.raises(ProviderError):
                await client.complete_authorization("code", "s")

        assert client._pkce_verifiers == {}

    @pytest.mark.asyncio
    async def test_unexpected_profile(self):
        client = _client(AuthProvider.GITHUB)
        await client.initiate_authorization("s")

        with (
            patch.object(
                client, "_exchange_code_for_token", new_callable=AsyncMock
            ) as exchange,
            patch.object(client, "_get_user_info", new_callable=AsyncMock) as user_info,
        ):
            exchange.return_value = "access-token"
            user_info.return_value = {"login": "alice"}

            with pytest.raises(ProviderError):
                await client.complete_authorization("code", "s")
