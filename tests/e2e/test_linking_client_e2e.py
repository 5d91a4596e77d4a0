"""End-to-end tests for LinkingFlowClient against the in-process API."""

from uuid import UUID

import httpx
import pytest

from lynkr.domain.service.linking_flow import FlowStep, LinkOutcome
from lynkr.domain.value import AuthProvider, UserId
from lynkr.interface.client.linking import LINK_FAILED_MESSAGE, LinkingFlowClient
from tests.harness import app_repositories, async_sign_in, create_app_fixture, state_of

app = create_app_fixture()


class RecordingSleep:
    """Stands in for asyncio.sleep and records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def _http(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://testserver"
    )


async def _provider_redirect(
    http: httpx.AsyncClient, provider: AuthProvider, code: str, authorization_url: str
) -> str:
    response = await http.get(
        f"/auth/callback/{provider.value}",
        params={"code": code, "state": state_of(authorization_url)},
    )
    assert response.status_code == 302
    return response.headers["location"]


async def _ban_current_user(app, http: httpx.AsyncClient) -> UserId:
    """Ban the signed-in user directly in the in-memory store."""
    me = (await http.get("/auth/me")).json()
    user_id = UserId(UUID(me["user"]["user_id"]))
    await (await app_repositories(app)).users.set_banned(user_id, True)
    return user_id


class TestLinkingFlowClient:
    """Drive the whole flow the way the settings page does."""

    @pytest.mark.asyncio
    async def test_links_provider_after_quiescence(self, app):
        sleep = RecordingSleep()
        async with _http(app) as http:
            # Arrange
            await async_sign_in(http, AuthProvider.GITHUB, "alice", "alice")
            flow = LinkingFlowClient(http, quiescence_seconds=2.0, sleep=sleep)

            # Act
            reauth_url = await flow.start(AuthProvider.DISCORD)
            landing = await _provider_redirect(http, AuthProvider.GITHUB, "alice", reauth_url)
            handshake = await flow.resume(landing)
            completion = await _provider_redirect(
                http, AuthProvider.DISCORD, "alice", handshake.authorization_url
            )
            result = await flow.resume(completion)

            # Assert
            assert sleep.delays == [2.0]
            assert handshake.action.step == FlowStep.START_HANDSHAKE
            assert handshake.authorization_url.startswith("https://discord.example.com/")
            assert result.outcome == LinkOutcome.LINKED
            assert {a.provider for a in result.accounts} == {
                AuthProvider.GITHUB,
                AuthProvider.DISCORD,
            }
            assert "token" not in result.action.clean_url

    @pytest.mark.asyncio
    async def test_resume_twice_completes_once(self, app):
        async with _http(app) as http:
            # Arrange
            await async_sign_in(http, AuthProvider.GITHUB, "alice", "alice")
            flow = LinkingFlowClient(http, quiescence_seconds=0.0)
            reauth_url = await flow.start(AuthProvider.DISCORD)
            landing = await _provider_redirect(http, AuthProvider.GITHUB, "alice", reauth_url)
            handshake = await flow.resume(landing)
            completion = await _provider_redirect(
                http, AuthProvider.DISCORD, "alice", handshake.authorization_url
            )

            # Act
            first = await flow.resume(completion)
            second = await flow.resume(completion)
            # A reloaded page has lost the client-side record
            reloaded = await LinkingFlowClient(http, quiescence_seconds=0.0).resume(completion)

            # Assert
            assert first.outcome == LinkOutcome.LINKED
            assert second is first
            assert reloaded.outcome == LinkOutcome.ALREADY_LINKED
            assert reloaded.error is None
            accounts = await flow.linked_accounts()
            assert [a.provider for a in accounts] == [AuthProvider.GITHUB, AuthProvider.DISCORD]

    @pytest.mark.asyncio
    async def test_failed_reauth_reports_error(self, app):
        async with _http(app) as http:
            await async_sign_in(http, AuthProvider.GITHUB, "alice", "alice")
            flow = LinkingFlowClient(http, quiescence_seconds=0.0)
            reauth_url = await flow.start(AuthProvider.DISCORD)

            landing = await _provider_redirect(http, AuthProvider.GITHUB, "fail", reauth_url)
            result = await flow.resume(landing)

            assert result.action.step == FlowStep.SHOW_ERROR
            assert result.outcome == LinkOutcome.FAILED
            assert result.error == "Failed to complete account linking"

    @pytest.mark.asyncio
    async def test_handshake_refused_for_forged_token(self, app):
        async with _http(app) as http:
            await async_sign_in(http, AuthProvider.GITHUB, "alice", "alice")
            flow = LinkingFlowClient(http, quiescence_seconds=0.0)
            landing = (
                "http://localhost:3000/admin/settings?tab=accounts"
                "&action=reauth&token=forged-token-value&linkProvider=discord"
            )

            result = await flow.resume(landing)

            assert result.outcome == LinkOutcome.FAILED
            assert result.error == "Invalid or expired linking token"
            assert result.authorization_url is None

    @pytest.mark.asyncio
    async def test_plain_page_load_is_noop(self, app):
        async with _http(app) as http:
            flow = LinkingFlowClient(http)

            result = await flow.resume("http://localhost:3000/admin/settings?tab=accounts")

            assert result.action.step == FlowStep.NOOP
            assert result.outcome is None


class TestBannedMidFlow:
    """A ban lands between two legs of the flow; the gatekeeper answers 302."""

    @pytest.mark.asyncio
    async def test_ban_before_handshake(self, app):
        async with _http(app) as http:
            # Arrange
            await async_sign_in(http, AuthProvider.GITHUB, "alice", "alice")
            flow = LinkingFlowClient(http, quiescence_seconds=0.0)
            reauth_url = await flow.start(AuthProvider.DISCORD)
            landing = await _provider_redirect(http, AuthProvider.GITHUB, "alice", reauth_url)
            await _ban_current_user(app, http)

            # Act
            result = await flow.resume(landing)

            # Assert
            assert result.action.step == FlowStep.START_HANDSHAKE
            assert result.outcome == LinkOutcome.FAILED
            assert result.error == LINK_FAILED_MESSAGE
            assert result.authorization_url is None

    @pytest.mark.asyncio
    async def test_ban_before_completion(self, app):
        async with _http(app) as http:
            # Arrange
            await async_sign_in(http, AuthProvider.GITHUB, "alice", "alice")
            flow = LinkingFlowClient(http, quiescence_seconds=0.0)
            reauth_url = await flow.start(AuthProvider.DISCORD)
            landing = await _provider_redirect(http, AuthProvider.GITHUB, "alice", reauth_url)
            handshake = await flow.resume(landing)
            completion = await _provider_redirect(
                http, AuthProvider.DISCORD, "alice", handshake.authorization_url
            )
            user_id = await _ban_current_user(app, http)

            # Act
            result = await flow.resume(completion)

            # Assert
            assert result.outcome == LinkOutcome.FAILED
            assert result.error == LINK_FAILED_MESSAGE
            assert result.accounts == []
            accounts = await (await app_repositories(app)).accounts.find_all_by_user_id(user_id)
            assert [a.provider for a in accounts] == [AuthProvider.GITHUB]
