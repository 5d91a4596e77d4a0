"""Test harness for unit, integration and E2E tests.

Unit and E2E tests run in-process: in-memory persistence and mock OAuth
clients, so no docker services are needed. Integration tests unmock
persistence and assume PostgreSQL is running (DATABASE__URL).
"""

import asyncio
from datetime import datetime, timezone
from typing import NamedTuple
from urllib.parse import parse_qs, urlsplit
from uuid import uuid4

import httpx
import pytest
import pytest_asyncio
from dishka import AsyncContainer
from fastapi import FastAPI

from lynkr.domain.model import Account, User
from lynkr.domain.repository import (
    AccountRepository,
    LinkingTokenRepository,
    UserRepository,
)
from lynkr.domain.value import AccountId, AuthProvider, UserId
from lynkr.domain.value.types import Handle, UserRole
from lynkr.interface.api.app import create_app
from lynkr.util.di import Component
from tests.di import build_test_container


def create_env_fixture(unmock: set[Component] | None = None):
    """Factory for creating test environment fixtures.

    Creates a pytest fixture that:
    - Builds a test container with specified unmocking
    - Yields request-scoped container for service access

    Args:
        unmock: Components to use real implementations for

    Returns:
        Pytest fixture function that yields AsyncContainer

    Usage:
        # Unit tests - everything mocked, no docker needed
        unit_env = create_env_fixture()

        # Integration tests - real persistence, assumes postgres running
        integration_env = create_env_fixture(unmock={"persistence"})

        @pytest.mark.asyncio
        async def test_something(unit_env):
            service = await unit_env.get(AccountService)
    """

    @pytest_asyncio.fixture
    async def _test_environment():
        container = build_test_container(unmock=unmock or set())

        # Open request-scoped context
        async with container() as request_container:
            yield request_container

        await container.close()

    return _test_environment


def create_app_fixture():
    """Factory for a fixture yielding an app wired to in-memory state.

    Clients built on the same app share users, accounts and tokens.
    """

    @pytest.fixture
    def _app() -> FastAPI:
        return create_app(build_test_container())

    return _app


class Repositories(NamedTuple):
    """The repositories behind one test container."""

    users: UserRepository
    accounts: AccountRepository
    linking_tokens: LinkingTokenRepository


async def repositories_of(container: AsyncContainer) -> Repositories:
    return Repositories(
        users=await container.get(UserRepository),
        accounts=await container.get(AccountRepository),
        linking_tokens=await container.get(LinkingTokenRepository),
    )


async def app_repositories(app: FastAPI) -> Repositories:
    """Repositories of a test app; in-memory ones are APP-scoped."""
    return await repositories_of(app.state.dishka_container)


def resolve_repositories(app: FastAPI) -> Repositories:
    """Synchronous variant of app_repositories for TestClient tests."""
    return asyncio.run(app_repositories(app))


def state_of(authorization_url: str) -> str:
    """Extract the signed OAuth state from a (mock) authorization URL."""
    return parse_qs(urlsplit(authorization_url).query)["state"][0]


def query_of(url: str) -> dict[str, str]:
    return {key: values[0] for key, values in parse_qs(urlsplit(url).query).items()}


def callback(
    client,
    provider: AuthProvider,
    code: str,
    authorization_url: str,
) -> httpx.Response:
    """Simulate the provider redirecting the browser back to the API."""
    return client.get(
        f"/auth/callback/{provider.value}",
        params={"code": code, "state": state_of(authorization_url)},
        follow_redirects=False,
    )


def sign_in(client, provider: AuthProvider, code: str, handle: str | None = None):
    """Sign in through the mock provider; optionally finish onboarding."""
    started = client.post("/auth/login", json={"provider": provider.value})
    response = callback(client, provider, code, started.json()["authorization_url"])
    if handle:
        claimed = client.put("/users/me/handle", json={"handle": handle})
        assert claimed.status_code == 200
    return response


async def async_sign_in(
    client: httpx.AsyncClient, provider: AuthProvider, code: str, handle: str
) -> None:
    started = await client.post("/auth/login", json={"provider": provider.value})
    await client.get(
        f"/auth/callback/{provider.value}",
        params={"code": code, "state": state_of(started.json()["authorization_url"])},
    )
    await client.put("/users/me/handle", json={"handle": handle})


async def seed_user(
    repositories: Repositories,
    *providers: AuthProvider,
    handle: str | None = "seeded",
    role: UserRole = UserRole.USER,
    banned: bool = False,
    code: str | None = None,
) -> User:
    """Store a user with one account per provider, oldest first.

    Subject ids follow the mock OAuth client: ``{provider}-{code}``.
    """
    code = code or handle or uuid4().hex[:8]
    user = User(
        id=UserId(uuid4()),
        name=code.title(),
        handle=Handle(handle) if handle else None,
        role=role,
        banned=banned,
    )
    await repositories.users.save(user)

    for index, provider in enumerate(providers):
        await repositories.accounts.add(
            Account(
                id=AccountId(uuid4()),
                user_id=user.id,
                provider=provider,
                subject_id=f"{provider.value}-{code}",
                provider_handle=code,
                created_at=datetime(2025, 1, 1 + index, tzinfo=timezone.utc),
            )
        )
    return user


__all__ = [
    "Repositories",
    "repositories_of",
    "app_repositories",
    "resolve_repositories",
    "create_env_fixture",
    "create_app_fixture",
    "state_of",
    "query_of",
    "callback",
    "sign_in",
    "async_sign_in",
    "seed_user",
]
