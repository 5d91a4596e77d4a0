"""HTTP client that drives the account-linking flow.

Reads the URL the browser landed on after a provider redirect, asks
``next_action`` what to do, and performs that step against the API.
"""

import asyncio
from typing import Awaitable, Callable

import httpx
import logfire
from pydantic import BaseModel

from lynkr.domain.service.linking_flow import (
    FlowAction,
    FlowStep,
    LinkOutcome,
    next_action,
    settle_completion,
)
from lynkr.domain.value.types import AuthProvider
from lynkr.util.logging import redact_token

LINK_FAILED_MESSAGE = "Failed to complete account linking"


class LinkedAccount(BaseModel):
    provider: AuthProvider
    provider_handle: str | None = None


class FlowResult(BaseModel):
    """What one call to ``resume`` did."""

    action: FlowAction
    authorization_url: str | None = None  # Where to send the browser next
    outcome: LinkOutcome | None = None
    accounts: list[LinkedAccount] = []
    error: str | None = None


class LinkingFlowClient:
    """Drive the linking flow through the HTTP API.

    Args:
        client: httpx client carrying the session cookie
        quiescence_seconds: Pause before the second provider handshake
        sleep: Awaitable sleep, replaceable in tests
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        quiescence_seconds: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.client = client
        self.quiescence_seconds = quiescence_seconds
        self._sleep = sleep
        self._completed: dict[str, FlowResult] = {}

    async def start(self, provider: AuthProvider) -> str:
        """Ask to add ``provider``; returns the re-authentication URL."""
        response = await self.client.post(
            "/auth/link/start", json={"provider": provider.value}
        )
        response.raise_for_status()
        return response.json()["authorization_url"]

    async def linked_accounts(self) -> list[LinkedAccount]:
        response = await self.client.get("/linked-accounts")
        response.raise_for_status()
        return [LinkedAccount.model_validate(item) for item in response.json()]

    async def resume(self, url: str) -> FlowResult:
        """Perform the step the landing URL calls for.

        Completing the same token twice returns the first result without
        another request.
        """
        action = next_action(url, self.quiescence_seconds)

        if action.step == FlowStep.START_HANDSHAKE:
            return await self._start_handshake(action)
        if action.step == FlowStep.COMPLETE_LINK:
            if action.token in self._completed:
                return self._completed[action.token]
            result = await self._complete(action)
            self._completed[action.token] = result
            return result
        if action.step == FlowStep.REFRESH:
            accounts = await self._accounts_if_allowed()
            if accounts is None:
                return FlowResult(
                    action=action, outcome=LinkOutcome.FAILED, error=LINK_FAILED_MESSAGE
                )
            return FlowResult(action=action, accounts=accounts)
        if action.step == FlowStep.SHOW_ERROR:
            return FlowResult(
                action=action,
                outcome=LinkOutcome.FAILED,
                error=LINK_FAILED_MESSAGE,
            )
        return FlowResult(action=action)

    async def _start_handshake(self, action: FlowAction) -> FlowResult:
        if action.delay_seconds > 0:
            await self._sleep(action.delay_seconds)

        response = await self.client.post(
            "/auth/link/handshake",
            json={"token": action.token, "provider": action.link_provider.value},
        )
        if not response.is_success:
            logfire.warn(
                "Linking handshake refused",
                status_code=response.status_code,
                token=redact_token(action.token),
            )
            return FlowResult(
                action=action,
                outcome=LinkOutcome.FAILED,
                error=_error_detail(response),
            )
        return FlowResult(
            action=action, authorization_url=response.json()["authorization_url"]
        )

    async def _complete(self, action: FlowAction) -> FlowResult:
        payload = {"token": action.token}
        if action.link_provider is not None:
            payload["provider"] = action.link_provider.value
        response = await self.client.post("/process-link", json=payload)

        if response.is_success:
            accounts = [LinkedAccount.model_validate(item) for item in response.json()]
            return FlowResult(action=action, outcome=LinkOutcome.LINKED, accounts=accounts)

        accounts = await self._accounts_if_allowed()
        if accounts is None:
            logfire.warn(
                "Linking completion refused",
                status_code=response.status_code,
                token=redact_token(action.token),
            )
            return FlowResult(
                action=action, outcome=LinkOutcome.FAILED, error=LINK_FAILED_MESSAGE
            )
        outcome = settle_completion(
            response.status_code,
            action.link_provider,
            {account.provider for account in accounts},
        )
        return FlowResult(
            action=action,
            outcome=outcome,
            accounts=accounts,
            error=None if outcome == LinkOutcome.ALREADY_LINKED else _error_detail(response),
        )

    async def _accounts_if_allowed(self) -> list[LinkedAccount] | None:
        """Linked accounts, or None when the API turns the session away.

        A user banned or signed out mid-flow gets a gatekeeper redirect
        instead of the list.
        """
        try:
            return await self.linked_accounts()
        except httpx.HTTPStatusError as e:
            logfire.warn("Linked accounts unavailable", status_code=e.response.status_code)
            return None


def _error_detail(response: httpx.Response) -> str:
    """The API's error detail; gatekeeper redirects carry no JSON body."""
    if response.headers.get("content-type", "").startswith("application/json"):
        detail = response.json().get("detail")
        if isinstance(detail, str):
            return detail
    return LINK_FAILED_MESSAGE
