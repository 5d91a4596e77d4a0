"""Linking flow controller.

Pure functions that read the query parameters the linking page is
redirected to and decide what the client does next. The linking token in
those parameters is the only durable record of progress, so the decision
survives reloads and lost client state.
"""

from enum import Enum
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from lynkr.domain.model.common import DomainModel
from lynkr.domain.value.types import AuthProvider, LinkAction, LinkingState

LINKING_PARAMS = frozenset({"action", "token", "linkProvider", "error"})


class FlowStep(str, Enum):
    """What the client should do with the current page URL."""

    NOOP = "noop"
    REFRESH = "refresh"
    START_HANDSHAKE = "start_handshake"
    COMPLETE_LINK = "complete_link"
    SHOW_ERROR = "show_error"


class LinkOutcome(str, Enum):
    """Result shown to the user after the completion request."""

    LINKED = "linked"
    ALREADY_LINKED = "already_linked"
    CONFLICT = "conflict"
    FAILED = "failed"


class FlowAction(DomainModel):
    """Next client action, plus the URL to replace the current one with."""

    step: FlowStep
    state: LinkingState | None = None
    token: str | None = None
    link_provider: AuthProvider | None = None
    delay_seconds: float = 0.0
    clean_url: str


def strip_linking_params(url: str) -> str:
    """Remove action, token, linkProvider and error from a URL's query."""
    parts = urlsplit(url)
    kept = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in LINKING_PARAMS
    ]
    return urlunsplit(parts._replace(query=urlencode(kept)))


def _provider(value: str | None) -> AuthProvider | None:
    if not value:
        return None
    try:
        return AuthProvider(value)
    except ValueError:
        return None


def next_action(url: str, quiescence_seconds: float) -> FlowAction:
    """Decide the next step from the linking page URL.

    Args:
        url: Current page URL, including query string
        quiescence_seconds: Pause required before a second provider handshake

    Returns:
        The action to take. Every action carries ``clean_url`` with the
        linking parameters removed, so a reload cannot repeat the step.
    """
    params = dict(parse_qsl(urlsplit(url).query, keep_blank_values=True))
    clean_url = strip_linking_params(url)
    action = params.get("action")
    token = params.get("token") or None
    link_provider = _provider(params.get("linkProvider"))

    if action == LinkAction.LINK.value:
        return FlowAction(step=FlowStep.REFRESH, clean_url=clean_url)

    if action == LinkAction.REAUTH.value and token and link_provider:
        return FlowAction(
            step=FlowStep.START_HANDSHAKE,
            state=LinkingState.REAUTH_DONE,
            token=token,
            link_provider=link_provider,
            delay_seconds=max(quiescence_seconds, 0.0),
            clean_url=clean_url,
        )

    if action == LinkAction.COMPLETE.value and token:
        return FlowAction(
            step=FlowStep.COMPLETE_LINK,
            state=LinkingState.PROVIDER_HANDSHAKE_IN_PROGRESS,
            token=token,
            link_provider=link_provider,
            clean_url=clean_url,
        )

    if action == LinkAction.ERROR.value:
        return FlowAction(
            step=FlowStep.SHOW_ERROR,
            state=LinkingState.FAILED,
            link_provider=link_provider,
            clean_url=clean_url,
        )

    return FlowAction(step=FlowStep.NOOP, clean_url=clean_url)


def settle_completion(
    status_code: int,
    link_provider: AuthProvider | None,
    linked_providers: set[AuthProvider],
) -> LinkOutcome:
    """Classify the response of the completion request.

    A rejected token for a provider the user already has means a duplicate
    invocation of a completed link, which is reported softly.
    """
    if status_code == 200:
        return LinkOutcome.LINKED
    if status_code == 409:
        return LinkOutcome.CONFLICT
    if status_code == 400 and link_provider in linked_providers:
        return LinkOutcome.ALREADY_LINKED
    return LinkOutcome.FAILED
