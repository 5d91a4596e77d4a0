"""Request gatekeeper middleware.

Runs before routing on every HTTP request: resolves the session cookie,
asks the Gatekeeper for a decision, and either redirects or passes the
request on with ``request.state.session`` set.

Must sit inside the dishka middleware, which opens the request scope
this middleware resolves its services from.
"""

from dishka import AsyncContainer
from starlette.requests import Request
from starlette.responses import RedirectResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from lynkr.config import Settings
from lynkr.domain.model.session import Session
from lynkr.domain.service import Gatekeeper, SessionResolver
from lynkr.util.logging import get_logger

logger = get_logger(__name__)


class GatekeeperMiddleware:
    """ASGI middleware enforcing login, onboarding and ban rules."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        request = Request(scope, receive=receive)
        container: AsyncContainer = request.state.dishka_container
        settings = await container.get(Settings)
        gatekeeper = await container.get(Gatekeeper)

        session = await self._resolve(request, container, settings)
        request.state.session = session

        decision = gatekeeper.decide(
            request.url.path,
            session,
            request.query_params.get(settings.gatekeeper.callback_param),
        )
        if not decision.allowed:
            logger.info(
                f"Gatekeeper redirect: path={request.url.path} target={decision.target} "
                f"authenticated={session is not None}"
            )
            response = RedirectResponse(url=decision.target, status_code=302)
            return await response(scope, receive, send)

        return await self.app(scope, receive, send)

    async def _resolve(
        self, request: Request, container: AsyncContainer, settings: Settings
    ) -> Session | None:
        """Resolve the caller, treating any resolution failure as anonymous."""
        credential = request.cookies.get(settings.auth.cookie_name)
        if not credential:
            return None

        try:
            resolver = await container.get(SessionResolver)
            return await resolver.resolve(credential)
        except Exception:
            logger.exception("Session resolution failed; treating request as anonymous")
            return None
