"""FastAPI application."""

import logging
from contextlib import asynccontextmanager

from dishka import AsyncContainer
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lynkr.config import Settings
from lynkr.domain.error import DomainError
from lynkr.domain.value.types import AuthProvider
from lynkr.interface.api.middleware import GatekeeperMiddleware
from lynkr.interface.api.routes import accounts, auth, health, staff, users
from lynkr.interface.error import INTERNAL_ERROR_DETAIL, map_domain_error
from lynkr.util.di.container import create_container, setup_di
from lynkr.util.error import ConfigurationError
from lynkr.util.observability import instrument_fastapi, instrument_httpx

logger = logging.getLogger(__name__)

DEFAULT_SECRET = "CHANGE_ME_IN_PRODUCTION"


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Runs the APP-scope finalizers, e.g. disposing the database engine
    await app.state.dishka_container.close()


def check_production_settings(settings: Settings) -> None:
    """Refuse to start in production with placeholder secrets.

    Raises:
        ConfigurationError: If a secret still has its default value
    """
    if not settings.is_production:
        return

    if settings.auth.jwt_secret == DEFAULT_SECRET:
        raise ConfigurationError("AUTH__JWT_SECRET must be set in production")
    for provider in AuthProvider:
        provider_settings = getattr(settings.auth, provider.value)
        if provider_settings.client_secret == DEFAULT_SECRET:
            raise ConfigurationError(
                f"AUTH__{provider.value.upper()}__CLIENT_SECRET must be set in production"
            )


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application.

    Services come from the production container unless one is given;
    tests pass a container wired to in-memory persistence and mock OAuth
    clients.

    Note: Logfire should be configured before calling this function.
    In production, start_app.py handles this.
    In tests, conftest.py does.
    """
    settings = Settings()
    check_production_settings(settings)

    # Instrument httpx for outbound provider calls
    # (Logfire must be configured before instrumentation)
    instrument_httpx()

    app_instance = FastAPI(
        title="Lynkr API",
        description="Identity linking for Lynkr: sign-in, account linking and request gating",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    instrument_fastapi(app_instance)

    # Gatekeeper runs inside CORS so preflight responses are never redirected
    app_instance.add_middleware(GatekeeperMiddleware)
    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=[
            settings.api.frontend_url,
            "http://localhost:3000",  # Local development
        ],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "Accept",
            "Origin",
            "User-Agent",
            "Cache-Control",
            "X-Requested-With",
        ],
        expose_headers=["Content-Length", "Content-Type"],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    # Setup dependency injection
    # Added last so its request scope wraps the gatekeeper
    setup_di(app_instance, container or create_container())

    # Register routes
    app_instance.include_router(health.router)
    app_instance.include_router(auth.router)
    app_instance.include_router(accounts.router)
    app_instance.include_router(users.router)
    app_instance.include_router(staff.router)

    @app_instance.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        http_exc = map_domain_error(exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content={"detail": http_exc.detail},
        )

    @app_instance.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": INTERNAL_ERROR_DETAIL},
        )

    return app_instance


# Create app instance for uvicorn
# Note: Logfire must be configured before this module is imported
# In production: start_app.py handles this
# In tests: configure in conftest.py
app = create_app()
