"""Authentication and account-linking handshake routes."""

import logging
from urllib.parse import urlencode
from uuid import UUID

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Response, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from lynkr.adapter.error import ProviderError
from lynkr.application.usecase.auth import GetCurrentUserUseCase, LoginUseCase
from lynkr.application.usecase.auth.get_current_user import (
    GetCurrentUserRequest,
    GetCurrentUserResponse,
)
from lynkr.application.usecase.auth.login import LoginRequest
from lynkr.application.usecase.base import AuthorizationResponse, CallbackResponse
from lynkr.application.usecase.linking import (
    BeginHandshakeUseCase,
    CompleteHandshakeUseCase,
    CompleteReauthUseCase,
    StartLinkUseCase,
)
from lynkr.application.usecase.linking.begin_handshake import BeginHandshakeRequest
from lynkr.application.usecase.linking.complete_handshake import (
    CompleteHandshakeRequest,
)
from lynkr.application.usecase.linking.complete_reauth import CompleteReauthRequest
from lynkr.application.usecase.linking.start_link import (
    StartLinkRequest,
    StartLinkResponse,
)
from lynkr.config import Settings
from lynkr.domain.error import DomainError, NotFoundError
from lynkr.domain.service import AuthService, JWTService
from lynkr.domain.value import AuthProvider, LinkAction, UserId
from lynkr.interface.api.cookies import clear_session_cookie, set_session_cookie
from lynkr.interface.api.dependencies import OptionalSessionDep, SessionDep
from lynkr.interface.error import map_domain_error
from lynkr.util.jwt import JWTError, StatePayload, StatePurpose

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"], route_class=DishkaRoute)

LINK_FAILED_MESSAGE = "Failed to complete account linking"


class InitiateLoginRequest(BaseModel):
    """Initiate login request."""

    provider: AuthProvider
    next: str | None = None  # Frontend path to return to after sign-in


class LogoutResponse(BaseModel):
    """Logout response."""

    success: bool
    message: str


class AuthStatusResponse(BaseModel):
    """Current authentication status for /auth/me."""

    authenticated: bool
    user: GetCurrentUserResponse | None = None


class StartLinkAPIRequest(BaseModel):
    """API request to add a provider to the current user."""

    provider: AuthProvider


class BeginHandshakeAPIRequest(BaseModel):
    """API request to start the new provider's handshake."""

    token: str
    provider: AuthProvider


@router.post("/login", response_model=AuthorizationResponse)
async def initiate_login(
    request: InitiateLoginRequest,
    auth_service: FromDishka[AuthService],
    jwt_service: FromDishka[JWTService],
) -> AuthorizationResponse:
    """Initiate OAuth login with any supported provider.

    Example:
        POST /auth/login
        {"provider": "github", "next": "/admin"}

        Response:
        {"authorization_url": "https://github.com/login/oauth/authorize?..."}
    """
    logger.info(f"Initiating {request.provider.value} login")
    state = jwt_service.create_state(
        StatePurpose.LOGIN, request.provider.value, next_url=request.next
    )
    try:
        url = await auth_service.initiate_login(request.provider, state)
    except DomainError as e:
        raise map_domain_error(e)
    return AuthorizationResponse(authorization_url=url)


@router.get("/callback/{provider}")
async def oauth_callback(
    provider: AuthProvider,
    jwt_service: FromDishka[JWTService],
    settings: FromDishka[Settings],
    session: OptionalSessionDep,
    login_use_case: FromDishka[LoginUseCase],
    reauth_use_case: FromDishka[CompleteReauthUseCase],
    handshake_use_case: FromDishka[CompleteHandshakeUseCase],
    state: str,
    code: str | None = None,
    error: str | None = None,
):
    """Handle every provider's OAuth callback.

    The signed ``state`` says which flow the round-trip belongs to:
    - login: sign in or create the user, set the session cookie
    - reauth: issue a linking token, redirect with action=reauth
    - link: record the new identity, redirect with action=complete

    Example:
        GET /auth/callback/github?code=abc123&state=eyJ...

        Redirects to: http://localhost:3000/admin/settings?tab=accounts&action=reauth&token=...&linkProvider=discord
    """
    try:
        payload = jwt_service.verify_state(state)
    except JWTError as e:
        logger.warning(f"Rejected OAuth callback state: provider={provider.value} error={e}")
        return _login_error(settings, "invalid_state")

    if payload.provider != provider.value:
        logger.warning(
            f"OAuth callback provider mismatch: path={provider.value} state={payload.provider}"
        )
        return _callback_failure(payload, settings)

    if error or not code:
        logger.info(f"Provider returned no code: provider={provider.value} error={error}")
        return _callback_failure(payload, settings)

    session_user_id = session.user_id if session else None
    logger.info(f"OAuth callback received: provider={provider.value} purpose={payload.purpose.value}")

    try:
        if payload.purpose == StatePurpose.LOGIN:
            result = await login_use_case.execute(
                LoginRequest(provider=provider, code=code, state=state, next_url=payload.next)
            )
        elif payload.purpose == StatePurpose.REAUTH:
            result = await reauth_use_case.execute(
                CompleteReauthRequest(
                    provider=provider,
                    code=code,
                    state=state,
                    user_id=UserId(UUID(payload.user_id)),
                    link_provider=AuthProvider(payload.link_provider),
                    session_user_id=session_user_id,
                )
            )
        else:
            result = await handshake_use_case.execute(
                CompleteHandshakeRequest(
                    provider=provider,
                    code=code,
                    state=state,
                    user_id=UserId(UUID(payload.user_id)),
                    link_token=payload.link_token,
                    session_user_id=session_user_id,
                )
            )
    except (ProviderError, DomainError) as e:
        logger.warning(
            f"OAuth callback failed: provider={provider.value} "
            f"purpose={payload.purpose.value} error={type(e).__name__}: {e}"
        )
        return _callback_failure(payload, settings)
    except Exception as e:
        logger.exception(f"Unexpected error during OAuth callback: {e}")
        return _callback_failure(payload, settings)

    return _redirect(result, settings)


@router.post("/logout", response_model=LogoutResponse)
async def logout(response: Response, settings: FromDishka[Settings]) -> LogoutResponse:
    """Logout user by clearing the session cookie."""
    clear_session_cookie(response, settings)
    return LogoutResponse(success=True, message="Successfully logged out")


@router.get("/me", response_model=AuthStatusResponse)
async def get_current_user(
    session: OptionalSessionDep,
    use_case: FromDishka[GetCurrentUserUseCase],
) -> AuthStatusResponse:
    """Get current user if authenticated, or return unauthenticated status.

    Safe to call without authentication.
    """
    if session is None:
        return AuthStatusResponse(authenticated=False)

    try:
        user = await use_case.execute(GetCurrentUserRequest(user_id=session.user_id))
    except NotFoundError:
        return AuthStatusResponse(authenticated=False)
    return AuthStatusResponse(authenticated=True, user=user)


@router.post("/link/start", response_model=StartLinkResponse)
async def start_link(
    request: StartLinkAPIRequest,
    session: SessionDep,
    use_case: FromDishka[StartLinkUseCase],
) -> StartLinkResponse:
    """Begin adding a provider: returns the re-authentication URL.

    The user re-authenticates with the provider they signed up with before
    the new provider's handshake may start.
    """
    try:
        return await use_case.execute(
            StartLinkRequest(user_id=session.user_id, provider=request.provider)
        )
    except DomainError as e:
        raise map_domain_error(e)


@router.post("/link/handshake", response_model=AuthorizationResponse)
async def begin_handshake(
    request: BeginHandshakeAPIRequest,
    session: SessionDep,
    use_case: FromDishka[BeginHandshakeUseCase],
) -> AuthorizationResponse:
    """Start the new provider's handshake, carrying the linking token."""
    try:
        return await use_case.execute(
            BeginHandshakeRequest(
                user_id=session.user_id, token=request.token, provider=request.provider
            )
        )
    except DomainError as e:
        raise map_domain_error(e)


def _redirect(result: CallbackResponse, settings: Settings) -> RedirectResponse:
    response = RedirectResponse(url=result.redirect_url, status_code=status.HTTP_302_FOUND)
    if result.session_token:
        set_session_cookie(response, result.session_token, settings)
    return response


def _login_error(settings: Settings, error: str) -> RedirectResponse:
    return RedirectResponse(
        url=f"{settings.api.frontend_url}{settings.gatekeeper.login_path}?error={error}",
        status_code=status.HTTP_302_FOUND,
    )


def _callback_failure(payload: StatePayload, settings: Settings) -> RedirectResponse:
    """Failed login goes back to login; failed linking to the accounts tab."""
    if payload.purpose == StatePurpose.LOGIN:
        return _login_error(settings, "auth_failed")

    query = urlencode({"action": LinkAction.ERROR.value, "error": LINK_FAILED_MESSAGE})
    return RedirectResponse(
        url=f"{settings.linking_page_url}&{query}",
        status_code=status.HTTP_302_FOUND,
    )
