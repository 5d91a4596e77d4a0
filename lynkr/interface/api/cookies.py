"""Session cookie helpers."""

from fastapi import Response

from lynkr.config import Settings


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    """Attach the session JWT as an HTTP-only cookie.

    Production (cross-subdomain): samesite="none", secure, shared domain.
    Development (same-origin): samesite="lax", plain HTTP, host-only.
    """
    is_production = settings.is_production
    response.set_cookie(
        key=settings.auth.cookie_name,
        value=token,
        httponly=True,
        secure=is_production,
        samesite="none" if is_production else "lax",
        domain=settings.cookie_domain if is_production else None,
        path="/",
        max_age=settings.auth.jwt_expiry_days * 24 * 60 * 60,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    """Delete the session cookie with the domain/path it was set with."""
    response.delete_cookie(
        key=settings.auth.cookie_name,
        domain=settings.cookie_domain if settings.is_production else None,
        path="/",
    )
