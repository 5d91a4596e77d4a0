"""JWT token utilities.

Two kinds of token are signed with the same secret:
- session tokens stored in the ``auth_token`` cookie
- OAuth ``state`` values carried through a provider round-trip
"""

import secrets
from datetime import datetime, timedelta, timezone
from enum import Enum

import jwt
from pydantic import BaseModel

from lynkr.config import AuthSettings


class TokenPayload(BaseModel):
    """Session JWT payload."""

    user_id: str
    handle: str | None = None
    role: str = "user"
    banned: bool = False
    exp: datetime


class StatePurpose(str, Enum):
    """Why an OAuth round-trip was started."""

    LOGIN = "login"
    REAUTH = "reauth"
    LINK = "link"


class StatePayload(BaseModel):
    """OAuth state JWT payload."""

    typ: str = "oauth_state"
    purpose: StatePurpose
    provider: str
    user_id: str | None = None
    link_provider: str | None = None
    link_token: str | None = None
    next: str | None = None
    nonce: str
    exp: datetime


class JWTError(Exception):
    """JWT-related error."""

    pass


def create_token(
    user_id: str,
    handle: str | None,
    role: str,
    banned: bool,
    settings: AuthSettings,
) -> str:
    """Create a session JWT for the user.

    Args:
        user_id: User ID
        handle: Claimed handle, None while onboarding is incomplete
        role: User role value
        banned: Ban flag at issue time
        settings: Authentication settings

    Returns:
        Encoded JWT token
    """
    expiry = datetime.now(timezone.utc) + timedelta(days=settings.jwt_expiry_days)

    payload = {
        "user_id": user_id,
        "handle": handle,
        "role": role,
        "banned": banned,
        "exp": expiry,
    }

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, settings: AuthSettings) -> TokenPayload:
    """Verify and decode a session JWT.

    Args:
        token: JWT token to verify
        settings: Authentication settings

    Returns:
        Token payload if valid

    Raises:
        JWTError: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError:
        raise JWTError("Token has expired")
    except jwt.InvalidTokenError:
        raise JWTError("Invalid token")

    if payload.get("typ") == "oauth_state":
        raise JWTError("Invalid token")

    try:
        return TokenPayload(**payload)
    except ValueError:
        raise JWTError("Invalid token")


def create_state(
    purpose: StatePurpose,
    provider: str,
    settings: AuthSettings,
    user_id: str | None = None,
    link_provider: str | None = None,
    link_token: str | None = None,
    next_url: str | None = None,
) -> str:
    """Create a signed OAuth state value.

    Args:
        purpose: Which leg of the login/linking flow this round-trip serves
        provider: Provider the round-trip is performed with
        settings: Authentication settings
        user_id: Signed-in user, for re-auth and link legs
        link_provider: Provider being added, for re-auth and link legs
        link_token: Linking token, for the link leg
        next_url: Optional post-login redirect target

    Returns:
        Encoded state JWT
    """
    payload = {
        "typ": "oauth_state",
        "purpose": purpose.value,
        "provider": provider,
        "user_id": user_id,
        "link_provider": link_provider,
        "link_token": link_token,
        "next": next_url,
        "nonce": secrets.token_urlsafe(16),
        "exp": datetime.now(timezone.utc)
        + timedelta(seconds=settings.state_expiry_seconds),
    }

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_state(state: str, settings: AuthSettings) -> StatePayload:
    """Verify and decode an OAuth state value.

    Raises:
        JWTError: If the state is invalid, expired or not a state token
    """
    try:
        payload = jwt.decode(
            state, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError:
        raise JWTError("State has expired")
    except jwt.InvalidTokenError:
        raise JWTError("Invalid state")

    if payload.get("typ") != "oauth_state":
        raise JWTError("Invalid state")

    try:
        return StatePayload(**payload)
    except ValueError:
        raise JWTError("Invalid state")
