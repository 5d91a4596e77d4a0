"""The caller's session, as resolved by the gatekeeper middleware."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from lynkr.domain.model.session import Session


def get_current_session(request: Request) -> Session | None:
    """Provide the session resolved by the gatekeeper middleware."""
    return getattr(request.state, "session", None)


def require_session(
    session: Annotated[Session | None, Depends(get_current_session)],
) -> Session:
    """Provide the session, or fail with 401 for anonymous callers."""
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return session


OptionalSessionDep = Annotated[Session | None, Depends(get_current_session)]
SessionDep = Annotated[Session, Depends(require_session)]
