"""Base use case."""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator

import logfire
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from lynkr.domain.error import InfrastructureError


class BaseUseCase(ABC):
    """Base use case for orchestrating domain services."""

    @abstractmethod
    async def execute(self, request: Any) -> Any:
        pass


class CallbackResponse(BaseModel):
    """Where to send the browser after a provider callback.

    ``session_token`` is set when the session cookie must be (re)issued.
    """

    redirect_url: str
    session_token: str | None = None


class AuthorizationResponse(BaseModel):
    """Provider authorization URL the client navigates to."""

    authorization_url: str


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Translate storage exceptions into InfrastructureError."""
    try:
        yield
    except SQLAlchemyError as e:
        logfire.error("Store failure", operation=operation, error=str(e))
        raise InfrastructureError(f"{operation} failed") from e
