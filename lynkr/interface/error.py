"""Map domain errors to HTTP responses."""

import logging

from fastapi import HTTPException, status

from lynkr.domain.error import (
    AuthError,
    ConflictError,
    DomainError,
    InfrastructureError,
    LastAccountError,
    NotAuthorizedError,
    NotFoundError,
    TokenError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first: LastAccountError is a ConflictError that maps to 400
DOMAIN_ERROR_STATUS_MAP: list[tuple[type[DomainError], int]] = [
    (LastAccountError, status.HTTP_400_BAD_REQUEST),
    (TokenError, status.HTTP_400_BAD_REQUEST),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthError, status.HTTP_401_UNAUTHORIZED),
    (NotAuthorizedError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
]

INTERNAL_ERROR_DETAIL = "Internal server error"


def map_domain_error(error: DomainError) -> HTTPException:
    """Convert a domain error to an HTTPException.

    Infrastructure failures are logged and returned without detail.
    """
    if isinstance(error, InfrastructureError):
        logger.error(f"Infrastructure failure: {error}", exc_info=error)
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_DETAIL,
        )

    for error_type, status_code in DOMAIN_ERROR_STATUS_MAP:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))

    logger.error(f"Unmapped domain error: {error!r}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=INTERNAL_ERROR_DETAIL,
    )
