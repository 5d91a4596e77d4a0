"""PostgreSQL repository implementations."""

from lynkr.persistence.repository.account import PostgresAccountRepository
from lynkr.persistence.repository.linking_token import PostgresLinkingTokenRepository
from lynkr.persistence.repository.user import PostgresUserRepository

__all__ = [
    "PostgresUserRepository",
    "PostgresAccountRepository",
    "PostgresLinkingTokenRepository",
]
