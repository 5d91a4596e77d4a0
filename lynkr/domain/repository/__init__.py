"""Domain repository interfaces."""

from lynkr.domain.repository.account import AccountRepository, DeleteOutcome
from lynkr.domain.repository.linking_token import LinkingTokenRepository
from lynkr.domain.repository.user import UserRepository

__all__ = [
    "UserRepository",
    "AccountRepository",
    "DeleteOutcome",
    "LinkingTokenRepository",
]
