"""Domain model entities for Lynkr."""

from lynkr.domain.model.account import Account
from lynkr.domain.model.linking_token import LinkingToken
from lynkr.domain.model.session import AccessDecision, Session
from lynkr.domain.model.user import User

__all__ = [
    "User",
    "Account",
    "LinkingToken",
    "Session",
    "AccessDecision",
]
