"""Domain value objects for Lynkr."""

from lynkr.domain.value.identifiers import AccountId, UserId
from lynkr.domain.value.types import (
    AuthProvider,
    Handle,
    LinkAction,
    LinkingState,
    LinkingTokenValue,
    OAuthProviderInfo,
    UserRole,
)

__all__ = [
    # Identifiers
    "UserId",
    "AccountId",
    # Types
    "AuthProvider",
    "UserRole",
    "LinkAction",
    "LinkingState",
    "Handle",
    "LinkingTokenValue",
    "OAuthProviderInfo",
]
