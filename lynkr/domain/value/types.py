"""Domain value objects for Lynkr.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and business logic.
"""

import re
from enum import Enum

from pydantic import field_validator

from lynkr.domain.value.common import RootValueObject, ValueObject


class AuthProvider(str, Enum):
    """Supported identity providers."""

    GOOGLE = "google"
    GITHUB = "github"
    DISCORD = "discord"


class UserRole(str, Enum):
    """User role, global across all of a user's linked accounts."""

    USER = "user"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"

    @property
    def is_staff(self) -> bool:
        return self in (UserRole.ADMIN, UserRole.SUPERADMIN)


class LinkAction(str, Enum):
    """Values of the ``action`` query parameter on the linking page."""

    LINK = "link"
    REAUTH = "reauth"
    COMPLETE = "complete"
    ERROR = "error"


class LinkingState(str, Enum):
    """States of one attempt to add a provider to a user."""

    UNLINKED = "unlinked"
    REAUTH_IN_PROGRESS = "reauth_in_progress"
    REAUTH_DONE = "reauth_done"
    PROVIDER_HANDSHAKE_IN_PROGRESS = "provider_handshake_in_progress"
    LINKED = "linked"
    FAILED = "failed"


class Handle(RootValueObject[str]):
    """Public handle a user claims during onboarding (lynkr.app/<handle>)."""

    @field_validator("root")
    @classmethod
    def validate_handle_format(cls, v: str) -> str:
        """Lowercase letters, digits, underscores and hyphens, 3-30 characters."""
        if not re.match(r"^[a-z0-9_-]{3,30}$", v):
            raise ValueError(
                "Handle must be 3-30 characters: lowercase letters, digits, '_' or '-'"
            )
        return v


class LinkingTokenValue(RootValueObject[str]):
    """Opaque url-safe linking token value."""

    @field_validator("root")
    @classmethod
    def validate_token_format(cls, v: str) -> str:
        if not re.match(r"^[A-Za-z0-9_-]{22,128}$", v):
            raise ValueError("Malformed linking token")
        return v


class OAuthProviderInfo(ValueObject):
    """Identity returned by a provider at the end of its handshake."""

    provider: AuthProvider
    provider_user_id: str  # Permanent subject id assigned by the provider
    handle: str  # Display handle on the provider
    email: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None
