"""User aggregate root.

A user signs in through any of their linked accounts. Ban status and role
live here, once per user, so every linked identity sees the same values.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import Field

from lynkr.domain.model.common import DomainModel
from lynkr.domain.value import UserId
from lynkr.domain.value.types import Handle, UserRole


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(DomainModel):
    """User aggregate root - provider-agnostic."""

    id: UserId
    name: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None
    handle: Optional[Handle] = None  # None until onboarding is complete
    role: UserRole = UserRole.USER
    banned: bool = False
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_onboarded(self) -> bool:
        return self.handle is not None
