"""Linking token entity.

Short-lived, single-use credential that carries an account-linking attempt
from the re-authentication leg to the new provider's handshake.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import Field

from lynkr.domain.model.common import DomainModel
from lynkr.domain.value import AuthProvider, UserId


class LinkingToken(DomainModel):
    """Linking token scoped to one (user, provider) pair.

    ``subject_id`` and ``subject_handle`` stay empty until the target
    provider's handshake returns; they hold the identity to bind.
    """

    token: str
    user_id: UserId
    provider: AuthProvider
    expires_at: datetime
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    subject_id: Optional[str] = None
    subject_handle: Optional[str] = None

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(timezone.utc)) >= self.expires_at

    def is_scoped_to(self, user_id: UserId, provider: AuthProvider) -> bool:
        return self.user_id == user_id and self.provider == provider

    @property
    def handshake_done(self) -> bool:
        return self.subject_id is not None
