"""Account entity.

Binds one external provider identity to a user.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import Field

from lynkr.domain.model.common import DomainModel
from lynkr.domain.value import AccountId, AuthProvider, UserId


class Account(DomainModel):
    """Identity binding between a user and a provider subject.

    Invariants:
    - (provider, subject_id) backs at most one user
    - a user holds at most one account per provider
    - a user always keeps at least one account
    """

    id: AccountId
    user_id: UserId
    provider: AuthProvider
    subject_id: str  # Permanent id assigned by the provider
    provider_handle: Optional[str] = None  # Display handle on the provider
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
