"""Per-request session and access decision values."""

from typing import Literal, Optional

from lynkr.domain.model.common import DomainModel
from lynkr.domain.value import UserId
from lynkr.domain.value.types import UserRole


class Session(DomainModel):
    """Caller identity for one request. Not persisted."""

    user_id: UserId
    handle: Optional[str] = None
    banned: bool = False
    role: UserRole = UserRole.USER

    @property
    def has_handle(self) -> bool:
        return bool(self.handle)


class AccessDecision(DomainModel):
    """Outcome of the request gatekeeper: allow, or redirect elsewhere."""

    kind: Literal["allow", "redirect"]
    target: Optional[str] = None

    @classmethod
    def allow(cls) -> "AccessDecision":
        return cls(kind="allow")

    @classmethod
    def redirect_to(cls, target: str) -> "AccessDecision":
        return cls(kind="redirect", target=target)

    @property
    def allowed(self) -> bool:
        return self.kind == "allow"
