"""In-memory user repository for testing."""

from datetime import datetime, timezone
from typing import Optional

from lynkr.domain.model.user import User
from lynkr.domain.repository.user import UserRepository
from lynkr.domain.value import UserId
from lynkr.domain.value.types import Handle, UserRole


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of UserRepository for testing."""

    def __init__(self) -> None:
        self._users: dict[UserId, User] = {}

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        return self._users.get(user_id)

    async def find_by_handle(self, handle: Handle) -> Optional[User]:
        for user in self._users.values():
            if user.handle == handle:
                return user
        return None

    async def save(self, user: User) -> User:
        self._users[user.id] = user
        return user

    def _update(self, user_id: UserId, **changes) -> bool:
        user = self._users.get(user_id)
        if not user:
            return False
        self._users[user_id] = user.model_copy(
            update={**changes, "updated_at": datetime.now(timezone.utc)}
        )
        return True

    async def set_banned(self, user_id: UserId, banned: bool) -> bool:
        return self._update(user_id, banned=banned)

    async def set_role(self, user_id: UserId, role: UserRole) -> bool:
        return self._update(user_id, role=role)
