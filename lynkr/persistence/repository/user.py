"""User repository implementation using PostgreSQL."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lynkr.domain.model.user import User
from lynkr.domain.repository.user import UserRepository
from lynkr.domain.value import UserId
from lynkr.domain.value.types import Handle, UserRole
from lynkr.persistence.mappers import row_to_user, user_to_dict
from lynkr.persistence.tables import users_table


class PostgresUserRepository(UserRepository):
    """PostgreSQL implementation of UserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        stmt = select(users_table).where(users_table.c.id == user_id)
        result = await self.session.execute(stmt)
        row = result.mappings().first()

        if not row:
            return None

        return row_to_user(dict(row))

    async def find_by_handle(self, handle: Handle) -> Optional[User]:
        stmt = select(users_table).where(users_table.c.handle == handle.root)
        result = await self.session.execute(stmt)
        row = result.mappings().first()

        if not row:
            return None

        return row_to_user(dict(row))

    async def save(self, user: User) -> User:
        """Save user to database.

        Args:
            user: User to save

        Returns:
            Saved user
        """
        user_dict = user_to_dict(user)

        existing = await self.find_by_id(user.id)

        if existing:
            stmt = (
                users_table.update()
                .where(users_table.c.id == user.id)
                .values(**user_dict)
            )
        else:
            stmt = users_table.insert().values(**user_dict)
        await self.session.execute(stmt)

        await self.session.flush()
        return user

    async def set_banned(self, user_id: UserId, banned: bool) -> bool:
        stmt = (
            users_table.update()
            .where(users_table.c.id == user_id)
            .values(banned=banned, updated_at=datetime.now(timezone.utc))
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def set_role(self, user_id: UserId, role: UserRole) -> bool:
        stmt = (
            users_table.update()
            .where(users_table.c.id == user_id)
            .values(role=role.value, updated_at=datetime.now(timezone.utc))
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0
