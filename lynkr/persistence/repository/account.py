"""Account repository implementation using PostgreSQL."""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from lynkr.domain.model.account import Account
from lynkr.domain.repository.account import AccountRepository, DeleteOutcome
from lynkr.domain.value import AccountId, AuthProvider, UserId
from lynkr.persistence.mappers import account_to_dict, row_to_account
from lynkr.persistence.tables import accounts_table, users_table


class PostgresAccountRepository(AccountRepository):
    """PostgreSQL implementation of AccountRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, account_id: AccountId) -> Optional[Account]:
        stmt = select(accounts_table).where(accounts_table.c.id == account_id)
        result = await self.session.execute(stmt)
        row = result.mappings().first()

        if not row:
            return None

        return row_to_account(dict(row))

    async def find_by_provider(
        self, provider: AuthProvider, subject_id: str
    ) -> Optional[Account]:
        stmt = select(accounts_table).where(
            accounts_table.c.provider == provider.value,
            accounts_table.c.subject_id == subject_id,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()

        if not row:
            return None

        return row_to_account(dict(row))

    async def find_all_by_user_id(self, user_id: UserId) -> list[Account]:
        stmt = (
            select(accounts_table)
            .where(accounts_table.c.user_id == user_id)
            .order_by(accounts_table.c.created_at)
        )
        result = await self.session.execute(stmt)
        rows = result.mappings().all()

        return [row_to_account(dict(row)) for row in rows]

    async def add(self, account: Account) -> Optional[Account]:
        """Insert account, skipping it on either unique constraint.

        Args:
            account: Account to insert

        Returns:
            The inserted account, or None on conflict
        """
        stmt = (
            insert(accounts_table)
            .values(**account_to_dict(account))
            .on_conflict_do_nothing()
            .returning(*accounts_table.c)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        await self.session.flush()

        if not row:
            return None

        return row_to_account(dict(row))

    async def delete_unless_last(
        self, account_id: AccountId, user_id: UserId
    ) -> DeleteOutcome:
        """Delete account while holding a row lock on its user.

        Concurrent unlinks for the same user serialize on the lock, so the
        existence check and count each one sees already reflect the other's
        delete.
        """
        lock = select(users_table.c.id).where(users_table.c.id == user_id).with_for_update()
        await self.session.execute(lock)

        owned_stmt = select(accounts_table.c.id).where(
            accounts_table.c.id == account_id,
            accounts_table.c.user_id == user_id,
        )
        if (await self.session.execute(owned_stmt)).first() is None:
            return DeleteOutcome.NOT_FOUND

        count_stmt = (
            select(func.count())
            .select_from(accounts_table)
            .where(accounts_table.c.user_id == user_id)
        )
        remaining = (await self.session.execute(count_stmt)).scalar_one()
        if remaining <= 1:
            return DeleteOutcome.LAST_ACCOUNT

        stmt = accounts_table.delete().where(
            accounts_table.c.id == account_id,
            accounts_table.c.user_id == user_id,
        )
        await self.session.execute(stmt)
        await self.session.flush()
        return DeleteOutcome.DELETED
