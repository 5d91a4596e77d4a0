"""Linking token repository implementation using PostgreSQL."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lynkr.domain.model.linking_token import LinkingToken
from lynkr.domain.repository.linking_token import LinkingTokenRepository
from lynkr.domain.value import AuthProvider, UserId
from lynkr.persistence.mappers import linking_token_to_dict, row_to_linking_token
from lynkr.persistence.tables import linking_tokens_table


class PostgresLinkingTokenRepository(LinkingTokenRepository):
    """PostgreSQL implementation of LinkingTokenRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def add(self, token: LinkingToken) -> LinkingToken:
        stmt = linking_tokens_table.insert().values(**linking_token_to_dict(token))
        await self.session.execute(stmt)
        await self.session.flush()
        return token

    async def find(self, token: str) -> Optional[LinkingToken]:
        stmt = select(linking_tokens_table).where(linking_tokens_table.c.token == token)
        result = await self.session.execute(stmt)
        row = result.mappings().first()

        if not row:
            return None

        return row_to_linking_token(dict(row))

    async def consume(
        self,
        token: str,
        user_id: UserId,
        provider: AuthProvider,
        now: datetime,
        require_handshake: bool = False,
    ) -> Optional[LinkingToken]:
        """Conditional DELETE ... RETURNING.

        Postgres row locking lets only one concurrent statement delete the
        row; the others see zero rows and return None.
        """
        conditions = [
            linking_tokens_table.c.token == token,
            linking_tokens_table.c.user_id == user_id,
            linking_tokens_table.c.provider == provider.value,
            linking_tokens_table.c.expires_at > now,
        ]
        if require_handshake:
            conditions.append(linking_tokens_table.c.subject_id.is_not(None))

        stmt = (
            linking_tokens_table.delete()
            .where(*conditions)
            .returning(*linking_tokens_table.c)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        await self.session.flush()

        if not row:
            return None

        return row_to_linking_token(dict(row))

    async def record_handshake(
        self,
        token: str,
        user_id: UserId,
        provider: AuthProvider,
        subject_id: str,
        subject_handle: str | None,
        now: datetime,
    ) -> bool:
        stmt = (
            linking_tokens_table.update()
            .where(
                linking_tokens_table.c.token == token,
                linking_tokens_table.c.user_id == user_id,
                linking_tokens_table.c.provider == provider.value,
                linking_tokens_table.c.expires_at > now,
                linking_tokens_table.c.subject_id.is_(None),
            )
            .values(subject_id=subject_id, subject_handle=subject_handle)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def delete_expired(self, now: datetime) -> int:
        stmt = linking_tokens_table.delete().where(
            linking_tokens_table.c.expires_at <= now
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
