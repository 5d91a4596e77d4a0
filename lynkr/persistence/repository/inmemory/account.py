"""In-memory account repository for testing."""

from typing import Optional

from lynkr.domain.model.account import Account
from lynkr.domain.repository.account import AccountRepository, DeleteOutcome
from lynkr.domain.value import AccountId, AuthProvider, UserId


class InMemoryAccountRepository(AccountRepository):
    """In-memory implementation of AccountRepository for testing.

    Check-and-mutate methods never await in between, which makes them
    atomic on a single event loop.
    """

    def __init__(self) -> None:
        self._accounts: list[Account] = []

    async def find_by_id(self, account_id: AccountId) -> Optional[Account]:
        for account in self._accounts:
            if account.id == account_id:
                return account
        return None

    async def find_by_provider(
        self, provider: AuthProvider, subject_id: str
    ) -> Optional[Account]:
        for account in self._accounts:
            if account.provider == provider and account.subject_id == subject_id:
                return account
        return None

    async def find_all_by_user_id(self, user_id: UserId) -> list[Account]:
        matches = [a for a in self._accounts if a.user_id == user_id]
        matches.sort(key=lambda a: a.created_at)
        return matches

    async def add(self, account: Account) -> Optional[Account]:
        for existing in self._accounts:
            if (
                existing.provider == account.provider
                and existing.subject_id == account.subject_id
            ):
                return None
            if (
                existing.user_id == account.user_id
                and existing.provider == account.provider
            ):
                return None
        self._accounts.append(account)
        return account

    async def delete_unless_last(
        self, account_id: AccountId, user_id: UserId
    ) -> DeleteOutcome:
        owned = [a for a in self._accounts if a.user_id == user_id]
        if not any(a.id == account_id for a in owned):
            return DeleteOutcome.NOT_FOUND
        if len(owned) <= 1:
            return DeleteOutcome.LAST_ACCOUNT
        self._accounts = [a for a in self._accounts if a.id != account_id]
        return DeleteOutcome.DELETED
