"""Account repository interface."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from lynkr.domain.model.account import Account
from lynkr.domain.value import AccountId, AuthProvider, UserId


class DeleteOutcome(str, Enum):
    """Result of a delete guarded by the last-account rule."""

    DELETED = "deleted"
    LAST_ACCOUNT = "last_account"
    NOT_FOUND = "not_found"


class AccountRepository(ABC):
    """Repository for Account entity.

    Manages the bindings between users and their external provider
    identities.
    """

    @abstractmethod
    async def find_by_id(self, account_id: AccountId) -> Optional[Account]:
        """Find an account by ID.

        Args:
            account_id: The account's unique identifier

        Returns:
            The account if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_provider(
        self, provider: AuthProvider, subject_id: str
    ) -> Optional[Account]:
        """Find the account bound to a provider identity.

        Args:
            provider: The identity provider
            subject_id: The user's permanent ID on that provider

        Returns:
            The account if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_all_by_user_id(self, user_id: UserId) -> list[Account]:
        """Get all accounts linked to a user, oldest first.

        Args:
            user_id: The user's unique identifier

        Returns:
            List of accounts (may be empty)
        """
        pass

    @abstractmethod
    async def add(self, account: Account) -> Optional[Account]:
        """Insert an account unless it collides with an existing binding.

        Args:
            account: The account to insert

        Returns:
            The inserted account, or None if (provider, subject_id) or
            (user_id, provider) is already taken
        """
        pass

    @abstractmethod
    async def delete_unless_last(
        self, account_id: AccountId, user_id: UserId
    ) -> DeleteOutcome:
        """Delete a user's account if the user keeps at least one other.

        The count and the delete happen under one lock on the user, so two
        concurrent calls can never remove both of a user's last two accounts.

        Args:
            account_id: The account to delete
            user_id: Owner the account must belong to

        Returns:
            DELETED, LAST_ACCOUNT if it is the user's only account, or
            NOT_FOUND if the user holds no such account (e.g. a concurrent
            unlink removed it first)
        """
        pass
