"""User repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from lynkr.domain.model.user import User
from lynkr.domain.value import UserId
from lynkr.domain.value.types import Handle, UserRole


class UserRepository(ABC):
    """Repository for User aggregate."""

    @abstractmethod
    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: The user's unique identifier

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_handle(self, handle: Handle) -> Optional[User]:
        """Find a user by claimed handle.

        Args:
            handle: The user's handle

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def save(self, user: User) -> User:
        """Save a user (create or update).

        Args:
            user: The user to save

        Returns:
            The saved user
        """
        pass

    @abstractmethod
    async def set_banned(self, user_id: UserId, banned: bool) -> bool:
        """Set the ban flag in a single statement.

        Args:
            user_id: The user to update
            banned: New ban flag

        Returns:
            True if the user exists and was updated, False otherwise
        """
        pass

    @abstractmethod
    async def set_role(self, user_id: UserId, role: UserRole) -> bool:
        """Set the role in a single statement.

        Args:
            user_id: The user to update
            role: New role

        Returns:
            True if the user exists and was updated, False otherwise
        """
        pass
