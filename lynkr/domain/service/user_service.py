"""User domain service."""

from datetime import datetime, timezone
from uuid import uuid4

import logfire

from lynkr.domain.error import ConflictError, NotFoundError
from lynkr.domain.model.user import User
from lynkr.domain.repository import UserRepository
from lynkr.domain.value import OAuthProviderInfo, UserId
from lynkr.domain.value.types import Handle

from .base import Service


class UserService(Service):
    """Domain service for user operations."""

    def __init__(self, user_repository: UserRepository) -> None:
        """Initialize user service.

        Args:
            user_repository: User repository
        """
        self.user_repository = user_repository

    async def get_by_id(self, user_id: UserId) -> User:
        """Get user by ID.

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span("user_service.get_by_id", user_id=str(user_id)):
            user = await self.user_repository.find_by_id(user_id)
            if not user:
                logfire.warn("User not found", user_id=str(user_id))
                raise NotFoundError("User", str(user_id))
            return user

    async def find_by_id(self, user_id: UserId) -> User | None:
        return await self.user_repository.find_by_id(user_id)

    async def create_from_provider(self, info: OAuthProviderInfo) -> User:
        """Create a new user on first sign-in. The handle is claimed later.

        Args:
            info: Identity returned by the provider

        Returns:
            The created user
        """
        with logfire.span("user_service.create_from_provider", provider=info.provider.value):
            user = User(
                id=UserId(uuid4()),
                name=info.display_name or info.handle,
                email=info.email,
                image=info.avatar_url,
            )
            saved = await self.user_repository.save(user)
            logfire.info("User created", user_id=str(saved.id))
            return saved

    async def claim_handle(self, user_id: UserId, handle: Handle) -> User:
        """Assign a unique handle, completing onboarding.

        Raises:
            NotFoundError: If user not found
            ConflictError: If the handle belongs to someone else
        """
        with logfire.span("user_service.claim_handle", user_id=str(user_id), handle=str(handle)):
            user = await self.get_by_id(user_id)

            owner = await self.user_repository.find_by_handle(handle)
            if owner and owner.id != user_id:
                logfire.warn("Handle already taken", handle=str(handle))
                raise ConflictError(f"Handle '{handle}' is already taken")

            updated = user.model_copy(
                update={"handle": handle, "updated_at": datetime.now(timezone.utc)}
            )
            return await self.user_repository.save(updated)
