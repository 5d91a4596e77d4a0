"""Get current user use case."""

from datetime import datetime

from pydantic import BaseModel

from lynkr.application.usecase.base import BaseUseCase
from lynkr.domain.service import AccountService, UserService
from lynkr.domain.value import AuthProvider, UserId
from lynkr.domain.value.types import UserRole


class GetCurrentUserRequest(BaseModel):
    """Get current user request."""

    user_id: UserId


class AccountInfo(BaseModel):
    """Linked account information for response."""

    provider: AuthProvider
    provider_handle: str | None


class GetCurrentUserResponse(BaseModel):
    """Get current user response."""

    user_id: str
    name: str | None
    email: str | None
    image: str | None
    handle: str | None
    role: UserRole
    created_at: datetime
    accounts: list[AccountInfo]


class GetCurrentUserUseCase(BaseUseCase):
    """Use case for getting current authenticated user."""

    def __init__(self, user_service: UserService, account_service: AccountService) -> None:
        self.user_service = user_service
        self.account_service = account_service

    async def execute(self, request: GetCurrentUserRequest) -> GetCurrentUserResponse:
        """Load the user and their linked accounts.

        Raises:
            NotFoundError: If user not found
        """
        user = await self.user_service.get_by_id(request.user_id)
        accounts = await self.account_service.list_by_user(user.id)

        return GetCurrentUserResponse(
            user_id=str(user.id),
            name=user.name,
            email=user.email,
            image=user.image,
            handle=str(user.handle) if user.handle else None,
            role=user.role,
            created_at=user.created_at,
            accounts=[
                AccountInfo(provider=a.provider, provider_handle=a.provider_handle)
                for a in accounts
            ],
        )
