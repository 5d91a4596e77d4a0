"""Ban user use case."""

import logfire
from pydantic import BaseModel

from lynkr.application.usecase.base import BaseUseCase, store_errors
from lynkr.domain.error import NotAuthorizedError, ValidationError
from lynkr.domain.model.session import Session
from lynkr.domain.service import AccountService, UserService
from lynkr.domain.value import UserId
from lynkr.domain.value.types import UserRole


class BanUserRequest(BaseModel):
    actor: Session
    user_id: UserId
    banned: bool = True


class BanUserResponse(BaseModel):
    user_id: str
    banned: bool


class BanUserUseCase(BaseUseCase):
    """Staff action: ban or unban a user on every linked identity."""

    def __init__(self, account_service: AccountService, user_service: UserService) -> None:
        self.account_service = account_service
        self.user_service = user_service

    async def execute(self, request: BanUserRequest) -> BanUserResponse:
        """Set the user's ban flag.

        Raises:
            NotAuthorizedError: Actor is not staff, or target outranks actor
            ValidationError: Actor targets themselves
            NotFoundError: User not found
        """
        if not request.actor.role.is_staff:
            raise NotAuthorizedError("ban users", str(request.actor.user_id))
        if request.actor.user_id == request.user_id:
            raise ValidationError("You cannot ban yourself")

        with store_errors("ban_user"):
            target = await self.user_service.get_by_id(request.user_id)
            if (
                target.role == UserRole.SUPERADMIN
                and request.actor.role != UserRole.SUPERADMIN
            ):
                raise NotAuthorizedError("ban a superadmin", str(request.actor.user_id))

            await self.account_service.set_ban_flag_for_user(request.user_id, request.banned)

        logfire.info(
            "User ban updated by staff",
            actor_id=str(request.actor.user_id),
            user_id=str(request.user_id),
            banned=request.banned,
        )
        return BanUserResponse(user_id=str(request.user_id), banned=request.banned)
