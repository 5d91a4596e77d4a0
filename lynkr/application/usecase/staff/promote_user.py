"""Promote user use case."""

import logfire
from pydantic import BaseModel

from lynkr.application.usecase.base import BaseUseCase, store_errors
from lynkr.domain.error import NotAuthorizedError, ValidationError
from lynkr.domain.model.session import Session
from lynkr.domain.service import AccountService
from lynkr.domain.value import UserId
from lynkr.domain.value.types import UserRole


class PromoteUserRequest(BaseModel):
    actor: Session
    user_id: UserId
    role: UserRole


class PromoteUserResponse(BaseModel):
    user_id: str
    role: UserRole


class PromoteUserUseCase(BaseUseCase):
    """Superadmin action: change a user's role on every linked identity."""

    def __init__(self, account_service: AccountService) -> None:
        self.account_service = account_service

    async def execute(self, request: PromoteUserRequest) -> PromoteUserResponse:
        """Set the user's role.

        Raises:
            NotAuthorizedError: Actor is not a superadmin
            ValidationError: Actor changes their own role
            NotFoundError: User not found
        """
        if request.actor.role != UserRole.SUPERADMIN:
            raise NotAuthorizedError("change roles", str(request.actor.user_id))
        if request.actor.user_id == request.user_id:
            raise ValidationError("You cannot change your own role")

        with store_errors("promote_user"):
            await self.account_service.set_role_for_user(request.user_id, request.role)

        logfire.info(
            "User role updated",
            actor_id=str(request.actor.user_id),
            user_id=str(request.user_id),
            role=request.role.value,
        )
        return PromoteUserResponse(user_id=str(request.user_id), role=request.role)
