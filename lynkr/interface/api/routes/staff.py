"""Staff moderation routes."""

import logging

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter
from pydantic import BaseModel

from lynkr.application.usecase.staff import BanUserUseCase, PromoteUserUseCase
from lynkr.application.usecase.staff.ban_user import BanUserRequest, BanUserResponse
from lynkr.application.usecase.staff.promote_user import (
    PromoteUserRequest,
    PromoteUserResponse,
)
from lynkr.domain.error import DomainError
from lynkr.domain.value import UserId
from lynkr.domain.value.types import UserRole
from lynkr.interface.api.dependencies import SessionDep
from lynkr.interface.error import map_domain_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/staff", tags=["staff"], route_class=DishkaRoute)


class BanUserAPIRequest(BaseModel):
    """API request to ban or unban a user."""

    user_id: UserId
    ban: bool = True


class PromoteUserAPIRequest(BaseModel):
    """API request to change a user's role."""

    user_id: UserId
    role: UserRole


@router.post("/ban", response_model=BanUserResponse)
async def ban_user(
    request: BanUserAPIRequest,
    session: SessionDep,
    use_case: FromDishka[BanUserUseCase],
) -> BanUserResponse:
    """Ban or unban a user. Staff only.

    The flag applies to every identity linked to the user; their next
    request is redirected to the banned notice.

    Example:
        POST /staff/ban
        {"user_id": "123e4567-e89b-12d3-a456-426614174000", "ban": true}
    """
    try:
        return await use_case.execute(
            BanUserRequest(actor=session, user_id=request.user_id, banned=request.ban)
        )
    except DomainError as e:
        logger.warning(
            f"Ban rejected: actor={session.user_id} target={request.user_id} error={e}"
        )
        raise map_domain_error(e)


@router.post("/promote", response_model=PromoteUserResponse)
async def promote_user(
    request: PromoteUserAPIRequest,
    session: SessionDep,
    use_case: FromDishka[PromoteUserUseCase],
) -> PromoteUserResponse:
    """Change a user's role. Superadmin only."""
    try:
        return await use_case.execute(
            PromoteUserRequest(actor=session, user_id=request.user_id, role=request.role)
        )
    except DomainError as e:
        raise map_domain_error(e)
