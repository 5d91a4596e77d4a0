"""User onboarding routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from lynkr.application.usecase.user import ClaimHandleUseCase
from lynkr.application.usecase.user.claim_handle import ClaimHandleRequest
from lynkr.config import Settings
from lynkr.domain.error import DomainError
from lynkr.interface.api.cookies import set_session_cookie
from lynkr.interface.api.dependencies import SessionDep
from lynkr.interface.error import map_domain_error

router = APIRouter(prefix="/users", tags=["users"], route_class=DishkaRoute)


class ClaimHandleAPIRequest(BaseModel):
    """API request for claiming a handle."""

    handle: str = Field(..., min_length=1, max_length=64)


class ClaimHandleAPIResponse(BaseModel):
    user_id: str
    handle: str


@router.put("/me/handle", response_model=ClaimHandleAPIResponse)
async def claim_handle(
    request: ClaimHandleAPIRequest,
    response: Response,
    session: SessionDep,
    settings: FromDishka[Settings],
    use_case: FromDishka[ClaimHandleUseCase],
) -> ClaimHandleAPIResponse:
    """Finish onboarding by claiming a unique handle.

    The session cookie is reissued so the gatekeeper sees the handle on
    the next request.

    Example:
        PUT /users/me/handle
        {"handle": "alice"}

        Response:
        {"user_id": "123e4567-e89b-12d3-a456-426614174000", "handle": "alice"}
    """
    try:
        result = await use_case.execute(
            ClaimHandleRequest(user_id=session.user_id, handle=request.handle)
        )
    except DomainError as e:
        raise map_domain_error(e)

    set_session_cookie(response, result.session_token, settings)
    return ClaimHandleAPIResponse(user_id=result.user_id, handle=result.handle)
