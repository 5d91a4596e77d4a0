"""Claim handle use case (onboarding)."""

from pydantic import BaseModel

from lynkr.application.usecase.base import BaseUseCase, store_errors
from lynkr.domain.error import ValidationError
from lynkr.domain.service import JWTService, UserService
from lynkr.domain.value import UserId
from lynkr.domain.value.types import Handle


class ClaimHandleRequest(BaseModel):
    user_id: UserId
    handle: str


class ClaimHandleResponse(BaseModel):
    user_id: str
    handle: str
    session_token: str  # Reissued so the cookie carries the handle


class ClaimHandleUseCase(BaseUseCase):
    """Complete onboarding by claiming a public handle."""

    def __init__(self, user_service: UserService, jwt_service: JWTService) -> None:
        self.user_service = user_service
        self.jwt_service = jwt_service

    async def execute(self, request: ClaimHandleRequest) -> ClaimHandleResponse:
        """Claim the handle.

        Raises:
            ValidationError: Handle format invalid
            ConflictError: Handle taken
            NotFoundError: User not found
        """
        try:
            handle = Handle(request.handle.strip().lower())
        except ValueError:
            raise ValidationError(
                "Handle must be 3-30 characters: lowercase letters, digits, '_' or '-'"
            )

        with store_errors("claim_handle"):
            user = await self.user_service.claim_handle(request.user_id, handle)

        return ClaimHandleResponse(
            user_id=str(user.id),
            handle=str(handle),
            session_token=self.jwt_service.create_token(user),
        )
