"""Linked account routes."""

import logging

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter
from pydantic import BaseModel

from lynkr.application.usecase.linking import (
    ListLinkedAccountsUseCase,
    ProcessLinkUseCase,
    UnlinkAccountUseCase,
)
from lynkr.application.usecase.linking.list_linked_accounts import (
    LinkedAccountInfo,
    ListLinkedAccountsRequest,
)
from lynkr.application.usecase.linking.process_link import ProcessLinkRequest
from lynkr.application.usecase.linking.unlink_account import UnlinkAccountRequest
from lynkr.domain.error import DomainError
from lynkr.domain.value import AuthProvider
from lynkr.interface.api.dependencies import SessionDep
from lynkr.interface.error import map_domain_error
from lynkr.util.logging import redact_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["accounts"], route_class=DishkaRoute)


class ProcessLinkAPIRequest(BaseModel):
    """API request to finish linking with a handshake-completed token."""

    token: str
    provider: AuthProvider | None = None


@router.get("/linked-accounts", response_model=list[LinkedAccountInfo])
async def list_linked_accounts(
    session: SessionDep,
    use_case: FromDishka[ListLinkedAccountsUseCase],
) -> list[LinkedAccountInfo]:
    """List the current user's linked provider identities.

    Example:
        GET /linked-accounts
        Cookie: auth_token=...

        Response:
        [
            {
                "provider": "github",
                "provider_handle": "alice",
                "linked_at": "2025-01-15T12:34:56Z"
            }
        ]
    """
    try:
        result = await use_case.execute(ListLinkedAccountsRequest(user_id=session.user_id))
    except DomainError as e:
        raise map_domain_error(e)
    return result.accounts


@router.delete("/unlink-account", response_model=list[LinkedAccountInfo])
async def unlink_account(
    provider: AuthProvider,
    session: SessionDep,
    use_case: FromDishka[UnlinkAccountUseCase],
) -> list[LinkedAccountInfo]:
    """Remove one provider from the current user.

    Returns the remaining accounts. The last linked account can never be
    removed (400); a provider that is not linked gives 404.

    Example:
        DELETE /unlink-account?provider=discord
    """
    try:
        result = await use_case.execute(
            UnlinkAccountRequest(user_id=session.user_id, provider=provider)
        )
    except DomainError as e:
        raise map_domain_error(e)

    logger.info(f"Account unlinked: user_id={session.user_id} provider={provider.value}")
    return result.accounts


@router.post("/process-link", response_model=list[LinkedAccountInfo])
async def process_link(
    request: ProcessLinkAPIRequest,
    session: SessionDep,
    use_case: FromDishka[ProcessLinkUseCase],
) -> list[LinkedAccountInfo]:
    """Finish linking: consume the token and bind the new identity.

    A token works once, for the user and provider it was issued to, within
    its lifetime. Every token problem gives the same 400 response.

    Example:
        POST /process-link
        {"token": "Zx9...", "provider": "discord"}

        Response (200): the updated account list
        Response (400): {"detail": "Invalid or expired linking token"}
        Response (409): {"detail": "This discord account is already linked to another user"}
    """
    try:
        result = await use_case.execute(
            ProcessLinkRequest(
                user_id=session.user_id,
                token=request.token,
                provider=request.provider,
            )
        )
    except DomainError as e:
        logger.info(
            f"Process link rejected: user_id={session.user_id} "
            f"token={redact_token(request.token)} error={type(e).__name__}"
        )
        raise map_domain_error(e)

    return result.accounts
