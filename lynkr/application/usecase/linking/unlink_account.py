"""Unlink account use case."""

from pydantic import BaseModel

from lynkr.application.usecase.base import BaseUseCase, store_errors
from lynkr.domain.service import AccountService
from lynkr.domain.value import AuthProvider, UserId

from .list_linked_accounts import LinkedAccountsResponse


class UnlinkAccountRequest(BaseModel):
    user_id: UserId
    provider: AuthProvider


class UnlinkAccountUseCase(BaseUseCase):
    """Use case for removing one provider from the current user."""

    def __init__(self, account_service: AccountService) -> None:
        self.account_service = account_service

    async def execute(self, request: UnlinkAccountRequest) -> LinkedAccountsResponse:
        """Unlink the provider and return the remaining accounts.

        Raises:
            NotFoundError: Provider not linked
            LastAccountError: Provider is the only linked account
        """
        with store_errors("unlink_account"):
            await self.account_service.unlink_provider(request.user_id, request.provider)
            accounts = await self.account_service.list_by_user(request.user_id)
        return LinkedAccountsResponse.from_accounts(accounts)
