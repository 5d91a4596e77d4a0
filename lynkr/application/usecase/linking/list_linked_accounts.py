"""List linked accounts use case."""

from datetime import datetime

from pydantic import BaseModel

from lynkr.application.usecase.base import BaseUseCase, store_errors
from lynkr.domain.model.account import Account
from lynkr.domain.service import AccountService
from lynkr.domain.value import AuthProvider, UserId


class ListLinkedAccountsRequest(BaseModel):
    user_id: UserId


class LinkedAccountInfo(BaseModel):
    """One linked provider identity."""

    provider: AuthProvider
    provider_handle: str | None
    linked_at: datetime


class LinkedAccountsResponse(BaseModel):
    accounts: list[LinkedAccountInfo]

    @classmethod
    def from_accounts(cls, accounts: list[Account]) -> "LinkedAccountsResponse":
        return cls(
            accounts=[
                LinkedAccountInfo(
                    provider=a.provider,
                    provider_handle=a.provider_handle,
                    linked_at=a.created_at,
                )
                for a in accounts
            ]
        )


class ListLinkedAccountsUseCase(BaseUseCase):
    """Use case for listing the current user's linked accounts."""

    def __init__(self, account_service: AccountService) -> None:
        self.account_service = account_service

    async def execute(self, request: ListLinkedAccountsRequest) -> LinkedAccountsResponse:
        with store_errors("list_linked_accounts"):
            accounts = await self.account_service.list_by_user(request.user_id)
        return LinkedAccountsResponse.from_accounts(accounts)
