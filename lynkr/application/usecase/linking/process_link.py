"""Process link use case (-> LINKED)."""

import logfire
from pydantic import BaseModel

from lynkr.application.usecase.base import BaseUseCase, store_errors
from lynkr.domain.error import TokenError
from lynkr.domain.service import AccountService, LinkingTokenService
from lynkr.domain.value import AuthProvider, LinkingTokenValue, UserId

from .list_linked_accounts import LinkedAccountsResponse


class ProcessLinkRequest(BaseModel):
    user_id: UserId  # Current session
    token: str
    provider: AuthProvider | None = None  # Defaults to the token's provider


class ProcessLinkUseCase(BaseUseCase):
    """Consume the linking token, then bind the handshake identity.

    Consume runs first and is single-use, so a replayed or captured token
    can never produce a second binding.
    """

    def __init__(
        self,
        linking_token_service: LinkingTokenService,
        account_service: AccountService,
    ) -> None:
        self.linking_token_service = linking_token_service
        self.account_service = account_service

    async def execute(self, request: ProcessLinkRequest) -> LinkedAccountsResponse:
        """Link the provider identity to the session user.

        Raises:
            TokenError: Token malformed, expired, consumed, mis-scoped, or
                without a completed handshake
            IdentityAlreadyBoundError: Identity belongs to another user
            ProviderAlreadyLinkedError: User already has this provider
        """
        try:
            token_value = LinkingTokenValue(request.token).root
        except ValueError:
            raise TokenError()

        with store_errors("process_link"):
            provider = request.provider
            if provider is None:
                pending = await self.linking_token_service.peek(token_value)
                if pending is None:
                    raise TokenError()
                provider = pending.provider

            # A token whose handshake is pending stays usable
            consumed = await self.linking_token_service.consume(
                token_value, request.user_id, provider, require_handshake=True
            )
            if consumed is None:
                raise TokenError()

            account = await self.account_service.create(
                request.user_id,
                provider,
                consumed.subject_id,
                consumed.subject_handle,
            )
            accounts = await self.account_service.list_by_user(request.user_id)

        logfire.info(
            "Account linked",
            user_id=str(request.user_id),
            provider=provider.value,
            account_id=str(account.id),
        )
        return LinkedAccountsResponse.from_accounts(accounts)
