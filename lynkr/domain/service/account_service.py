"""Account domain service.

Owns the identity bindings of a user and the user-global ban and role flags.
"""

from uuid import uuid4

import logfire

from lynkr.domain.error import (
    IdentityAlreadyBoundError,
    LastAccountError,
    NotFoundError,
    ProviderAlreadyLinkedError,
)
from lynkr.domain.model.account import Account
from lynkr.domain.repository import AccountRepository, DeleteOutcome, UserRepository
from lynkr.domain.value import AccountId, AuthProvider, UserId
from lynkr.domain.value.types import UserRole

from .base import Service


class AccountService(Service):
    """Domain service for account bindings."""

    def __init__(
        self,
        account_repository: AccountRepository,
        user_repository: UserRepository,
    ) -> None:
        """Initialize account service.

        Args:
            account_repository: Account repository
            user_repository: User repository (ban and role flags)
        """
        self.account_repository = account_repository
        self.user_repository = user_repository

    async def list_by_user(self, user_id: UserId) -> list[Account]:
        """Get all accounts linked to a user, oldest first."""
        with logfire.span("account_service.list_by_user", user_id=str(user_id)):
            accounts = await self.account_repository.find_all_by_user_id(user_id)
            logfire.info(
                "Accounts retrieved for user", user_id=str(user_id), count=len(accounts)
            )
            return accounts

    async def find_by_provider(
        self, provider: AuthProvider, subject_id: str
    ) -> Account | None:
        return await self.account_repository.find_by_provider(provider, subject_id)

    async def create(
        self,
        user_id: UserId,
        provider: AuthProvider,
        subject_id: str,
        provider_handle: str | None = None,
    ) -> Account:
        """Bind a provider identity to a user.

        Binding an identity the user already owns returns the existing
        account unchanged.

        Args:
            user_id: Owning user
            provider: Identity provider
            subject_id: Permanent provider subject id
            provider_handle: Display handle on the provider

        Returns:
            The new or existing account

        Raises:
            IdentityAlreadyBoundError: Identity backs a different user
            ProviderAlreadyLinkedError: User has another identity on this provider
        """
        with logfire.span(
            "account_service.create",
            user_id=str(user_id),
            provider=provider.value,
            subject_id=subject_id,
        ):
            existing = await self.account_repository.find_by_provider(
                provider, subject_id
            )
            if existing:
                if existing.user_id == user_id:
                    logfire.info(
                        "Identity already bound to this user",
                        user_id=str(user_id),
                        provider=provider.value,
                    )
                    return existing
                logfire.warn(
                    "Identity bound to another user",
                    user_id=str(user_id),
                    provider=provider.value,
                )
                raise IdentityAlreadyBoundError(provider.value)

            account = Account(
                id=AccountId(uuid4()),
                user_id=user_id,
                provider=provider,
                subject_id=subject_id,
                provider_handle=provider_handle,
            )
            created = await self.account_repository.add(account)
            if created is not None:
                logfire.info(
                    "Account created",
                    account_id=str(created.id),
                    user_id=str(user_id),
                    provider=provider.value,
                )
                return created

            # Lost a race or the user holds another identity for this provider
            winner = await self.account_repository.find_by_provider(provider, subject_id)
            if winner and winner.user_id == user_id:
                return winner
            if winner:
                raise IdentityAlreadyBoundError(provider.value)
            raise ProviderAlreadyLinkedError(provider.value)

    async def delete(self, account_id: AccountId, user_id: UserId) -> None:
        """Remove one of a user's accounts.

        Raises:
            NotFoundError: Account missing or owned by another user
            LastAccountError: It is the user's only account
        """
        with logfire.span(
            "account_service.delete", account_id=str(account_id), user_id=str(user_id)
        ):
            account = await self.account_repository.find_by_id(account_id)
            if not account or account.user_id != user_id:
                raise NotFoundError("Account", str(account_id))

            outcome = await self.account_repository.delete_unless_last(account_id, user_id)
            if outcome == DeleteOutcome.NOT_FOUND:
                # Removed by a concurrent unlink since the lookup above
                raise NotFoundError("Account", str(account_id))
            if outcome == DeleteOutcome.LAST_ACCOUNT:
                logfire.warn("Refused to unlink last account", user_id=str(user_id))
                raise LastAccountError()

            logfire.info(
                "Account deleted",
                account_id=str(account_id),
                user_id=str(user_id),
                provider=account.provider.value,
            )

    async def unlink_provider(self, user_id: UserId, provider: AuthProvider) -> None:
        """Remove the user's account for a provider.

        Raises:
            NotFoundError: User has no account for the provider
            LastAccountError: It is the user's only account
        """
        accounts = await self.account_repository.find_all_by_user_id(user_id)
        account = next((a for a in accounts if a.provider == provider), None)
        if not account:
            raise NotFoundError("Account", provider.value)
        await self.delete(account.id, user_id)

    async def set_ban_flag_for_user(self, user_id: UserId, banned: bool) -> None:
        """Ban or unban a user across every linked identity.

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span(
            "account_service.set_ban_flag_for_user", user_id=str(user_id), banned=banned
        ):
            if not await self.user_repository.set_banned(user_id, banned):
                raise NotFoundError("User", str(user_id))
            logfire.info("Ban flag updated", user_id=str(user_id), banned=banned)

    async def set_role_for_user(self, user_id: UserId, role: UserRole) -> None:
        """Change a user's role across every linked identity.

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span(
            "account_service.set_role_for_user", user_id=str(user_id), role=role.value
        ):
            if not await self.user_repository.set_role(user_id, role):
                raise NotFoundError("User", str(user_id))
            logfire.info("Role updated", user_id=str(user_id), role=role.value)
