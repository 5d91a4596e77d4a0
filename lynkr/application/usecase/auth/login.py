"""Login use case."""

import logfire
from pydantic import BaseModel

from lynkr.application.usecase.base import BaseUseCase, CallbackResponse, store_errors
from lynkr.config import Settings
from lynkr.domain.service import AccountService, AuthService, JWTService, UserService
from lynkr.domain.value import AuthProvider


class LoginRequest(BaseModel):
    """Login request from OAuth callback."""

    provider: AuthProvider
    code: str  # OAuth authorization code
    state: str  # Signed state value, already verified by the caller
    next_url: str | None = None  # Frontend path to return to


class LoginUseCase(BaseUseCase):
    """Sign in, creating the user on first sign-in.

    An existing user is only ever found through the exact (provider,
    subject) binding. Accounts are never merged by email.
    """

    def __init__(
        self,
        auth_service: AuthService,
        jwt_service: JWTService,
        user_service: UserService,
        account_service: AccountService,
        settings: Settings,
    ) -> None:
        self.auth_service = auth_service
        self.jwt_service = jwt_service
        self.user_service = user_service
        self.account_service = account_service
        self.settings = settings

    async def execute(self, request: LoginRequest) -> CallbackResponse:
        """Execute multi-provider login flow.

        Steps:
        1. Complete OAuth with the provider
        2. Find the account bound to the returned identity
        3. If none: create user (no handle yet) and first account
        4. Banned users are sent to the banned notice without a session
        5. Issue session token and pick the redirect target

        Raises:
            ProviderError: If the provider handshake fails
        """
        info = await self.auth_service.complete_login(
            request.provider, request.code, request.state
        )
        frontend = self.settings.api.frontend_url
        gatekeeper = self.settings.gatekeeper

        with store_errors("login"):
            account = await self.account_service.find_by_provider(
                info.provider, info.provider_user_id
            )

            with logfire.span(
                "login_user",
                provider=info.provider.value,
                is_new_user=account is None,
            ):
                if account:
                    user = await self.user_service.get_by_id(account.user_id)
                else:
                    user = await self.user_service.create_from_provider(info)
                    await self.account_service.create(
                        user.id, info.provider, info.provider_user_id, info.handle
                    )

                if user.banned:
                    logfire.warn("Banned user sign-in refused", user_id=str(user.id))
                    return CallbackResponse(redirect_url=f"{frontend}{gatekeeper.banned_path}")

                token = self.jwt_service.create_token(user)

        if not user.is_onboarded:
            target = gatekeeper.onboarding_path
        elif _is_local_path(request.next_url):
            target = request.next_url
        else:
            target = gatekeeper.landing_path

        logfire.info("User logged in", user_id=str(user.id), provider=info.provider.value)
        return CallbackResponse(redirect_url=f"{frontend}{target}", session_token=token)


def _is_local_path(url: str | None) -> bool:
    """Only same-site absolute paths are accepted as redirect targets."""
    return bool(url) and url.startswith("/") and not url.startswith("//")
