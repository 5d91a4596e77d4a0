"""Request gatekeeper.

Decides, for every inbound request, whether it may proceed or must be
redirected. Rules, first match wins:

1. root path: allow
2. banned session: allow sign-out and the banned notice, redirect the rest
   to the banned notice
3. protected path, anonymous: redirect to login
4. protected path, no handle yet: redirect to onboarding
5. signed in on a login/registration path: redirect to the landing page,
   unless the callback target is the account-linking page
6. allow
"""

from urllib.parse import parse_qs, urlsplit

from lynkr.config import GatekeeperSettings, LinkingSettings
from lynkr.domain.model.session import AccessDecision, Session


def normalize_path(path: str) -> str:
    """Drop trailing slashes; the root path stays "/"."""
    return path.rstrip("/") or "/"


class Gatekeeper:
    """Pure, total decision function over (path, session)."""

    def __init__(self, settings: GatekeeperSettings, linking: LinkingSettings) -> None:
        self.settings = settings
        self.linking = linking
        self._protected = {normalize_path(p) for p in settings.protected_paths}
        self._login = {normalize_path(p) for p in settings.login_paths}
        self._banned_allowed = {
            normalize_path(p) for p in settings.signout_paths
        } | {normalize_path(settings.banned_path)}

    def is_protected(self, path: str) -> bool:
        return normalize_path(path) in self._protected

    def is_linking_callback(self, callback_url: str | None) -> bool:
        """Whether a post-login redirect target is the account-linking page."""
        if not callback_url:
            return False
        parts = urlsplit(callback_url)
        if normalize_path(parts.path) != normalize_path(self.linking.settings_path):
            return False
        return self.linking.settings_tab in parse_qs(parts.query).get("tab", [])

    def decide(
        self,
        path: str,
        session: Session | None,
        callback_url: str | None = None,
    ) -> AccessDecision:
        """Decide what happens to a request.

        Args:
            path: Request path
            session: Resolved session, None when anonymous
            callback_url: Post-login redirect target from the query string

        Returns:
            Allow, or a redirect to login, onboarding, banned notice or
            landing page
        """
        path = normalize_path(path)

        if path == "/":
            return AccessDecision.allow()

        if session is not None and session.banned:
            if path in self._banned_allowed:
                return AccessDecision.allow()
            return AccessDecision.redirect_to(self.settings.banned_path)

        if self.is_protected(path):
            if session is None:
                return AccessDecision.redirect_to(self.settings.login_path)
            if not session.has_handle:
                return AccessDecision.redirect_to(self.settings.onboarding_path)

        if session is not None and path in self._login:
            if self.is_linking_callback(callback_url):
                return AccessDecision.allow()
            return AccessDecision.redirect_to(self.settings.landing_path)

        return AccessDecision.allow()
