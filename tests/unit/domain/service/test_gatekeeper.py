"""Unit tests for the request Gatekeeper."""

from uuid import uuid4

import pytest

from lynkr.config import GatekeeperSettings, LinkingSettings
from lynkr.domain.model import Session
from lynkr.domain.service import Gatekeeper
from lynkr.domain.service.gatekeeper import normalize_path
from lynkr.domain.value import UserId

ANONYMOUS = None
NO_HANDLE = Session(user_id=UserId(uuid4()))
ONBOARDED = Session(user_id=UserId(uuid4()), handle="alice")
BANNED = Session(user_id=UserId(uuid4()), handle="mallory", banned=True)
BANNED_NO_HANDLE = Session(user_id=UserId(uuid4()), banned=True)

ALL_SESSIONS = [ANONYMOUS, NO_HANDLE, ONBOARDED, BANNED, BANNED_NO_HANDLE]
ALL_PATHS = [
    "/",
    "/admin",
    "/admin/",
    "/admin/settings",
    "/staff/user",
    "/login",
    "/register",
    "/auth/logout",
    "/banned",
    "/onboarding",
    "/alice",
    "/linked-accounts",
]


@pytest.fixture
def gatekeeper() -> Gatekeeper:
    return Gatekeeper(GatekeeperSettings(), LinkingSettings())


def _target(gatekeeper, path, session, callback_url=None):
    decision = gatekeeper.decide(path, session, callback_url)
    return None if decision.allowed else decision.target


class TestDecide:
    """Tests for Gatekeeper.decide()."""

    @pytest.mark.parametrize(
        "path,session,expected",
        [
            # Root is always allowed
            ("/", ANONYMOUS, None),
            ("/", BANNED, None),
            # Protected paths
            ("/admin", ANONYMOUS, "/login"),
            ("/admin/", ANONYMOUS, "/login"),
            ("/staff/user", ANONYMOUS, "/login"),
            ("/admin/analytics", NO_HANDLE, "/onboarding"),
            ("/admin/settings", ONBOARDED, None),
            # Banned sessions
            ("/admin", BANNED, "/banned"),
            ("/alice", BANNED, "/banned"),
            ("/linked-accounts", BANNED, "/banned"),
            ("/auth/logout", BANNED, None),
            ("/banned", BANNED, None),
            # Login pages
            ("/login", ANONYMOUS, None),
            ("/login", ONBOARDED, "/admin"),
            ("/register", NO_HANDLE, "/admin"),
            # Everything else
            ("/alice", ANONYMOUS, None),
            ("/onboarding", NO_HANDLE, None),
        ],
    )
    def test_decision(self, gatekeeper, path, session, expected):
        assert _target(gatekeeper, path, session) == expected

    def test_ban_wins_over_login_redirect(self, gatekeeper):
        """A banned user on the login page goes to the banned notice."""
        assert _target(gatekeeper, "/login", BANNED) == "/banned"

    def test_ban_wins_over_onboarding(self, gatekeeper):
        """A banned user without a handle is not sent to onboarding."""
        assert _target(gatekeeper, "/admin", BANNED_NO_HANDLE) == "/banned"

    def test_login_allowed_when_returning_to_linking_page(self, gatekeeper):
        """Signed-in users may pass login when heading back to the accounts tab."""
        target = _target(
            gatekeeper, "/login", ONBOARDED, "/admin/settings?tab=accounts&action=reauth"
        )

        assert target is None

    def test_login_redirects_for_other_callback(self, gatekeeper):
        target = _target(gatekeeper, "/login", ONBOARDED, "/admin/settings?tab=profile")

        assert target == "/admin"

    @pytest.mark.parametrize("path", ALL_PATHS)
    @pytest.mark.parametrize("session", ALL_SESSIONS)
    def test_every_request_gets_a_decision(self, gatekeeper, path, session):
        """Every (path, session) pair yields allow or a known redirect."""
        decision = gatekeeper.decide(path, session)

        assert decision.allowed or decision.target in {
            "/login",
            "/onboarding",
            "/banned",
            "/admin",
        }

    @pytest.mark.parametrize("path", ALL_PATHS)
    def test_banned_never_reaches_protected_content(self, gatekeeper, path):
        decision = gatekeeper.decide(path, BANNED)

        if normalize_path(path) in {"/", "/auth/logout", "/banned"}:
            assert decision.allowed
        else:
            assert decision.target == "/banned"


class TestNormalizePath:
    @pytest.mark.parametrize(
        "raw,expected",
        [("/", "/"), ("", "/"), ("/admin/", "/admin"), ("/admin//", "/admin")],
    )
    def test_normalize(self, raw, expected):
        assert normalize_path(raw) == expected
