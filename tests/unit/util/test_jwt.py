"""Unit tests for JWT session and state helpers."""

import pytest

from lynkr.config import AuthSettings
from lynkr.util.jwt import (
    JWTError,
    StatePurpose,
    create_state,
    create_token,
    verify_state,
    verify_token,
)

SECRET = "unit-test-signing-secret-0123456789"


@pytest.fixture
def settings() -> AuthSettings:
    return AuthSettings(jwt_secret=SECRET)


class TestSessionToken:
    def test_round_trip(self, settings):
        token = create_token("user-1", "alice", "admin", False, settings)

        payload = verify_token(token, settings)

        assert payload.user_id == "user-1"
        assert payload.handle == "alice"
        assert payload.role == "admin"
        assert payload.banned is False

    def test_wrong_secret(self, settings):
        token = create_token("user-1", None, "user", False, settings)

        with pytest.raises(JWTError):
            verify_token(token, AuthSettings(jwt_secret=SECRET[::-1]))

    def test_expired(self):
        settings = AuthSettings(jwt_secret=SECRET, jwt_expiry_days=-1)
        token = create_token("user-1", None, "user", False, settings)

        with pytest.raises(JWTError, match="expired"):
            verify_token(token, settings)


class TestState:
    def test_round_trip(self, settings):
        state = create_state(
            StatePurpose.LINK,
            "discord",
            settings,
            user_id="user-1",
            link_provider="discord",
            link_token="tok",
        )

        payload = verify_state(state, settings)

        assert payload.purpose == StatePurpose.LINK
        assert payload.provider == "discord"
        assert payload.user_id == "user-1"
        assert payload.link_token == "tok"

    def test_states_are_unique(self, settings):
        first = create_state(StatePurpose.LOGIN, "github", settings)
        second = create_state(StatePurpose.LOGIN, "github", settings)

        assert first != second

    def test_session_token_is_not_a_state(self, settings):
        token = create_token("user-1", None, "user", False, settings)

        with pytest.raises(JWTError):
            verify_state(token, settings)

    def test_state_is_not_a_session_token(self, settings):
        state = create_state(StatePurpose.LOGIN, "github", settings)

        with pytest.raises(JWTError):
            verify_token(state, settings)

    def test_expired_state(self):
        settings = AuthSettings(jwt_secret=SECRET, state_expiry_seconds=-1)
        state = create_state(StatePurpose.LOGIN, "github", settings)

        with pytest.raises(JWTError, match="expired"):
            verify_state(state, settings)
