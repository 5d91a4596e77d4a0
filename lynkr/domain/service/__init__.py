"""Domain services."""

from lynkr.domain.service.account_service import AccountService
from lynkr.domain.service.auth_service import AuthService, OAuthClient
from lynkr.domain.service.base import Service
from lynkr.domain.service.gatekeeper import Gatekeeper
from lynkr.domain.service.jwt_service import JWTService
from lynkr.domain.service.linking_token_service import LinkingTokenService
from lynkr.domain.service.session_resolver import SessionResolver
from lynkr.domain.service.user_service import UserService

__all__ = [
    "Service",
    "AccountService",
    "AuthService",
    "OAuthClient",
    "Gatekeeper",
    "JWTService",
    "LinkingTokenService",
    "SessionResolver",
    "UserService",
]
