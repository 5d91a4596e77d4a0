"""Mappers for converting between database rows and domain models.

Domain models are immutable pydantic models, so rows are mapped by hand.
"""

from typing import Any, Dict
from uuid import UUID

from lynkr.domain.model import Account, LinkingToken, User
from lynkr.domain.value import AccountId, AuthProvider, UserId
from lynkr.domain.value.types import Handle, UserRole


def _uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def row_to_user(row: Dict[str, Any]) -> User:
    """Convert database row to User domain model.

    Args:
        row: Database row as dict

    Returns:
        User domain model
    """
    return User(
        id=UserId(_uuid(row["id"])),
        name=row.get("name"),
        email=row.get("email"),
        image=row.get("image"),
        handle=Handle(row["handle"]) if row.get("handle") else None,
        role=UserRole(row["role"]),
        banned=row["banned"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def user_to_dict(user: User) -> Dict[str, Any]:
    """Convert User domain model to database dict.

    Args:
        user: User domain model

    Returns:
        Dict suitable for database insertion/update
    """
    data = user.model_dump()
    data["role"] = user.role.value
    return data


def row_to_account(row: Dict[str, Any]) -> Account:
    """Convert database row to Account domain model."""
    return Account(
        id=AccountId(_uuid(row["id"])),
        user_id=UserId(_uuid(row["user_id"])),
        provider=AuthProvider(row["provider"]),
        subject_id=row["subject_id"],
        provider_handle=row.get("provider_handle"),
        created_at=row["created_at"],
    )


def account_to_dict(account: Account) -> Dict[str, Any]:
    """Convert Account domain model to database dict."""
    data = account.model_dump()
    data["provider"] = account.provider.value
    return data


def row_to_linking_token(row: Dict[str, Any]) -> LinkingToken:
    """Convert database row to LinkingToken domain model."""
    return LinkingToken(
        token=row["token"],
        user_id=UserId(_uuid(row["user_id"])),
        provider=AuthProvider(row["provider"]),
        expires_at=row["expires_at"],
        created_at=row["created_at"],
        subject_id=row.get("subject_id"),
        subject_handle=row.get("subject_handle"),
    )


def linking_token_to_dict(token: LinkingToken) -> Dict[str, Any]:
    """Convert LinkingToken domain model to database dict."""
    data = token.model_dump()
    data["provider"] = token.provider.value
    return data
