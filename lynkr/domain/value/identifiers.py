"""Strongly typed identifiers for Lynkr domain entities."""

from typing import NewType
from uuid import UUID

UserId = NewType("UserId", UUID)
AccountId = NewType("AccountId", UUID)
