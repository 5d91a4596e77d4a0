"""Staff moderation use cases."""

from .ban_user import BanUserUseCase
from .promote_user import PromoteUserUseCase

__all__ = ["BanUserUseCase", "PromoteUserUseCase"]
