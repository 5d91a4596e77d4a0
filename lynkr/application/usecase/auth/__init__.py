"""Authentication use cases."""

from .get_current_user import GetCurrentUserUseCase
from .login import LoginUseCase

__all__ = ["LoginUseCase", "GetCurrentUserUseCase"]
