"""User use cases."""

from .claim_handle import ClaimHandleUseCase

__all__ = ["ClaimHandleUseCase"]
