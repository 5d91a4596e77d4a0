"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Missing or malformed input. The message is safe to show to the user."""

    pass


class AuthError(DomainError):
    """No session, or the session lacks state the operation requires."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class TokenError(DomainError):
    """Linking token is expired, already consumed, or scoped elsewhere.

    The message never says which of those applies.
    """

    MESSAGE = "Invalid or expired linking token"

    def __init__(self):
        super().__init__(self.MESSAGE)


class ConflictError(DomainError):
    """Operation conflicts with the current state of the store."""

    pass


class IdentityAlreadyBoundError(ConflictError):
    """External identity already backs a different user."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"This {provider} account is already linked to another user")


class ProviderAlreadyLinkedError(ConflictError):
    """User already has a different identity bound for this provider."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"A {provider} account is already linked to this user")


class LastAccountError(ConflictError):
    """Unlink would leave the user with no linked account."""

    def __init__(self):
        super().__init__("At least one linked account must remain")


class NotAuthorizedError(DomainError):
    """Raised when a user lacks the role required for an operation."""

    def __init__(self, action: str, user_id: str):
        super().__init__(f"User {user_id} is not authorized to {action}")


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class InfrastructureError(DomainError):
    """Backing store or provider unavailable. Detail is logged, never returned."""

    pass
