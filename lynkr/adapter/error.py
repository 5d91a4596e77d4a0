"""Adapter layer errors."""


class AdapterError(Exception):
    """Base adapter error."""

    pass


class ProviderError(AdapterError):
    """External identity provider error (rejected code, timeout, bad response)."""

    pass
