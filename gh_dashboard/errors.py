"""Errors raised while fetching workflow data."""


class FetchError(Exception):
    """Raised when a single provider call fails."""


class ServiceError(Exception):
    """Raised when a fetch service operation fails as a whole."""
