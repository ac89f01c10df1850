"""Custom exceptions for sacred-wiki."""


class NotFoundError(Exception):
    """Raised when a requested resource is not found."""

    pass


class ValidationError(Exception):
    """Raised when validation fails."""

    pass


class ContentUnavailableError(Exception):
    """Raised when the content directory or one of its pages cannot be read."""

    pass


class ResearchUnavailableError(Exception):
    """Raised when the research provider is not configured or fails."""

    pass
