"""Custom exception types for consistent error handling."""


class RepositoryUnavailableError(Exception):
    """Raised when a profile, swipe, or report lookup fails."""


class InvalidInputError(Exception):
    """Raised when a caller passes input outside the documented contract."""


class GraphExecutionError(Exception):
    """Raised when the feed graph fails to compile or execute."""
