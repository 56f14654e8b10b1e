"""
Exception types for the HTTP Status Code Teacher service.

Only input validation and configuration errors are meant to reach a caller.
Provider errors are raised and handled inside the AI adapter layer.
"""


class StatusCodeTeacherError(Exception):
    """Base class for all service errors."""


class InvalidStatusCodeError(StatusCodeTeacherError):
    """Raised when a status code is missing, not an integer, or outside 100-599."""

    def __init__(self, value=None):
        self.value = value
        super().__init__("Invalid status code. Must be between 100 and 599.")


class InvalidCategoryError(StatusCodeTeacherError):
    """Raised when a catalog category is not one of 1xx..5xx."""

    def __init__(self, category: str):
        self.category = category
        super().__init__("Invalid category. Use 1xx, 2xx, 3xx, 4xx, or 5xx.")


class ConfigurationError(StatusCodeTeacherError):
    """Raised at startup when a configuration value cannot be used."""


class ProviderPermanentError(StatusCodeTeacherError):
    """A provider failure that retrying will not fix (empty or malformed response)."""
