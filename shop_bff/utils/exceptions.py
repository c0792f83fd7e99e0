"""
Custom exception classes for the application.
"""

from typing import Any, Dict, Optional


class ShopBFFException(Exception):
    """Base exception class for Shop BFF."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(ShopBFFException):
    """Exception raised for validation errors."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        self.field = field
        super().__init__(message, error_code="VALIDATION_ERROR", **kwargs)


class NotFoundError(ShopBFFException):
    """Exception raised when a resource is not found."""

    def __init__(self, message: str = "Resource not found", **kwargs):
        super().__init__(message, error_code="NOT_FOUND", **kwargs)


class UpstreamServiceError(ShopBFFException):
    """Generic error for a failed call to the commerce platform."""

    def __init__(
        self,
        message: str = "External service error",
        service_name: Optional[str] = "shopify",
        **kwargs
    ):
        self.service_name = service_name
        super().__init__(message, error_code="EXTERNAL_SERVICE_ERROR", **kwargs)


class CacheUnavailableError(ShopBFFException):
    """Exception raised when an operation needs the local cache but it is disabled."""

    def __init__(self, message: str = "Local cache is not enabled", **kwargs):
        super().__init__(message, error_code="CACHE_UNAVAILABLE", **kwargs)
