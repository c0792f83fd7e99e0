"""
Shopify-specific exception handling and error classes.
"""

from typing import Dict, Any, Optional, List

from .models import ShopifyError


class ShopifyRateLimitError(ShopifyError):
    """Error raised when Shopify API rate limit is exceeded."""

    def __init__(self, message: str, retry_after: Optional[float] = None, **kwargs):
        super().__init__(message, 429, **kwargs)
        self.retry_after = retry_after


class ShopifyAuthenticationError(ShopifyError):
    """Error raised when Shopify authentication fails."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, 401, **kwargs)


class ShopifyPermissionError(ShopifyError):
    """Error raised when Shopify permission is denied."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, 403, **kwargs)


class ShopifyNotFoundError(ShopifyError):
    """Error raised when Shopify resource is not found."""

    def __init__(self, message: str, resource_type: Optional[str] = None, **kwargs):
        super().__init__(message, 404, **kwargs)
        self.resource_type = resource_type


class ShopifyValidationError(ShopifyError):
    """Error raised when Shopify request validation fails."""

    def __init__(self, message: str, validation_errors: Optional[Any] = None, **kwargs):
        super().__init__(message, 422, **kwargs)
        self.validation_errors = validation_errors or {}


class ShopifyServerError(ShopifyError):
    """Error raised when Shopify server error occurs."""

    def __init__(self, message: str, status_code: int = 500, **kwargs):
        super().__init__(message, status_code, **kwargs)


class ShopifyTimeoutError(ShopifyError):
    """Error raised when Shopify request times out."""

    def __init__(self, message: str, timeout: Optional[float] = None, **kwargs):
        super().__init__(message, 408, **kwargs)
        self.timeout = timeout


class ShopifyConnectionError(ShopifyError):
    """Error raised when Shopify connection fails."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, 503, **kwargs)


class ShopifyGraphQLError(ShopifyError):
    """Error raised when a GraphQL response carries top-level errors."""

    def __init__(self, message: str, graphql_errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.graphql_errors = graphql_errors or []


class ShopifyUserError(ShopifyValidationError):
    """Error raised when a mutation returns userErrors."""

    def __init__(self, message: str, user_errors: Optional[List[Dict[str, Any]]] = None, **kwargs):
        super().__init__(message, validation_errors=user_errors, **kwargs)
        self.user_errors = user_errors or []


def _extract_message(response_data: Dict[str, Any]) -> str:
    errors = response_data.get("errors")
    if isinstance(errors, str):
        return errors
    if isinstance(errors, dict):
        error_parts = []
        for field, field_errors in errors.items():
            if isinstance(field_errors, list):
                error_parts.append(f"{field}: {', '.join(str(e) for e in field_errors)}")
            else:
                error_parts.append(f"{field}: {field_errors}")
        return "; ".join(error_parts)
    if "error" in response_data:
        return str(response_data["error"])
    if "message" in response_data:
        return str(response_data["message"])
    return "Unknown Shopify error"


def shopify_error_from_response(
    status_code: int,
    response_data: Dict[str, Any],
    retry_after: Optional[float] = None,
) -> ShopifyError:
    """
    Create appropriate ShopifyError from HTTP response.

    Args:
        status_code: HTTP status code
        response_data: Response data from Shopify
        retry_after: Value of the Retry-After header, if any

    Returns:
        Appropriate ShopifyError subclass
    """
    error_message = _extract_message(response_data)

    if status_code == 401:
        return ShopifyAuthenticationError(error_message, response=response_data)
    elif status_code == 403:
        return ShopifyPermissionError(error_message, response=response_data)
    elif status_code == 404:
        return ShopifyNotFoundError(error_message, response=response_data)
    elif status_code == 422:
        return ShopifyValidationError(error_message, response_data.get("errors"), response=response_data)
    elif status_code == 429:
        return ShopifyRateLimitError(error_message, retry_after, response=response_data)
    elif status_code >= 500:
        return ShopifyServerError(error_message, status_code, response=response_data)
    else:
        return ShopifyError(error_message, status_code, response_data)


def _format_errors(errors: List[Any]) -> str:
    error_messages = []
    for error in errors:
        if isinstance(error, dict):
            error_part = error.get("message", "Unknown error")
            field = error.get("field")
            if field:
                if isinstance(field, list):
                    field = ".".join(str(f) for f in field)
                error_part = f"{field}: {error_part}"
            code = error.get("code") or (error.get("extensions") or {}).get("code")
            if code:
                error_part = f"{error_part} (code: {code})"
            error_messages.append(error_part)
        else:
            error_messages.append(str(error))
    return "; ".join(error_messages)


def shopify_graphql_error_from_response(errors: list) -> ShopifyError:
    """
    Create an error from the top-level GraphQL ``errors`` list.

    A THROTTLED code maps to ShopifyRateLimitError so callers can tell a
    cost-budget rejection from a broken query.
    """
    if not errors:
        return ShopifyGraphQLError("Unknown GraphQL error")

    message = _format_errors(errors)
    for error in errors:
        if isinstance(error, dict) and (error.get("extensions") or {}).get("code") == "THROTTLED":
            return ShopifyRateLimitError(message, response={"errors": errors})

    return ShopifyGraphQLError(message, graphql_errors=errors)


def shopify_user_error_from_payload(user_errors: List[Dict[str, Any]]) -> ShopifyUserError:
    """Create ShopifyUserError from a mutation payload's ``userErrors``."""
    return ShopifyUserError(_format_errors(user_errors) or "Unknown user error", user_errors=user_errors)
