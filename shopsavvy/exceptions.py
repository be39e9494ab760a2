"""
Exception classes for the ShopSavvy Data API SDK.

The SDK raises a small hierarchy of exceptions to make error handling
predictable and structured. Catch ``ShopSavvyAPIError`` to handle all API
failures in a single place, catch specific subclasses for finer control, or
switch on the ``kind`` attribute every exception carries.

Typical usage:
    >>> from shopsavvy import ShopSavvyClient, AuthenticationError, RateLimitError
    >>> client = ShopSavvyClient(api_key="ss_live_...")
    >>> try:
    ...     product = client.get_product_details("012345678901")
    ... except AuthenticationError:
    ...     print("Invalid API key")
    ... except RateLimitError:
    ...     print("Back off and retry later")
"""
import json
from enum import Enum
from typing import Dict, Optional, Type


class ErrorKind(str, Enum):
    """Discriminant shared by every SDK exception."""
    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    RATE_LIMIT = "rate_limit"
    NETWORK = "network"
    TIMEOUT = "timeout"
    API = "api"


class ShopSavvyAPIError(Exception):
    """Base exception for API errors.

    Raised when the server returns a non-success HTTP status code or an error
    occurs while processing a response. All SDK exceptions inherit from this
    class so callers can handle failures generically.

    Attributes
    ----------
    message: Human-readable description.
    status_code: Originating HTTP status, when one was received.
    """
    kind = ErrorKind.API

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ShopSavvyConfigError(ShopSavvyAPIError, ValueError):
    """Client configuration is invalid (missing or malformed API key, bad timeout)."""
    kind = ErrorKind.CONFIGURATION


class AuthenticationError(ShopSavvyAPIError):
    """Authentication failed (HTTP 401)."""
    kind = ErrorKind.AUTHENTICATION


class NotFoundError(ShopSavvyAPIError):
    """Requested resource was not found (HTTP 404)."""
    kind = ErrorKind.NOT_FOUND


class ValidationError(ShopSavvyAPIError):
    """The server rejected the request parameters (HTTP 422)."""
    kind = ErrorKind.VALIDATION


class RateLimitError(ShopSavvyAPIError):
    """The client exceeded the allowed request rate (HTTP 429)."""
    kind = ErrorKind.RATE_LIMIT


class ClientClosedError(ShopSavvyAPIError):
    """A request was attempted on a client that has already been closed."""


class ShopSavvyNetworkError(ShopSavvyAPIError):
    """The request failed before any HTTP status was received."""
    kind = ErrorKind.NETWORK


class ShopSavvyTimeoutError(ShopSavvyAPIError):
    """The request exceeded the configured timeout."""
    kind = ErrorKind.TIMEOUT

    def __init__(self, message: str, timeout_ms: Optional[int] = None):
        super().__init__(message)
        self.timeout_ms = timeout_ms


# Statuses with a fixed message; the response body is ignored for these.
STATUS_ERRORS: Dict[int, Type[ShopSavvyAPIError]] = {
    401: AuthenticationError,
    404: NotFoundError,
    422: ValidationError,
    429: RateLimitError,
}

STATUS_MESSAGES: Dict[int, str] = {
    401: "Authentication failed. Check your API key.",
    404: "Resource not found",
    422: "Request validation failed. Check your parameters.",
    429: "Rate limit exceeded. Please slow down your requests.",
}


def extract_error_message(raw_body: str) -> str:
    """Return the ``error`` field of a JSON error body, or the raw body text."""
    try:
        payload = json.loads(raw_body)
    except ValueError:
        return raw_body

    if isinstance(payload, dict) and payload.get("error") is not None:
        return str(payload["error"])
    return raw_body


def classify_error(status_code: int, raw_body: str) -> ShopSavvyAPIError:
    """Map a failed HTTP response to a typed exception (returned, not raised)."""
    error_cls = STATUS_ERRORS.get(status_code)
    if error_cls is not None:
        return error_cls(STATUS_MESSAGES[status_code], status_code=status_code)

    message = extract_error_message(raw_body)
    return ShopSavvyAPIError(f"HTTP {status_code}: {message}", status_code=status_code)
