"""
ShopSavvy Data API Python SDK

Overview
--------
Python client library for the ShopSavvy Data API: product details, current
offers, price history, scheduled monitoring and usage across thousands of
retailers. This package provides a typed client, models, and helpers for
synchronous and asynchronous use, plus pandas conversions for analysis.

Exports
-------
- ``ShopSavvyClient``: main entry point for API access
- ``ShopSavvyConfig``: validated, immutable client settings
- Pydantic models for typed responses: ``ApiResponse``, ``ProductDetails``,
  ``Offer``, ``OfferWithHistory``, ``ScheduledProduct``, ``UsageInfo`` and the
  schedule/removal confirmations
- Exception hierarchy rooted at ``ShopSavvyAPIError``, with ``ErrorKind`` and
  ``classify_error``
"""
from .client import ShopSavvyClient, SDK_VERSION
from .config import ShopSavvyConfig
from .models import (
    ApiResponse,
    ProductDetails,
    Offer,
    PriceHistoryEntry,
    OfferWithHistory,
    ScheduledProduct,
    UsageInfo,
    ScheduleResponse,
    ScheduleBatchResponse,
    RemoveResponse,
    RemoveBatchResponse,
)
from .exceptions import (
    ErrorKind,
    ShopSavvyAPIError,
    ShopSavvyConfigError,
    AuthenticationError,
    NotFoundError,
    ValidationError,
    RateLimitError,
    ClientClosedError,
    ShopSavvyNetworkError,
    ShopSavvyTimeoutError,
    classify_error,
)

# Package semantic version. Keep in sync with packaging config in setup.py
__version__ = SDK_VERSION
# Public API surface intended for ``from shopsavvy import *`` consumers.
__all__ = [
    "ShopSavvyClient",
    "ShopSavvyConfig",
    "ApiResponse",
    "ProductDetails",
    "Offer",
    "PriceHistoryEntry",
    "OfferWithHistory",
    "ScheduledProduct",
    "UsageInfo",
    "ScheduleResponse",
    "ScheduleBatchResponse",
    "RemoveResponse",
    "RemoveBatchResponse",
    "ErrorKind",
    "ShopSavvyAPIError",
    "ShopSavvyConfigError",
    "AuthenticationError",
    "NotFoundError",
    "ValidationError",
    "RateLimitError",
    "ClientClosedError",
    "ShopSavvyNetworkError",
    "ShopSavvyTimeoutError",
    "classify_error",
]
