"""
Data models for the ShopSavvy Data API SDK.

These Pydantic models provide type‑safe structures for the API's resources.
They are intentionally minimal and map closely to the API responses: attribute
names equal the JSON keys, unknown keys are ignored, and every instance is
frozen once deserialized.
"""
from typing import Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class ApiResponse(_Record, Generic[T]):
    """Standard response envelope returned by every endpoint.

    Attributes
    ----------
    success: Whether the request was successful.
    data: Endpoint-specific payload (object, list or mapping).
    message: Optional server message.
    credits_used: Credits consumed by this request.
    credits_remaining: Credits left in the billing period.
    """
    success: bool
    data: T
    message: Optional[str] = None
    credits_used: Optional[int] = None
    credits_remaining: Optional[int] = None


class ProductDetails(_Record):
    """Product details.

    Attributes
    ----------
    product_id: ShopSavvy product identifier.
    name: Product name.
    brand: Product brand.
    category: Product category.
    image_url: Product image URL.
    barcode: UPC/EAN barcode.
    asin: Amazon ASIN.
    model: Manufacturer model number.
    mpn: Manufacturer part number.
    description: Free-text product description.
    identifiers: Additional identifiers keyed by type.
    """
    product_id: str
    name: str
    brand: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    barcode: Optional[str] = None
    asin: Optional[str] = None
    model: Optional[str] = None
    mpn: Optional[str] = None
    description: Optional[str] = None
    identifiers: Optional[Dict[str, str]] = None


class Offer(_Record):
    """Product offer from a retailer."""
    offer_id: str
    retailer: str
    price: float
    currency: str
    availability: str
    condition: str
    url: str
    shipping: Optional[float] = None
    last_updated: str


class PriceHistoryEntry(_Record):
    """Single price point in an offer's history."""
    date: str
    price: float
    availability: str


class OfferWithHistory(Offer):
    """Offer with its historical price points."""
    price_history: List[PriceHistoryEntry] = []


class ScheduledProduct(_Record):
    """Scheduled product monitoring entry."""
    product_id: str
    identifier: str
    frequency: str  # hourly, daily, weekly
    retailer: Optional[str] = None
    created_at: str
    last_refreshed: Optional[str] = None


class UsageInfo(_Record):
    """API usage and credit information for the current billing period."""
    credits_used: int
    credits_remaining: int
    credits_total: int
    billing_period_start: str
    billing_period_end: str
    plan_name: str


class ScheduleResponse(_Record):
    """Confirmation that a product was scheduled for monitoring."""
    scheduled: bool
    product_id: str


class ScheduleBatchResponse(_Record):
    """Per-identifier scheduling result of a batch request."""
    identifier: str
    scheduled: bool
    product_id: str


class RemoveResponse(_Record):
    """Confirmation that a product was removed from the schedule."""
    removed: bool


class RemoveBatchResponse(_Record):
    """Per-identifier removal result of a batch request."""
    identifier: str
    removed: bool
