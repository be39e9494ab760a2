"""
ShopSavvy Data API Client

Overview
--------
This module implements the main client for the ShopSavvy Data API, including:
- Synchronous HTTP methods for every endpoint
- Async counterparts sharing the same request pipeline
- Convenience helpers to convert offers and price history to pandas DataFrames

Design Notes
------------
- Network: Uses httpx for HTTP. One call per method; no retries, no caching.
- Pipeline: every method funnels through ``_execute`` (or ``_execute_async``),
  which builds the URL and body, sends the request and turns the response into
  an ``ApiResponse`` or a typed exception from ``classify_error``.
- Testing: pass ``transport=httpx.MockTransport(handler)`` to exercise the
  client without a network.
"""
import asyncio
import json
import logging
import time
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import quote

import httpx
import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from .config import DEFAULT_TIMEOUT_MS, ShopSavvyConfig
from .exceptions import (
    ClientClosedError,
    ShopSavvyAPIError,
    ShopSavvyNetworkError,
    ShopSavvyTimeoutError,
    classify_error,
)
from .models import (
    ApiResponse,
    Offer,
    OfferWithHistory,
    ProductDetails,
    RemoveBatchResponse,
    RemoveResponse,
    ScheduleBatchResponse,
    ScheduledProduct,
    ScheduleResponse,
    UsageInfo,
)

logger = logging.getLogger(__name__)

SDK_VERSION = "1.0.0"
USER_AGENT = f"ShopSavvy-Python-SDK/{SDK_VERSION}"

DateLike = Union[str, date]


def build_query_string(params: Mapping[str, str]) -> str:
    """Percent-encode keys and values and join them in insertion order."""
    return "&".join(
        f"{quote(str(key), safe='')}={quote(str(value), safe='')}"
        for key, value in params.items()
    )


def build_url(base_url: str, path: str, params: Optional[Mapping[str, str]] = None) -> str:
    """Full request URL: base URL + path + optional query string."""
    url = f"{base_url}{path}"
    if params:
        url = f"{url}?{build_query_string(params)}"
    return url


def serialize_body(body: Mapping[str, Any]) -> str:
    """Compact JSON with ``None``-valued fields left out."""
    return json.dumps(
        {key: value for key, value in body.items() if value is not None},
        separators=(",", ":"),
    )


def join_identifiers(identifiers: Sequence[str]) -> str:
    """Comma-join a batch of identifiers."""
    if isinstance(identifiers, str):
        raise TypeError("identifiers must be a sequence of strings, not a single string")
    if not identifiers:
        raise ValueError("At least one identifier is required")
    return ",".join(identifiers)


def _param_value(value: DateLike) -> str:
    return value.isoformat() if isinstance(value, date) else str(value)


def _query_params(
    required: Mapping[str, DateLike],
    **optional: Optional[DateLike],
) -> Dict[str, str]:
    """Required parameters are always sent; absent or empty optional ones are dropped."""
    query = {key: _param_value(value) for key, value in required.items()}
    for key, value in optional.items():
        if value is None or value == "":
            continue
        query[key] = _param_value(value)
    return query


class ShopSavvyClient:
    """
    ShopSavvy Data API Client

    Example:
        >>> from shopsavvy import ShopSavvyClient
        >>> with ShopSavvyClient(api_key="ss_live_your_api_key") as client:
        ...     product = client.get_product_details("012345678901")
        ...     print(product.data.name)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        *,
        config: Optional[ShopSavvyConfig] = None,
        transport: Optional[Any] = None,
    ):
        """
        Initialize ShopSavvy client.

        Args:
            api_key: API key (``ss_live_...`` or ``ss_test_...``)
            base_url: Base URL for the API (production endpoint if None)
            timeout_ms: Request timeout in milliseconds
            config: Complete configuration; overrides the individual arguments
            transport: Optional httpx transport shared by the sync and async clients

        Raises:
            ShopSavvyConfigError: if the configuration is invalid
        """
        if config is None:
            config = ShopSavvyConfig(api_key=api_key, base_url=base_url, timeout_ms=timeout_ms)

        self.config = config
        self._transport = transport
        self._closed = False

        self._client = httpx.Client(
            timeout=self.config.timeout_seconds,
            headers=self._get_headers(),
            transport=transport,
        )
        self._async_client: Optional[httpx.AsyncClient] = None
        self._closing_task: Optional[asyncio.Task] = None

    @property
    def base_url(self) -> str:
        return self.config.base_url

    def _get_headers(self) -> Dict[str, str]:
        """Build default request headers including authentication."""
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        }

    def _ensure_open(self) -> None:
        if self._closed:
            raise ClientClosedError("Client has been closed")

    def _get_async_client(self) -> httpx.AsyncClient:
        self._ensure_open()
        if self._async_client is None:
            self._async_client = httpx.AsyncClient(
                timeout=self.config.timeout_seconds,
                headers=self._get_headers(),
                transport=self._transport,
            )
        return self._async_client

    # Request pipeline

    def _build_request(
        self,
        client: Union[httpx.Client, httpx.AsyncClient],
        method: str,
        path: str,
        params: Optional[Mapping[str, str]],
        body: Optional[Mapping[str, Any]],
    ) -> httpx.Request:
        url = build_url(self.base_url, path, params)
        content = None
        headers = {}
        if body is not None:
            content = serialize_body(body)
            headers["Content-Type"] = "application/json"

        logger.debug("ShopSavvy request %s %s", method, path)
        return client.build_request(method, url, content=content, headers=headers)

    def _handle_response(
        self,
        request: httpx.Request,
        status_code: int,
        text: str,
        response_type: Any,
    ) -> ApiResponse:
        """Turn a status and body into an envelope or raise the classified error."""
        if not httpx.codes.is_success(status_code):
            error = classify_error(status_code, text)
            logger.warning(
                "ShopSavvy %s %s failed: %s",
                request.method,
                request.url.path,
                error.message,
            )
            raise error

        try:
            payload = json.loads(text)
            if payload is None:
                raise ValueError("empty response document")
            return ApiResponse[response_type].model_validate(payload)
        except (ValueError, PydanticValidationError) as exc:
            logger.error("Failed to deserialize ShopSavvy response: %s", exc)
            raise ShopSavvyAPIError(
                "Failed to deserialize response", status_code=status_code
            ) from exc

    def _send(self, request: httpx.Request) -> Tuple[int, str]:
        """Send and read the body, bounded by one deadline for the whole call."""
        deadline = time.monotonic() + self.config.timeout_seconds
        response = self._client.send(request, stream=True)
        try:
            body = bytearray()
            for chunk in response.iter_bytes():
                body.extend(chunk)
                if time.monotonic() > deadline:
                    break
            if time.monotonic() > deadline:
                raise httpx.TimeoutException("Request exceeded its deadline", request=request)
            return response.status_code, body.decode(response.encoding or "utf-8", errors="replace")
        finally:
            response.close()

    async def _send_async(self, client: httpx.AsyncClient, request: httpx.Request) -> Tuple[int, str]:
        try:
            response = await asyncio.wait_for(client.send(request), self.config.timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise httpx.TimeoutException("Request exceeded its deadline", request=request) from exc
        return response.status_code, response.text

    def _timeout_error(self) -> ShopSavvyTimeoutError:
        return ShopSavvyTimeoutError(
            f"Request timeout after {self.config.timeout_seconds:g} seconds",
            timeout_ms=self.config.timeout_ms,
        )

    def _execute(
        self,
        method: str,
        path: str,
        response_type: Any,
        params: Optional[Mapping[str, str]] = None,
        body: Optional[Mapping[str, Any]] = None,
    ) -> ApiResponse:
        self._ensure_open()
        request = self._build_request(self._client, method, path, params, body)
        try:
            status_code, text = self._send(request)
        except httpx.TimeoutException as exc:
            logger.error("ShopSavvy %s %s timed out", method, path)
            raise self._timeout_error() from exc
        except httpx.RequestError as exc:
            logger.error("ShopSavvy %s %s network error: %s", method, path, exc)
            raise ShopSavvyNetworkError(f"Network error: {exc}") from exc

        return self._handle_response(request, status_code, text, response_type)

    async def _execute_async(
        self,
        method: str,
        path: str,
        response_type: Any,
        params: Optional[Mapping[str, str]] = None,
        body: Optional[Mapping[str, Any]] = None,
    ) -> ApiResponse:
        client = self._get_async_client()
        request = self._build_request(client, method, path, params, body)
        try:
            status_code, text = await self._send_async(client, request)
        except httpx.TimeoutException as exc:
            logger.error("ShopSavvy %s %s timed out", method, path)
            raise self._timeout_error() from exc
        except httpx.RequestError as exc:
            logger.error("ShopSavvy %s %s network error: %s", method, path, exc)
            raise ShopSavvyNetworkError(f"Network error: {exc}") from exc

        return self._handle_response(request, status_code, text, response_type)

    # Products API

    def get_product_details(
        self,
        identifier: str,
        format: Optional[str] = None,
    ) -> ApiResponse[ProductDetails]:
        """Look up product details by identifier.

        Args:
            identifier: Barcode, ASIN, URL, model number, or ShopSavvy product ID
            format: Response format ('json' or 'csv')

        Returns:
            Envelope whose ``data`` is a ProductDetails
        """
        params = _query_params({"identifier": identifier}, format=format)
        return self._execute("GET", "/products/details", ProductDetails, params=params)

    def get_product_details_batch(
        self,
        identifiers: Sequence[str],
        format: Optional[str] = None,
    ) -> ApiResponse[List[ProductDetails]]:
        """Look up details for multiple products.

        Args:
            identifiers: Product identifiers
            format: Response format ('json' or 'csv')

        Returns:
            Envelope whose ``data`` is a list of ProductDetails
        """
        params = _query_params({"identifiers": join_identifiers(identifiers)}, format=format)
        return self._execute("GET", "/products/details", List[ProductDetails], params=params)

    # Offers API

    def get_current_offers(
        self,
        identifier: str,
        retailer: Optional[str] = None,
        format: Optional[str] = None,
    ) -> ApiResponse[List[Offer]]:
        """Get current offers for a product.

        Args:
            identifier: Product identifier
            retailer: Optional retailer to filter by
            format: Response format ('json' or 'csv')

        Returns:
            Envelope whose ``data`` is a list of Offer objects
        """
        params = _query_params({"identifier": identifier}, retailer=retailer, format=format)
        return self._execute("GET", "/products/offers", List[Offer], params=params)

    def get_current_offers_batch(
        self,
        identifiers: Sequence[str],
        retailer: Optional[str] = None,
        format: Optional[str] = None,
    ) -> ApiResponse[Dict[str, List[Offer]]]:
        """Get current offers for multiple products.

        Returns:
            Envelope whose ``data`` maps each identifier to its offers
        """
        params = _query_params(
            {"identifiers": join_identifiers(identifiers)}, retailer=retailer, format=format
        )
        return self._execute("GET", "/products/offers", Dict[str, List[Offer]], params=params)

    def get_price_history(
        self,
        identifier: str,
        start_date: DateLike,
        end_date: DateLike,
        retailer: Optional[str] = None,
        format: Optional[str] = None,
    ) -> ApiResponse[List[OfferWithHistory]]:
        """Get price history for a product.

        Args:
            identifier: Product identifier
            start_date: Start date (date or YYYY-MM-DD)
            end_date: End date (date or YYYY-MM-DD)
            retailer: Optional retailer to filter by
            format: Response format ('json' or 'csv')

        Returns:
            Envelope whose ``data`` is a list of OfferWithHistory objects
        """
        params = _query_params(
            {"identifier": identifier, "start_date": start_date, "end_date": end_date},
            retailer=retailer,
            format=format,
        )
        return self._execute("GET", "/products/history", List[OfferWithHistory], params=params)

    # Scheduling API

    def schedule_product_monitoring(
        self,
        identifier: str,
        frequency: str,
        retailer: Optional[str] = None,
    ) -> ApiResponse[ScheduleResponse]:
        """Schedule product monitoring.

        Args:
            identifier: Product identifier
            frequency: How often to refresh ('hourly', 'daily', 'weekly')
            retailer: Optional retailer to monitor

        Returns:
            Envelope whose ``data`` is a ScheduleResponse
        """
        body = {"identifier": identifier, "frequency": frequency, "retailer": retailer}
        return self._execute("POST", "/products/schedule", ScheduleResponse, body=body)

    def schedule_product_monitoring_batch(
        self,
        identifiers: Sequence[str],
        frequency: str,
        retailer: Optional[str] = None,
    ) -> ApiResponse[List[ScheduleBatchResponse]]:
        """Schedule monitoring for multiple products."""
        body = {
            "identifiers": join_identifiers(identifiers),
            "frequency": frequency,
            "retailer": retailer,
        }
        return self._execute(
            "POST", "/products/schedule", List[ScheduleBatchResponse], body=body
        )

    def get_scheduled_products(self) -> ApiResponse[List[ScheduledProduct]]:
        """Get all scheduled products."""
        return self._execute("GET", "/products/scheduled", List[ScheduledProduct])

    def remove_product_from_schedule(self, identifier: str) -> ApiResponse[RemoveResponse]:
        """Remove a product from the monitoring schedule."""
        body = {"identifier": identifier}
        return self._execute("DELETE", "/products/schedule", RemoveResponse, body=body)

    def remove_products_from_schedule(
        self,
        identifiers: Sequence[str],
    ) -> ApiResponse[List[RemoveBatchResponse]]:
        """Remove multiple products from the monitoring schedule."""
        body = {"identifiers": join_identifiers(identifiers)}
        return self._execute("DELETE", "/products/schedule", List[RemoveBatchResponse], body=body)

    # Usage API

    def get_usage(self) -> ApiResponse[UsageInfo]:
        """Get current usage and credit information."""
        return self._execute("GET", "/usage", UsageInfo)

    # Async API

    async def get_product_details_async(
        self,
        identifier: str,
        format: Optional[str] = None,
    ) -> ApiResponse[ProductDetails]:
        """Async version of get_product_details."""
        params = _query_params({"identifier": identifier}, format=format)
        return await self._execute_async("GET", "/products/details", ProductDetails, params=params)

    async def get_product_details_batch_async(
        self,
        identifiers: Sequence[str],
        format: Optional[str] = None,
    ) -> ApiResponse[List[ProductDetails]]:
        """Async version of get_product_details_batch."""
        params = _query_params({"identifiers": join_identifiers(identifiers)}, format=format)
        return await self._execute_async(
            "GET", "/products/details", List[ProductDetails], params=params
        )

    async def get_current_offers_async(
        self,
        identifier: str,
        retailer: Optional[str] = None,
        format: Optional[str] = None,
    ) -> ApiResponse[List[Offer]]:
        """Async version of get_current_offers."""
        params = _query_params({"identifier": identifier}, retailer=retailer, format=format)
        return await self._execute_async("GET", "/products/offers", List[Offer], params=params)

    async def get_current_offers_batch_async(
        self,
        identifiers: Sequence[str],
        retailer: Optional[str] = None,
        format: Optional[str] = None,
    ) -> ApiResponse[Dict[str, List[Offer]]]:
        """Async version of get_current_offers_batch."""
        params = _query_params(
            {"identifiers": join_identifiers(identifiers)}, retailer=retailer, format=format
        )
        return await self._execute_async(
            "GET", "/products/offers", Dict[str, List[Offer]], params=params
        )

    async def get_price_history_async(
        self,
        identifier: str,
        start_date: DateLike,
        end_date: DateLike,
        retailer: Optional[str] = None,
        format: Optional[str] = None,
    ) -> ApiResponse[List[OfferWithHistory]]:
        """Async version of get_price_history."""
        params = _query_params(
            {"identifier": identifier, "start_date": start_date, "end_date": end_date},
            retailer=retailer,
            format=format,
        )
        return await self._execute_async(
            "GET", "/products/history", List[OfferWithHistory], params=params
        )

    async def schedule_product_monitoring_async(
        self,
        identifier: str,
        frequency: str,
        retailer: Optional[str] = None,
    ) -> ApiResponse[ScheduleResponse]:
        """Async version of schedule_product_monitoring."""
        body = {"identifier": identifier, "frequency": frequency, "retailer": retailer}
        return await self._execute_async("POST", "/products/schedule", ScheduleResponse, body=body)

    async def schedule_product_monitoring_batch_async(
        self,
        identifiers: Sequence[str],
        frequency: str,
        retailer: Optional[str] = None,
    ) -> ApiResponse[List[ScheduleBatchResponse]]:
        """Async version of schedule_product_monitoring_batch."""
        body = {
            "identifiers": join_identifiers(identifiers),
            "frequency": frequency,
            "retailer": retailer,
        }
        return await self._execute_async(
            "POST", "/products/schedule", List[ScheduleBatchResponse], body=body
        )

    async def get_scheduled_products_async(self) -> ApiResponse[List[ScheduledProduct]]:
        """Async version of get_scheduled_products."""
        return await self._execute_async("GET", "/products/scheduled", List[ScheduledProduct])

    async def remove_product_from_schedule_async(
        self,
        identifier: str,
    ) -> ApiResponse[RemoveResponse]:
        """Async version of remove_product_from_schedule."""
        body = {"identifier": identifier}
        return await self._execute_async("DELETE", "/products/schedule", RemoveResponse, body=body)

    async def remove_products_from_schedule_async(
        self,
        identifiers: Sequence[str],
    ) -> ApiResponse[List[RemoveBatchResponse]]:
        """Async version of remove_products_from_schedule."""
        body = {"identifiers": join_identifiers(identifiers)}
        return await self._execute_async(
            "DELETE", "/products/schedule", List[RemoveBatchResponse], body=body
        )

    async def get_usage_async(self) -> ApiResponse[UsageInfo]:
        """Async version of get_usage."""
        return await self._execute_async("GET", "/usage", UsageInfo)

    # DataFrame helpers

    def get_current_offers_dataframe(
        self,
        identifier: str,
        retailer: Optional[str] = None,
    ) -> pd.DataFrame:
        """Get current offers as a pandas DataFrame.

        Args:
            identifier: Product identifier
            retailer: Optional retailer to filter by

        Returns:
            pandas DataFrame with one row per offer
        """
        offers = self.get_current_offers(identifier, retailer=retailer).data

        if not offers:
            return pd.DataFrame()

        return pd.DataFrame([offer.model_dump() for offer in offers])

    def get_price_history_dataframe(
        self,
        identifier: str,
        start_date: DateLike,
        end_date: DateLike,
        retailer: Optional[str] = None,
    ) -> pd.DataFrame:
        """Get price history as a pandas DataFrame indexed by date.

        Args:
            identifier: Product identifier
            start_date: Start date (date or YYYY-MM-DD)
            end_date: End date (date or YYYY-MM-DD)
            retailer: Optional retailer to filter by

        Returns:
            pandas DataFrame with one row per offer and history point
        """
        offers = self.get_price_history(identifier, start_date, end_date, retailer=retailer).data

        data = [
            {
                "date": entry.date,
                "price": entry.price,
                "availability": entry.availability,
                "retailer": offer.retailer,
                "offer_id": offer.offer_id,
            }
            for offer in offers
            for entry in offer.price_history
        ]

        if not data:
            return pd.DataFrame()

        df = pd.DataFrame(data)
        df["date"] = pd.to_datetime(df["date"])
        df.set_index("date", inplace=True)
        df.sort_index(kind="stable", inplace=True)

        return df

    # Context manager support

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self):
        """Close both HTTP clients.

        Safe to call multiple times. When async calls were made and an event
        loop is running, the async pool is closed on that loop; prefer
        ``await client.aclose()`` (or ``async with``) there.
        """
        if self._closed:
            return
        self._closed = True
        self._client.close()

        if self._async_client is None or self._async_client.is_closed:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._async_client.aclose())
            return

        logger.warning("close() called inside a running event loop; use 'await client.aclose()'")
        self._closing_task = loop.create_task(self._async_client.aclose())

    async def aclose(self):
        """Close both HTTP clients. Safe to call multiple times."""
        if self._async_client is not None and not self._async_client.is_closed:
            await self._async_client.aclose()
        self.close()
