import asyncio

import httpx
import pytest

from shopsavvy import (
    ClientClosedError,
    NotFoundError,
    RateLimitError,
    ShopSavvyClient,
    ShopSavvyNetworkError,
    ShopSavvyTimeoutError,
)

from .conftest import TEST_KEY, Recorder


def _client(handler, **kwargs) -> ShopSavvyClient:
    return ShopSavvyClient(api_key=TEST_KEY, transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.asyncio
async def test_details_lookup_async():
    recorder = Recorder(payload={
        "success": True,
        "data": {"product_id": "p1", "name": "Widget"},
        "credits_used": 1,
        "credits_remaining": 99,
    })

    async with _client(recorder) as client:
        result = await client.get_product_details_async("012345678901")

    assert result.success is True
    assert result.data.name == "Widget"
    assert result.credits_remaining == 99
    assert recorder.last.headers["Authorization"] == f"Bearer {TEST_KEY}"
    assert client.closed


@pytest.mark.asyncio
async def test_async_methods_hit_same_endpoints():
    routes = {}

    def handler(request: httpx.Request) -> httpx.Response:
        routes[(request.method, request.url.path)] = request
        if request.url.path.endswith("/usage"):
            data = {
                "credits_used": 1,
                "credits_remaining": 2,
                "credits_total": 3,
                "billing_period_start": "2024-01-01",
                "billing_period_end": "2024-01-31",
                "plan_name": "Pro",
            }
        elif request.method == "DELETE":
            data = [{"identifier": "a", "removed": True}]
        elif request.method == "POST":
            data = {"scheduled": True, "product_id": "p1"}
        elif "identifiers" in request.url.params:
            data = {"a": []} if request.url.path.endswith("/offers") else []
        else:
            data = []
        return httpx.Response(200, json={"success": True, "data": data})

    async with _client(handler) as client:
        await client.get_product_details_batch_async(["a", "b"])
        await client.get_current_offers_async("a")
        await client.get_current_offers_batch_async(["a", "b"])
        await client.get_price_history_async("a", "2024-01-01", "2024-01-31")
        await client.schedule_product_monitoring_async("a", "daily")
        await client.get_scheduled_products_async()
        await client.remove_products_from_schedule_async(["a"])
        usage = await client.get_usage_async()

    assert set(routes) == {
        ("GET", "/v1/products/details"),
        ("GET", "/v1/products/offers"),
        ("GET", "/v1/products/history"),
        ("POST", "/v1/products/schedule"),
        ("GET", "/v1/products/scheduled"),
        ("DELETE", "/v1/products/schedule"),
        ("GET", "/v1/usage"),
    }
    assert usage.data.plan_name == "Pro"


@pytest.mark.asyncio
async def test_async_schedule_and_remove_bodies():
    recorder = Recorder(payload={"success": True, "data": {"removed": True}})

    async with _client(recorder) as client:
        await client.remove_product_from_schedule_async("123")
        assert recorder.last_body == {"identifier": "123"}

    recorder = Recorder(payload={"success": True, "data": []})
    async with _client(recorder) as client:
        await client.schedule_product_monitoring_batch_async(["1", "2"], "weekly")
        assert recorder.last_body == {"identifiers": "1,2", "frequency": "weekly"}


@pytest.mark.asyncio
async def test_async_rate_limit_error():
    async with _client(Recorder(429, {"error": "slow down"})) as client:
        with pytest.raises(RateLimitError, match="Rate limit exceeded. Please slow down your requests."):
            await client.get_product_details_async("123")


@pytest.mark.asyncio
async def test_async_timeout_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    async with _client(handler, timeout_ms=2000) as client:
        with pytest.raises(ShopSavvyTimeoutError, match="after 2 seconds"):
            await client.get_usage_async()


@pytest.mark.asyncio
async def test_async_network_error():
    def handler(request):
        raise httpx.ConnectError("Name or service not known", request=request)

    async with _client(handler) as client:
        with pytest.raises(ShopSavvyNetworkError, match="Name or service not known"):
            await client.get_usage_async()


@pytest.mark.asyncio
async def test_concurrent_calls_are_independent():
    async def handler(request: httpx.Request) -> httpx.Response:
        identifier = request.url.params["identifier"]
        await asyncio.sleep(0.01)
        if identifier == "missing":
            return httpx.Response(404, json={"error": "nope"})
        return httpx.Response(
            200, json={"success": True, "data": {"product_id": identifier, "name": identifier.upper()}}
        )

    async with _client(handler) as client:
        results = await asyncio.gather(
            client.get_product_details_async("a"),
            client.get_product_details_async("missing"),
            client.get_product_details_async("b"),
            return_exceptions=True,
        )

    assert results[0].data.name == "A"
    assert isinstance(results[1], NotFoundError)
    assert results[2].data.name == "B"


@pytest.mark.asyncio
async def test_cancellation_is_distinct_from_timeout():
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(10)
        return httpx.Response(200, json={"success": True, "data": []})

    async with _client(handler) as client:
        task = asyncio.create_task(client.get_scheduled_products_async())
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


@pytest.mark.asyncio
async def test_aclose_is_idempotent():
    client = _client(Recorder(payload={"success": True, "data": []}))
    await client.get_scheduled_products_async()

    await client.aclose()
    await client.aclose()
    client.close()

    assert client.closed


@pytest.mark.asyncio
async def test_async_handler_slower_than_timeout():
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(1.0)
        return httpx.Response(200, json={"success": True, "data": []})

    async with _client(handler, timeout_ms=100) as client:
        with pytest.raises(ShopSavvyTimeoutError, match="after 0.1 seconds") as exc_info:
            await client.get_scheduled_products_async()

    assert exc_info.value.timeout_ms == 100


@pytest.mark.asyncio
async def test_async_call_after_aclose_raises_client_closed():
    recorder = Recorder(payload={"success": True, "data": []})
    client = _client(recorder)
    await client.get_scheduled_products_async()
    await client.aclose()

    with pytest.raises(ClientClosedError):
        await client.get_scheduled_products_async()

    assert len(recorder.requests) == 1


@pytest.mark.asyncio
async def test_closed_client_does_not_open_async_pool():
    client = _client(Recorder())
    client.close()

    with pytest.raises(ClientClosedError):
        await client.get_usage_async()

    assert client._async_client is None


@pytest.mark.asyncio
async def test_sync_close_inside_event_loop_releases_async_pool():
    client = _client(Recorder(payload={"success": True, "data": []}))
    await client.get_scheduled_products_async()

    client.close()
    await client._closing_task

    assert client._async_client.is_closed


def test_with_exit_releases_async_pool_after_async_call():
    with _client(Recorder(payload={"success": True, "data": []})) as client:
        asyncio.run(client.get_scheduled_products_async())
        assert not client._async_client.is_closed

    assert client.closed
    assert client._async_client.is_closed
