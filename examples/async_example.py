#!/usr/bin/env python3
"""
Example: async usage of the ShopSavvy Data API Python SDK

Demonstrates:
- Async/await API calls
- Running several lookups concurrently on one client
- Dispatching on the error kind

Prerequisites:
- Install: `pip install -e .` from the repo root
- Set SHOPSAVVY_API_KEY to a valid ss_live_ or ss_test_ key
"""
import asyncio

from shopsavvy import ErrorKind, ShopSavvyAPIError, ShopSavvyClient, ShopSavvyConfig


async def demo_concurrent_lookups(client: ShopSavvyClient):
    """Run multiple async operations concurrently."""
    print("⚡ Concurrent Operations Demo")

    tasks = [
        client.get_product_details_async("012345678901"),
        client.get_current_offers_async("012345678901"),
        client.get_usage_async(),
    ]

    results = await asyncio.gather(*tasks, return_exceptions=True)

    for i, result in enumerate(results):
        if isinstance(result, Exception):
            print(f"❌ Task {i+1} failed: {result}")
        else:
            print(f"✅ Task {i+1}: credits remaining {result.credits_remaining}")


async def demo_error_handling(client: ShopSavvyClient):
    """Dispatch on ``kind`` instead of catching every subclass."""
    print("\n🛡️ Error Handling Demo")

    try:
        await client.get_product_details_async("does-not-exist")
    except ShopSavvyAPIError as e:
        if e.kind is ErrorKind.NOT_FOUND:
            print("✅ Product not found, as expected")
        elif e.kind is ErrorKind.RATE_LIMIT:
            print("Slow down")
        else:
            print(f"Unexpected error [{e.kind.value}]: {e}")


async def main():
    async with ShopSavvyClient(config=ShopSavvyConfig.from_env()) as client:
        await demo_concurrent_lookups(client)
        await demo_error_handling(client)


if __name__ == "__main__":
    asyncio.run(main())
