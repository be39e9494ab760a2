"""
Basic usage examples for the ShopSavvy Data API Python SDK.

Prerequisites:
- Install: `pip install -e .` from the repo root
- Set API key: export SHOPSAVVY_API_KEY=ss_test_... (or pass api_key=...)
"""
from datetime import date, timedelta

from shopsavvy import ShopSavvyClient, ShopSavvyConfig, ShopSavvyAPIError


def main():
    # Initialize client
    client = ShopSavvyClient(config=ShopSavvyConfig.from_env())

    print("=" * 60)
    print("ShopSavvy Data API Python SDK - Basic Usage Examples")
    print("=" * 60)

    barcode = "012345678901"

    # Example 1: Product details
    print("\n1. Looking up product details...")
    product = client.get_product_details(barcode)
    print(f"Product: {product.data.name} ({product.data.brand})")
    print(f"Credits remaining: {product.credits_remaining}")

    # Example 2: Current offers
    print("\n2. Getting current offers...")
    offers = client.get_current_offers(barcode)
    for offer in sorted(offers.data, key=lambda o: o.price)[:5]:
        print(f"  - {offer.retailer}: {offer.price:.2f} {offer.currency}")

    # Example 3: Price history
    print("\n3. Getting 30 days of price history...")
    end = date.today()
    df = client.get_price_history_dataframe(barcode, end - timedelta(days=30), end)
    if not df.empty:
        print(f"Retrieved {len(df)} price points")
        print(f"Lowest price: {df['price'].min():.2f}")
        print(df.groupby("retailer")["price"].mean())

    # Example 4: Schedule monitoring
    print("\n4. Scheduling daily monitoring...")
    try:
        scheduled = client.schedule_product_monitoring(barcode, "daily")
        print(f"Scheduled: {scheduled.data.scheduled}")
        for item in client.get_scheduled_products().data:
            print(f"  - {item.identifier} ({item.frequency})")
        client.remove_product_from_schedule(barcode)
    except ShopSavvyAPIError as e:
        print(f"Scheduling failed [{e.kind.value}]: {e}")

    # Example 5: Usage
    usage = client.get_usage().data
    print(f"\n5. Plan {usage.plan_name}: {usage.credits_used}/{usage.credits_total} credits used")

    print("\n" + "=" * 60)
    print("Examples completed!")
    print("=" * 60)

    client.close()


if __name__ == "__main__":
    main()
