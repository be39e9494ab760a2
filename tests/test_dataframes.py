import pandas as pd

from .conftest import Recorder

OFFER = {
    "offer_id": "o1",
    "retailer": "amazon",
    "price": 19.99,
    "currency": "USD",
    "availability": "in_stock",
    "condition": "new",
    "url": "https://example.com/o1",
    "shipping": 4.5,
    "last_updated": "2024-01-02T00:00:00Z",
}


def test_price_history_dataframe(make_client):
    payload = {
        "success": True,
        "data": [
            dict(OFFER, price_history=[
                {"date": "2024-01-02", "price": 19.99, "availability": "in_stock"},
                {"date": "2024-01-01", "price": 21.00, "availability": "in_stock"},
            ]),
            dict(OFFER, offer_id="o2", retailer="walmart", price_history=[
                {"date": "2024-01-01", "price": 20.50, "availability": "out_of_stock"},
            ]),
        ],
    }
    recorder = Recorder(payload=payload)
    client = make_client(recorder)

    df = client.get_price_history_dataframe("123", "2024-01-01", "2024-01-02", retailer=None)

    assert recorder.last_query == "identifier=123&start_date=2024-01-01&end_date=2024-01-02"
    assert len(df) == 3
    assert isinstance(df.index, pd.DatetimeIndex)
    assert df.index.is_monotonic_increasing
    assert set(df["retailer"]) == {"amazon", "walmart"}
    assert df[df["offer_id"] == "o1"]["price"].tolist() == [21.0, 19.99]
    assert list(df.columns) == ["price", "availability", "retailer", "offer_id"]


def test_price_history_dataframe_empty(make_client):
    client = make_client(Recorder(payload={"success": True, "data": [dict(OFFER, price_history=[])]}))

    df = client.get_price_history_dataframe("123", "2024-01-01", "2024-01-02")

    assert df.empty


def test_current_offers_dataframe(make_client):
    recorder = Recorder(payload={
        "success": True,
        "data": [OFFER, dict(OFFER, offer_id="o2", retailer="target", price=18.0, shipping=None)],
    })
    client = make_client(recorder)

    df = client.get_current_offers_dataframe("123", retailer="target")

    assert recorder.last_query == "identifier=123&retailer=target"
    assert len(df) == 2
    assert list(df["retailer"]) == ["amazon", "target"]
    assert df["price"].min() == 18.0
    assert "last_updated" in df.columns


def test_current_offers_dataframe_empty(make_client):
    client = make_client(Recorder(payload={"success": True, "data": []}))

    assert client.get_current_offers_dataframe("123").empty
