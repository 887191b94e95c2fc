from datetime import datetime
from decimal import Decimal

import polars as pl
import pytest

from tradesim.broker import InvalidPrice, Quote
from tradesim.marketdata import ReplayQuoteFeed, normalize_snapshot


def test_normalize_mapping_shapes():
    snapshot = normalize_snapshot({
        "aapl": {"price": 150, "bid": 149.9, "ask": 150.1},
        "MSFT": 300,
        "GOOG": Quote(price=Decimal("100"), bid=Decimal("99")),
    })

    assert snapshot["AAPL"] == Quote(price=Decimal("150"), bid=Decimal("149.9"), ask=Decimal("150.1"))
    assert snapshot["MSFT"].bid == snapshot["MSFT"].ask == Decimal("300")
    assert snapshot["GOOG"].ask == Decimal("100")


def test_normalize_polars_frame_without_bid_ask():
    frame = pl.DataFrame({"symbol": ["AAPL"], "price": [150.25]})

    snapshot = normalize_snapshot(frame)

    assert snapshot == {"AAPL": Quote(price=Decimal("150.25"))}


def test_normalize_rejects_missing_price():
    with pytest.raises(ValueError):
        normalize_snapshot({"AAPL": {"bid": 1}})
    with pytest.raises(ValueError):
        normalize_snapshot(pl.DataFrame({"symbol": ["AAPL"], "close": [1.0]}))


def test_normalize_empty_inputs():
    assert normalize_snapshot(None) == {}
    assert normalize_snapshot(pl.DataFrame()) == {}


def test_replay_feed_pull_and_subscription_filter():
    ts1, ts2 = datetime(2025, 6, 2, 10), datetime(2025, 6, 2, 10, 1)
    feed = ReplayQuoteFeed(
        [(ts1, {"AAPL": 150, "MSFT": 300}), (ts2, {"AAPL": 151})],
        symbols=["aapl"],
    )

    assert feed.next_snapshot() == (ts1, {"AAPL": Quote(price=Decimal("150"))})
    assert feed.current_time() == ts1
    assert feed.next_snapshot() == (ts2, {"AAPL": Quote(price=Decimal("151"))})
    assert feed.next_snapshot() is None


def test_replay_feed_push_requires_callback():
    feed = ReplayQuoteFeed([(datetime(2025, 6, 2, 10), {"AAPL": 150})])
    with pytest.raises(RuntimeError):
        feed.publish_all()

    received = []
    feed.on_snapshot(lambda ts, snap: received.append((ts, snap)))
    assert feed.publish_all() == 1
    assert received[0][1]["AAPL"].price == Decimal("150")


def test_closed_feed_is_exhausted():
    feed = ReplayQuoteFeed([(datetime(2025, 6, 2, 10), {"AAPL": 150})])
    feed.close()
    assert feed.next_snapshot() is None


def test_quote_treats_non_positive_bid_ask_as_missing():
    quote = Quote(price=Decimal("10"), bid=0, ask=-1)
    assert quote.bid == quote.ask == Decimal("10")


def test_quote_requires_positive_price():
    with pytest.raises(InvalidPrice):
        Quote(price=0)
    with pytest.raises(InvalidPrice):
        normalize_snapshot({"AAPL": "abc"})
