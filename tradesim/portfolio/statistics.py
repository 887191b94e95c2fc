"""Read-only reporting over a portfolio's fill history."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable

import polars as pl
import pytz

from tradesim.broker.orders import OrderType

_FILL_SCHEMA = {
    "timestamp": pl.Datetime(time_zone="UTC"),
    "order_id": pl.Utf8,
    "side": pl.Utf8,
    "order_type": pl.Utf8,
    "symbol": pl.Utf8,
    "quantity": pl.Float64,
    "price": pl.Float64,
    "total": pl.Float64,
    "commission": pl.Float64,
}


@dataclass(frozen=True)
class OrderStatistics:
    """Aggregate counts over executed orders.

    ``stop_orders`` groups stop-loss and trailing-stop fills.
    """

    total_orders: int = 0
    buy_orders: int = 0
    sell_orders: int = 0
    market_orders: int = 0
    limit_orders: int = 0
    stop_orders: int = 0
    stop_limit_orders: int = 0
    total_volume: Decimal = Decimal(0)
    average_order_size: Decimal = Decimal(0)
    by_symbol: Dict[str, int] = field(default_factory=dict)


def fills_to_frame(history: Iterable) -> pl.DataFrame:
    """Return the fill history as a Polars DataFrame (floats, UTC timestamps)."""
    rows = [
        {
            "timestamp": fill.timestamp.astimezone(pytz.utc),
            "order_id": fill.order_id,
            "side": fill.side.value,
            "order_type": fill.order_type.value,
            "symbol": fill.symbol,
            "quantity": float(fill.quantity),
            "price": float(fill.price),
            "total": float(fill.total),
            "commission": float(fill.commission),
        }
        for fill in history
    ]
    if not rows:
        return pl.DataFrame(schema=_FILL_SCHEMA)
    return pl.from_dicts(rows, schema=_FILL_SCHEMA)


def get_order_statistics(portfolio) -> OrderStatistics:
    """Summarize ``portfolio.history``; pure, leaves the portfolio untouched.

    Counts come from a Polars frame of the history; volume and the average
    order size are summed from the exact ``Decimal`` totals.
    """
    history = list(portfolio.history)
    if not history:
        return OrderStatistics()

    frame = fills_to_frame(history)
    sides = dict(frame.group_by("side").len().iter_rows())
    types = dict(frame.group_by("order_type").len().iter_rows())
    symbols = dict(frame.group_by("symbol").len().sort("symbol").iter_rows())

    total_volume = sum((fill.total for fill in history), Decimal(0))
    return OrderStatistics(
        total_orders=frame.height,
        buy_orders=sides.get("buy", 0),
        sell_orders=sides.get("sell", 0),
        market_orders=types.get(OrderType.MARKET.value, 0),
        limit_orders=types.get(OrderType.LIMIT.value, 0),
        stop_orders=types.get(OrderType.STOP_LOSS.value, 0) + types.get(OrderType.TRAILING_STOP.value, 0),
        stop_limit_orders=types.get(OrderType.STOP_LIMIT.value, 0),
        total_volume=total_volume,
        average_order_size=total_volume / frame.height,
        by_symbol=symbols,
    )
