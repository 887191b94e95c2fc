"""Time-in-force policy: default TIF per order type and DAY-order expiry.

Expiry is not scheduled; the trigger evaluator checks it lazily whenever a
tick arrives for the order's symbol, before any trigger condition.
"""

from datetime import datetime
from typing import Any, Optional

from tradesim.broker.orders import Order, OrderType, TimeInForce
from tradesim.calendars import TradingCalendar

DEFAULT_TIME_IN_FORCE = {
    OrderType.MARKET: TimeInForce.DAY,
    OrderType.LIMIT: TimeInForce.DAY,
    OrderType.STOP_LOSS: TimeInForce.GTC,
    OrderType.STOP_LIMIT: TimeInForce.GTC,
    OrderType.TRAILING_STOP: TimeInForce.GTC,
}


def resolve_time_in_force(order_type: OrderType, requested: Optional[Any] = None) -> TimeInForce:
    """Return the caller's TIF if given, else the default for ``order_type``."""
    if requested is None:
        return DEFAULT_TIME_IN_FORCE[order_type]
    return TimeInForce.parse(requested)


def expiry_for(time_in_force: TimeInForce, created_at: datetime, calendar: TradingCalendar) -> Optional[datetime]:
    """DAY orders expire at the next session close strictly after creation."""
    if time_in_force is TimeInForce.DAY:
        return calendar.next_close(created_at)
    return None


def is_expired(order: Order, now: datetime) -> bool:
    return (
        order.time_in_force is TimeInForce.DAY
        and order.expires_at is not None
        and now > order.expires_at
    )
