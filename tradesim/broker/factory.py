"""Order factory: validates trade requests and builds order records.

Market orders resolve immediately against the portfolio. Every other type
only has its shape validated (positive quantity and prices) and is appended
to the portfolio's pending queue; cash and shares are not reserved.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from tradesim.broker.errors import InvalidOrderType, InvalidPrice, InvalidQuantity, TradingError
from tradesim.broker.execution import ensure_can_fill, execute_fill, reject_order
from tradesim.broker.expiration import expiry_for, resolve_time_in_force
from tradesim.broker.orders import (
    LimitKind,
    MarketKind,
    Order,
    OrderKind,
    OrderType,
    Side,
    StopLimitKind,
    StopLossKind,
    TrailingStopKind,
    normalize_symbol,
    now_utc,
    positive_decimal,
)

logger = logging.getLogger("tradesim.broker")


def _parse_side(side: Any) -> Side:
    try:
        return Side.parse(side)
    except ValueError:
        raise InvalidOrderType(f"side must be 'buy' or 'sell', got {side!r}") from None


def _new_order(
    portfolio,
    symbol: Any,
    quantity: Any,
    side: Any,
    kind: OrderKind,
    time_in_force: Optional[Any],
    now: Optional[datetime],
) -> Order:
    created_at = portfolio.calendar.localize(now) if now is not None else now_utc()
    tif = resolve_time_in_force(kind.order_type, time_in_force)
    return Order(
        symbol=normalize_symbol(symbol),
        quantity=positive_decimal(quantity, "quantity", InvalidQuantity),
        side=_parse_side(side),
        kind=kind,
        time_in_force=tif,
        created_at=created_at,
        expires_at=expiry_for(tif, created_at, portfolio.calendar),
    )


def _place(portfolio, order: Order) -> Order:
    portfolio.add_pending(order)
    logger.info(order.describe())
    return order


def create_market_order(portfolio, symbol, quantity, side, price, now: Optional[datetime] = None) -> Order:
    """Execute a market order immediately at ``price``.

    :param portfolio: Portfolio to trade against.
    :param symbol: Trading symbol.
    :param quantity: Positive share count.
    :param side: ``"buy"``/``"sell"`` or a :class:`Side`.
    :param price: Quoted price the order executes at.
    :param now: Submission time; defaults to now (UTC).
    :returns: The FILLED order.
    :rtype: Order
    :raises InsufficientFunds: If a buy costs more than the available cash.
    :raises InsufficientShares: If a sell exceeds the shares held.
    :Example:
        >>> create_market_order(portfolio, 'AAPL', 10, 'buy', 150)
    """
    price = positive_decimal(price, "price", InvalidPrice)
    with portfolio.lock:
        order = _new_order(portfolio, symbol, quantity, side, MarketKind(), None, now)
        # Market orders never rest in the queue
        order.expires_at = None
        try:
            ensure_can_fill(portfolio, order, price)
        except TradingError as exc:
            reject_order(portfolio, order, str(exc), order.created_at)
            raise
        execute_fill(portfolio, order, price, order.created_at)
    return order


def create_limit_order(portfolio, symbol, quantity, side, limit_price, time_in_force=None,
                       now: Optional[datetime] = None) -> Order:
    """Place a limit order; defaults to DAY time-in-force."""
    kind = LimitKind(limit_price=positive_decimal(limit_price, "limit_price"))
    with portfolio.lock:
        return _place(portfolio, _new_order(portfolio, symbol, quantity, side, kind, time_in_force, now))


def create_stop_loss_order(portfolio, symbol, quantity, side, stop_price, time_in_force=None,
                           now: Optional[datetime] = None) -> Order:
    """Place a stop-loss order; defaults to GTC time-in-force."""
    kind = StopLossKind(stop_price=positive_decimal(stop_price, "stop_price"))
    with portfolio.lock:
        return _place(portfolio, _new_order(portfolio, symbol, quantity, side, kind, time_in_force, now))


def create_stop_limit_order(portfolio, symbol, quantity, side, stop_price, limit_price,
                            time_in_force=None, now: Optional[datetime] = None) -> Order:
    """Place a stop-limit order; defaults to GTC time-in-force."""
    kind = StopLimitKind(
        stop_price=positive_decimal(stop_price, "stop_price"),
        limit_price=positive_decimal(limit_price, "limit_price"),
    )
    with portfolio.lock:
        return _place(portfolio, _new_order(portfolio, symbol, quantity, side, kind, time_in_force, now))


def create_trailing_stop_order(portfolio, symbol, quantity, side, current_price, trail_amount=None,
                               trail_percent=None, time_in_force=None,
                               now: Optional[datetime] = None) -> Order:
    """Place a trailing-stop order anchored at ``current_price``.

    Exactly one of ``trail_amount`` (absolute distance) and ``trail_percent``
    (percent, ``5`` meaning 5%) must be given. Both water marks start at
    ``current_price``; the initial stop sits one trail below it for sells and
    above it for buys.

    :raises InvalidPrice: If the trail is missing, doubled, non-positive, or
        places a sell stop at or below zero.
    """
    if (trail_amount is None) == (trail_percent is None):
        raise InvalidPrice("Provide exactly one of trail_amount or trail_percent for trailing orders.")
    current = positive_decimal(current_price, "current_price")
    amount = positive_decimal(trail_amount, "trail_amount") if trail_amount is not None else None
    percent = positive_decimal(trail_percent, "trail_percent") if trail_percent is not None else None
    if percent is not None and percent >= 100:
        raise InvalidPrice(f"trail_percent must be below 100, got {trail_percent!r}")
    kind = TrailingStopKind.start(
        _parse_side(side),
        current,
        trail_amount=amount,
        trail_percent=percent,
    )
    if kind.stop_price <= 0:
        raise InvalidPrice(f"trail of {trail_amount} puts the stop at or below zero")
    with portfolio.lock:
        order = _new_order(portfolio, symbol, quantity, side, kind, time_in_force, now)
        return _place(portfolio, order)


_CREATORS = {
    OrderType.MARKET: create_market_order,
    OrderType.LIMIT: create_limit_order,
    OrderType.STOP_LOSS: create_stop_loss_order,
    OrderType.STOP_LIMIT: create_stop_limit_order,
    OrderType.TRAILING_STOP: create_trailing_stop_order,
}


def submit_order(portfolio, order_type, **params) -> Order:
    """Create an order of ``order_type`` with keyword ``params``.

    Accepts ``"market"``, ``"limit"``, ``"stop_loss"`` (or ``"stop-loss"``),
    ``"stop_limit"`` and ``"trailing_stop"``; parameters are those of the
    matching ``create_*_order`` function.

    :returns: FILLED order for market requests, PENDING order otherwise.
    :rtype: Order
    :raises InvalidOrderType: If ``order_type`` is unknown.
    :Example:
        >>> submit_order(portfolio, 'limit', symbol='AAPL', quantity=10, side='buy', limit_price=150)
    """
    try:
        resolved = OrderType.parse(order_type)
    except ValueError:
        supported = ", ".join(t.value for t in OrderType)
        raise InvalidOrderType(f"Unknown order type '{order_type}'. Supported: {supported}") from None
    return _CREATORS[resolved](portfolio, **params)
