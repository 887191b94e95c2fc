"""Trigger evaluator: runs one price tick against a portfolio's pending queue.

Evaluation semantics (per pending order of a quoted symbol, in queue order):
  1. Expiration first: a DAY order past its close is EXPIRED, even when its
     trigger condition holds on the same tick.
  2. Per-kind state update (trailing water marks, stop-limit arming).
  3. Trigger test; qualifying orders leave the queue and are filled in the
     same pass, so an earlier fill changes what later orders can afford.

The whole pass runs under the portfolio lock.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

from tradesim.broker.errors import InsufficientFunds, InsufficientShares
from tradesim.broker.execution import ensure_can_fill, execute_fill, reject_order
from tradesim.broker.expiration import is_expired
from tradesim.broker.orders import Order, OrderStatus, OrderType, now_utc
from tradesim.marketdata.feed import normalize_snapshot

logger = logging.getLogger("tradesim.broker.triggers")


@dataclass
class TickResult:
    """Orders that left the pending queue during one tick."""

    executed: List[Order] = field(default_factory=list)
    expired: List[Order] = field(default_factory=list)
    rejected: List[Order] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.executed or self.expired or self.rejected)


def process_tick(portfolio, snapshot: Any, now: Optional[datetime] = None) -> TickResult:
    """Evaluate every pending order whose symbol is quoted in ``snapshot``.

    :param portfolio: Portfolio owning the pending queue.
    :type portfolio: tradesim.portfolio.Portfolio
    :param snapshot: ``{symbol: {price, bid, ask}}`` mapping or Polars frame.
    :param now: Evaluation time used for expiry and fill timestamps.
    :type now: Optional[datetime]
    :returns: Executed, expired and rejected orders, each in queue order.
    :rtype: TickResult
    :Example:
        >>> result = process_tick(portfolio, {'AAPL': {'price': 144, 'bid': 143.8, 'ask': 144.1}})
    """
    quotes = normalize_snapshot(snapshot)
    now = portfolio.calendar.localize(now) if now is not None else now_utc()
    result = TickResult()

    with portfolio.lock:
        for order in portfolio.pending_orders:
            quote = quotes.get(order.symbol)
            if quote is None:
                # No price for this symbol on this tick; expiry waits for one too
                continue

            if is_expired(order, now):
                portfolio.pop_pending(order.id)
                order.status = OrderStatus.EXPIRED
                order.closed_at = now
                result.expired.append(order)
                logger.info(f"Expired {order.order_type.value} order {order.id} ({order.symbol})")
                continue

            if order.kind.update(order.side, quote):
                _log_state_change(order)

            if not order.kind.is_triggered(order.side, quote):
                continue

            price = order.kind.execution_price(order.side, quote)
            portfolio.pop_pending(order.id)
            if portfolio.guard_fills:
                try:
                    ensure_can_fill(portfolio, order, price)
                except (InsufficientFunds, InsufficientShares) as exc:
                    result.rejected.append(reject_order(portfolio, order, str(exc), now))
                    continue
            execute_fill(portfolio, order, price, now)
            result.executed.append(order)

    return result


def _log_state_change(order: Order) -> None:
    if order.order_type is OrderType.STOP_LIMIT:
        logger.info(f"Stop-limit order {order.id} triggered; now working as limit @ {order.limit_price}")
    else:
        logger.debug(f"Trailing stop {order.id} moved to {order.stop_price}")
