"""Execution engine: applies exactly one fill to a portfolio.

A fill is all-or-nothing at the chosen price. Once applied it is final;
there is no rollback and no partial fill.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from tradesim.broker.errors import InsufficientFunds, InsufficientShares
from tradesim.broker.orders import Order, OrderStatus, OrderType, Side, now_utc, to_decimal

logger = logging.getLogger("tradesim.broker.execution")


@dataclass(frozen=True)
class Fill:
    """History record produced by execution; immutable once appended.

    :param order_id: Id of the originating order.
    :type order_id: str
    :param side: BUY or SELL.
    :type side: Side
    :param order_type: Type of the originating order.
    :type order_type: OrderType
    :param symbol: Trading symbol.
    :type symbol: str
    :param quantity: Shares exchanged (always positive).
    :type quantity: Decimal
    :param price: Execution price.
    :type price: Decimal
    :param total: ``price * quantity``, before commission.
    :type total: Decimal
    :param commission: Commission charged for the fill.
    :type commission: Decimal
    :param timestamp: Execution timestamp.
    :type timestamp: datetime
    """

    order_id: str
    side: Side
    order_type: OrderType
    symbol: str
    quantity: Decimal
    price: Decimal
    total: Decimal
    commission: Decimal
    timestamp: datetime

    @property
    def net_cash(self) -> Decimal:
        """Signed cash impact: negative for buys, positive for sells."""
        if self.side is Side.BUY:
            return -(self.total + self.commission)
        return self.total - self.commission


def ensure_can_fill(portfolio, order: Order, price: Decimal) -> None:
    """Check that ``portfolio`` can afford (buy) or deliver (sell) ``order``.

    :raises InsufficientFunds: If a buy's cost plus commission exceeds cash.
    :raises InsufficientShares: If a sell exceeds the shares held.
    """
    if order.side is Side.BUY:
        total = price * order.quantity
        required = total + portfolio.commission_model.calculate_commission(price, order.quantity)
        if required > portfolio.cash:
            raise InsufficientFunds(required, portfolio.cash, order=order)
    else:
        held = portfolio.position(order.symbol)
        if order.quantity > held:
            raise InsufficientShares(order.quantity, held, order=order)


def execute_fill(portfolio, order: Order, price, timestamp: Optional[datetime] = None) -> Fill:
    """Apply one fill of ``order`` at ``price`` and mark the order FILLED.

    Buys debit cash and fold the price into the weighted-average cost basis;
    sells credit cash and drop the position together with its cost basis once
    the held quantity reaches zero. No affordability check happens here; use
    :func:`ensure_can_fill` first when one is wanted.

    :param portfolio: Portfolio to mutate.
    :type portfolio: tradesim.portfolio.Portfolio
    :param order: Order being filled.
    :type order: Order
    :param price: Execution price.
    :param timestamp: Execution time; defaults to now (UTC).
    :returns: The appended history record.
    :rtype: Fill
    """
    price = to_decimal(price)
    timestamp = timestamp or now_utc()
    symbol = order.symbol
    quantity = order.quantity
    total = price * quantity
    commission = portfolio.commission_model.calculate_commission(price, quantity)

    with portfolio.lock:
        if order.side is Side.BUY:
            old_quantity = portfolio.positions.get(symbol, Decimal(0))
            old_cost = portfolio.cost_basis.get(symbol, Decimal(0))
            new_quantity = old_quantity + quantity
            portfolio.cash -= total + commission
            portfolio.positions[symbol] = new_quantity
            portfolio.cost_basis[symbol] = (old_cost * old_quantity + total) / new_quantity
        else:
            portfolio.cash += total - commission
            remaining = portfolio.positions.get(symbol, Decimal(0)) - quantity
            if remaining <= 0:
                portfolio.positions.pop(symbol, None)
                portfolio.cost_basis.pop(symbol, None)
            else:
                portfolio.positions[symbol] = remaining

        order.status = OrderStatus.FILLED
        order.execution_price = price
        order.executed_at = timestamp
        order.closed_at = timestamp
        order.commission = commission

        fill = Fill(
            order_id=order.id,
            side=order.side,
            order_type=order.order_type,
            symbol=symbol,
            quantity=quantity,
            price=price,
            total=total,
            commission=commission,
            timestamp=timestamp,
        )
        portfolio.history.append(fill)
        portfolio.record(order)

    logger.info(
        f"Filled {order.order_type.value} {order.side.value} {quantity} {symbol} "
        f"@ ${price:.2f} (cash now ${portfolio.cash:.2f})"
    )
    return fill


def reject_order(portfolio, order: Order, reason: str, timestamp: Optional[datetime] = None) -> Order:
    """Move ``order`` to REJECTED without touching cash or positions."""
    order.status = OrderStatus.REJECTED
    order.reject_reason = reason
    order.closed_at = timestamp or now_utc()
    portfolio.record(order)
    logger.warning(f"Rejected {order.order_type.value} order {order.id}: {reason}")
    return order
