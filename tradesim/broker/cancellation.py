"""Manual cancellation of pending orders."""

import logging
from datetime import datetime
from typing import Optional

from tradesim.broker.orders import Order, OrderStatus, now_utc

logger = logging.getLogger("tradesim.broker")


def cancel_order(portfolio, order_id: str, now: Optional[datetime] = None) -> Order:
    """Cancel a pending order by id and remove it from the queue.

    Nothing is released on the portfolio since placement reserves nothing.

    :param portfolio: Portfolio owning the order.
    :param order_id: Id of the pending order.
    :returns: The CANCELED order.
    :rtype: Order
    :raises OrderNotFound: If no pending order has ``order_id``.
    """
    with portfolio.lock:
        order = portfolio.pop_pending(order_id)
        order.status = OrderStatus.CANCELED
        order.canceled_at = order.closed_at = now or now_utc()
    logger.info(order.describe())
    return order
