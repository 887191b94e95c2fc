"""Error kinds raised by the order lifecycle.

Every error is scoped to a single order request; none of them leaves the
portfolio or its pending queue in an inconsistent state.
"""

from decimal import Decimal
from typing import Optional


class TradingError(Exception):
    """Base class for all simulator errors."""

    def __init__(self, message: str, order=None):
        super().__init__(message)
        self.order = order


class OrderValidationError(TradingError, ValueError):
    """Order parameters failed shape validation at placement."""


class InvalidQuantity(OrderValidationError):
    pass


class InvalidPrice(OrderValidationError):
    pass


class InvalidSymbol(OrderValidationError):
    pass


class InvalidOrderType(OrderValidationError):
    pass


class InsufficientFunds(TradingError):
    """A buy would cost more than the available cash."""

    def __init__(self, required: Decimal, available: Decimal, order=None):
        super().__init__(
            f"Insufficient funds. Need ${required:.2f}, have ${available:.2f}",
            order=order,
        )
        self.required = required
        self.available = available


class InsufficientShares(TradingError):
    """A sell exceeds the quantity currently held."""

    def __init__(self, required: Decimal, available: Decimal, order=None):
        super().__init__(
            f"Insufficient shares. Need {required}, have {available}", order=order
        )
        self.required = required
        self.available = available


class OrderNotFound(TradingError, KeyError):
    """No pending order exists with the requested id."""

    def __init__(self, order_id: Optional[str]):
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]
