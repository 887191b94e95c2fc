"""Order records for the trading simulator.

An :class:`Order` carries the lifecycle fields shared by every order
(identity, side, quantity, time-in-force, status, timestamps) and delegates
its trigger semantics to an :class:`OrderKind`. The kinds form a closed set
(market, limit, stop-loss, stop-limit, trailing-stop) and each one answers
three questions against a price tick:

  - ``update``: advance per-tick state (trailing water marks, stop-limit arming)
  - ``is_triggered``: should the order fill on this tick
  - ``execution_price``: at which price the fill happens
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Type

import pytz

from tradesim.broker.errors import InvalidPrice, InvalidQuantity, InvalidSymbol


class OrderStatus(Enum):
    """Order status enumeration.

    Values:
      - PENDING: Accepted and waiting for its trigger condition
      - FILLED: Fully executed
      - PARTIALLY_FILLED: Reserved; no execution path produces it
      - CANCELED: Canceled by the trader before filling
      - EXPIRED: Day order that outlived its session
      - REJECTED: Refused for insufficient funds or shares
    """

    PENDING = "pending"
    FILLED = "filled"
    PARTIALLY_FILLED = "partial"
    CANCELED = "canceled"
    EXPIRED = "expired"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self not in (OrderStatus.PENDING, OrderStatus.PARTIALLY_FILLED)


class OrderType(Enum):
    """Order type enumeration for execution semantics."""

    MARKET = "market"
    LIMIT = "limit"
    STOP_LOSS = "stop_loss"
    STOP_LIMIT = "stop_limit"
    TRAILING_STOP = "trailing_stop"

    @classmethod
    def parse(cls, value: Any) -> "OrderType":
        """Resolve ``"stop-loss"``, ``"Stop_Loss"`` or an ``OrderType`` alike."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower().replace("-", "_"))


class Side(Enum):
    BUY = "buy"
    SELL = "sell"

    @classmethod
    def parse(cls, value: Any) -> "Side":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class TimeInForce(Enum):
    """DAY expires at the next session close; GTC stays until filled or canceled."""

    DAY = "day"
    GTC = "gtc"

    @classmethod
    def parse(cls, value: Any) -> "TimeInForce":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


def to_decimal(value: Any) -> Decimal:
    """Convert ``value`` to ``Decimal`` going through ``str`` for floats."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a numeric amount")
    return Decimal(str(value))


def positive_decimal(value: Any, name: str, error: Type[Exception] = InvalidPrice) -> Decimal:
    """Return ``value`` as a strictly positive ``Decimal`` or raise ``error``.

    :param value: Raw numeric input.
    :param name: Field name used in the error message.
    :param error: Exception class raised for missing, non-numeric or non-positive input.
    :raises InvalidPrice: (or ``error``) when the value is not strictly positive.
    """
    if value is None:
        raise error(f"{name} is required")
    try:
        amount = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise error(f"{name} must be numeric, got {value!r}") from None
    if not amount.is_finite() or amount <= 0:
        raise error(f"{name} must be positive, got {value!r}")
    return amount


def normalize_symbol(symbol: Any) -> str:
    text = str(symbol or "").strip().upper()
    if not text:
        raise InvalidSymbol("symbol is required")
    return text


def now_utc() -> datetime:
    return datetime.now(pytz.utc)


@dataclass(frozen=True)
class Quote:
    """Price tick for one symbol.

    ``price`` must be positive and finite. A missing, zero or negative
    bid/ask means "no quote on that side" and falls back to ``price``.

    :raises InvalidPrice: If ``price`` (or a given bid/ask) is not a finite number.
    """

    price: Decimal
    bid: Optional[Decimal] = None
    ask: Optional[Decimal] = None

    def __post_init__(self):
        price = positive_decimal(self.price, "price")
        object.__setattr__(self, "price", price)
        object.__setattr__(self, "bid", _book_price(self.bid, price, "bid"))
        object.__setattr__(self, "ask", _book_price(self.ask, price, "ask"))

    def touch(self, side: "Side") -> Decimal:
        """Return the side of the book a taker crosses: ask for buys, bid for sells."""
        return self.ask if side is Side.BUY else self.bid


def _book_price(value: Any, fallback: Decimal, name: str) -> Decimal:
    if value is None:
        return fallback
    try:
        amount = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidPrice(f"{name} must be numeric, got {value!r}") from None
    if not amount.is_finite():
        raise InvalidPrice(f"{name} must be finite, got {value!r}")
    return amount if amount > 0 else fallback


def stop_crossed(side: Side, stop_price: Decimal, quote: Quote) -> bool:
    """Sell stops fire at or below the stop; buy stops at or above it."""
    if side is Side.SELL:
        return quote.price <= stop_price
    return quote.price >= stop_price


def limit_reached(side: Side, limit_price: Decimal, quote: Quote) -> bool:
    """Buy limits need ``ask <= limit``; sell limits need ``bid >= limit``."""
    if side is Side.BUY:
        return quote.ask <= limit_price
    return quote.bid >= limit_price


class OrderKind(ABC):
    """Type-specific trigger behavior of an order."""

    order_type: OrderType

    def update(self, side: Side, quote: Quote) -> bool:
        """Advance per-tick state; return ``True`` when something changed."""
        return False

    @abstractmethod
    def is_triggered(self, side: Side, quote: Quote) -> bool:
        raise NotImplementedError

    @abstractmethod
    def execution_price(self, side: Side, quote: Quote) -> Decimal:
        raise NotImplementedError

    def describe(self) -> str:
        return ""


@dataclass
class MarketKind(OrderKind):
    order_type = OrderType.MARKET

    def is_triggered(self, side: Side, quote: Quote) -> bool:
        return True

    def execution_price(self, side: Side, quote: Quote) -> Decimal:
        return quote.price


@dataclass
class LimitKind(OrderKind):
    limit_price: Decimal
    order_type = OrderType.LIMIT

    def is_triggered(self, side: Side, quote: Quote) -> bool:
        return limit_reached(side, self.limit_price, quote)

    def execution_price(self, side: Side, quote: Quote) -> Decimal:
        # Trade price, which may improve on the limit
        return quote.price

    def describe(self) -> str:
        return f"@ ${self.limit_price:.2f}"


@dataclass
class StopLossKind(OrderKind):
    stop_price: Decimal
    order_type = OrderType.STOP_LOSS

    def is_triggered(self, side: Side, quote: Quote) -> bool:
        return stop_crossed(side, self.stop_price, quote)

    def execution_price(self, side: Side, quote: Quote) -> Decimal:
        return quote.touch(side)

    def describe(self) -> str:
        return f"when price hits ${self.stop_price:.2f}"


@dataclass
class StopLimitKind(OrderKind):
    """Stop that arms a limit order.

    ``triggered`` goes from ``False`` to ``True`` at most once. After that the
    order is evaluated purely as a limit order on the same and later ticks.
    """

    stop_price: Decimal
    limit_price: Decimal
    triggered: bool = False
    armed_this_tick: bool = field(default=False, repr=False)
    order_type = OrderType.STOP_LIMIT

    def update(self, side: Side, quote: Quote) -> bool:
        self.armed_this_tick = False
        if not self.triggered and stop_crossed(side, self.stop_price, quote):
            self.triggered = True
            self.armed_this_tick = True
            return True
        return False

    def is_triggered(self, side: Side, quote: Quote) -> bool:
        return self.triggered and limit_reached(side, self.limit_price, quote)

    def execution_price(self, side: Side, quote: Quote) -> Decimal:
        if self.armed_this_tick:
            return quote.touch(side)
        return quote.price

    def describe(self) -> str:
        return f"@ ${self.limit_price:.2f} when price hits ${self.stop_price:.2f}"


@dataclass
class TrailingStopKind(OrderKind):
    """Stop that follows the best price seen since placement.

    Exactly one of ``trail_amount`` (absolute) and ``trail_percent`` (in
    percent, ``5`` meaning 5%) is set. The stop only moves in the trader's
    favor: up for sells, down for buys.
    """

    stop_price: Decimal
    high_water_mark: Decimal
    low_water_mark: Decimal
    trail_amount: Optional[Decimal] = None
    trail_percent: Optional[Decimal] = None
    order_type = OrderType.TRAILING_STOP

    @classmethod
    def start(
        cls,
        side: Side,
        current_price: Decimal,
        trail_amount: Optional[Decimal] = None,
        trail_percent: Optional[Decimal] = None,
    ) -> "TrailingStopKind":
        kind = cls(
            stop_price=current_price,
            high_water_mark=current_price,
            low_water_mark=current_price,
            trail_amount=trail_amount,
            trail_percent=trail_percent,
        )
        kind.stop_price = kind.trail_from(side, current_price)
        return kind

    def trail_from(self, side: Side, reference: Decimal) -> Decimal:
        if self.trail_percent is not None:
            offset = reference * self.trail_percent / Decimal(100)
        else:
            offset = self.trail_amount
        return reference - offset if side is Side.SELL else reference + offset

    def update(self, side: Side, quote: Quote) -> bool:
        if side is Side.SELL and quote.price > self.high_water_mark:
            self.high_water_mark = quote.price
            self.stop_price = self.trail_from(side, quote.price)
            return True
        if side is Side.BUY and quote.price < self.low_water_mark:
            self.low_water_mark = quote.price
            self.stop_price = self.trail_from(side, quote.price)
            return True
        return False

    def is_triggered(self, side: Side, quote: Quote) -> bool:
        return stop_crossed(side, self.stop_price, quote)

    def execution_price(self, side: Side, quote: Quote) -> Decimal:
        return quote.touch(side)

    def describe(self) -> str:
        if self.trail_percent is not None:
            return f"with {self.trail_percent}% trail"
        return f"with ${self.trail_amount:.2f} trail"


_TYPE_LABELS = {
    OrderType.MARKET: "Market",
    OrderType.LIMIT: "Limit",
    OrderType.STOP_LOSS: "Stop-loss",
    OrderType.STOP_LIMIT: "Stop-limit",
    OrderType.TRAILING_STOP: "Trailing stop",
}


@dataclass
class Order:
    """A trade request and its lifecycle state.

    :param symbol: Upper-cased trading symbol.
    :type symbol: str
    :param quantity: Strictly positive share count; the side is explicit.
    :type quantity: Decimal
    :param side: BUY or SELL.
    :type side: Side
    :param kind: Type-specific trigger state (limit, stop, trailing...).
    :type kind: OrderKind
    :param time_in_force: DAY or GTC.
    :type time_in_force: TimeInForce
    :param expires_at: Session close for DAY orders; ``None`` for GTC.
    :type expires_at: Optional[datetime]
    :param execution_price: Fill price once FILLED.
    :type execution_price: Optional[Decimal]
    :Example:
        >>> Order(symbol='AAPL', quantity=Decimal(10), side=Side.BUY, kind=LimitKind(Decimal(150)))
    """

    symbol: str
    quantity: Decimal
    side: Side
    kind: OrderKind
    time_in_force: TimeInForce = TimeInForce.GTC
    id: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    # runtime fields
    execution_price: Optional[Decimal] = None
    executed_at: Optional[datetime] = None
    canceled_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    commission: Decimal = Decimal(0)
    reject_reason: Optional[str] = None

    def __post_init__(self):
        if self.id is None:
            self.id = str(uuid.uuid4())
        if self.created_at is None:
            self.created_at = now_utc()
        self.quantity = positive_decimal(self.quantity, "quantity", InvalidQuantity)

    @property
    def order_type(self) -> OrderType:
        return self.kind.order_type

    @property
    def is_buy(self) -> bool:
        return self.side is Side.BUY

    @property
    def is_pending(self) -> bool:
        return self.status is OrderStatus.PENDING

    @property
    def limit_price(self) -> Optional[Decimal]:
        return getattr(self.kind, "limit_price", None)

    @property
    def stop_price(self) -> Optional[Decimal]:
        return getattr(self.kind, "stop_price", None)

    @property
    def triggered(self) -> bool:
        return getattr(self.kind, "triggered", False)

    def describe(self) -> str:
        """Return a one-line confirmation message for the order."""
        label = _TYPE_LABELS[self.order_type]
        verb = "placed" if self.is_pending else self.status.value
        text = f"{label} order {verb}: {self.side.value.upper()} {self.quantity} {self.symbol}"
        detail = self.kind.describe()
        if self.status is OrderStatus.FILLED and self.execution_price is not None:
            detail = f"@ ${self.execution_price:.2f}"
        return f"{text} {detail}" if detail else text
