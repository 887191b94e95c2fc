"""tradesim: order lifecycle and execution engine for a retail trading simulator."""

from tradesim.broker import (
    Fill,
    InsufficientFunds,
    InsufficientShares,
    InvalidPrice,
    InvalidQuantity,
    Order,
    OrderNotFound,
    OrderStatus,
    OrderType,
    Quote,
    Side,
    SimulatedBrokerAdapter,
    TickResult,
    TimeInForce,
    TradingError,
    cancel_order,
    create_limit_order,
    create_market_order,
    create_stop_limit_order,
    create_stop_loss_order,
    create_trailing_stop_order,
    process_tick,
    submit_order,
)
from tradesim.config import SimulatorConfig
from tradesim.portfolio import OrderStatistics, Portfolio, get_order_statistics

__version__ = "0.1.0"

__all__ = [
    "Fill",
    "InsufficientFunds",
    "InsufficientShares",
    "InvalidPrice",
    "InvalidQuantity",
    "Order",
    "OrderNotFound",
    "OrderStatistics",
    "OrderStatus",
    "OrderType",
    "Portfolio",
    "Quote",
    "Side",
    "SimulatedBrokerAdapter",
    "SimulatorConfig",
    "TickResult",
    "TimeInForce",
    "TradingError",
    "cancel_order",
    "create_limit_order",
    "create_market_order",
    "create_stop_limit_order",
    "create_stop_loss_order",
    "create_trailing_stop_order",
    "get_order_statistics",
    "process_tick",
    "submit_order",
]
