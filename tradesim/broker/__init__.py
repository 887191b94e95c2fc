"""Order lifecycle and execution for the trading simulator."""

from tradesim.broker.errors import (
    InsufficientFunds,
    InsufficientShares,
    InvalidOrderType,
    InvalidPrice,
    InvalidQuantity,
    InvalidSymbol,
    OrderNotFound,
    OrderValidationError,
    TradingError,
)
from tradesim.broker.orders import (
    LimitKind,
    MarketKind,
    Order,
    OrderKind,
    OrderStatus,
    OrderType,
    Quote,
    Side,
    StopLimitKind,
    StopLossKind,
    TimeInForce,
    TrailingStopKind,
)
from tradesim.broker.commission import (
    commission,
    CommissionModel,
    FixedCommissionModel,
    PercentageCommissionModel,
    PerShareCommissionModel,
)
from tradesim.broker.execution import Fill, execute_fill
from tradesim.broker.factory import (
    create_limit_order,
    create_market_order,
    create_stop_limit_order,
    create_stop_loss_order,
    create_trailing_stop_order,
    submit_order,
)
from tradesim.broker.triggers import TickResult, process_tick
from tradesim.broker.cancellation import cancel_order
from tradesim.broker.adapters import BrokerAdapter, SimulatedBrokerAdapter

__all__ = [
    "commission",
    "CommissionModel",
    "FixedCommissionModel",
    "PercentageCommissionModel",
    "PerShareCommissionModel",
    "Fill",
    "execute_fill",
    "InsufficientFunds",
    "InsufficientShares",
    "InvalidOrderType",
    "InvalidPrice",
    "InvalidQuantity",
    "InvalidSymbol",
    "OrderNotFound",
    "OrderValidationError",
    "TradingError",
    "LimitKind",
    "MarketKind",
    "Order",
    "OrderKind",
    "OrderStatus",
    "OrderType",
    "Quote",
    "Side",
    "StopLimitKind",
    "StopLossKind",
    "TimeInForce",
    "TrailingStopKind",
    "create_limit_order",
    "create_market_order",
    "create_stop_limit_order",
    "create_stop_loss_order",
    "create_trailing_stop_order",
    "submit_order",
    "TickResult",
    "process_tick",
    "cancel_order",
    "BrokerAdapter",
    "SimulatedBrokerAdapter",
]
