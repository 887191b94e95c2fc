"""Portfolio layer for the trading simulator.

A :class:`Portfolio` is the simulated brokerage account: cash, positions,
weighted-average cost basis, the pending-order queue and the fill history.
The pending queue is owned exclusively by its portfolio and addressed by
order id; every order ever accepted stays reachable through ``orders``.
"""
import logging
import threading
from decimal import Decimal
from typing import Any, Dict, List, Optional

from tradesim.broker.commission import CommissionModel, no_commission
from tradesim.broker.errors import OrderNotFound
from tradesim.broker.orders import Order, Quote, to_decimal
from tradesim.calendars import TradingCalendar, get_calendar

ZERO = Decimal(0)


class Portfolio:
    """Simulated brokerage account mutated by the order lifecycle."""

    def __init__(
        self,
        initial_cash: Any = 100000,
        calendar: Optional[TradingCalendar] = None,
        commission_model: Optional[CommissionModel] = None,
        guard_fills: bool = True,
    ):
        self.initial_cash = to_decimal(initial_cash)
        if self.initial_cash < 0:
            raise ValueError("initial_cash must not be negative")
        self.cash = self.initial_cash
        self.positions: Dict[str, Decimal] = {}     # symbol -> shares held
        self.cost_basis: Dict[str, Decimal] = {}    # symbol -> weighted average buy price
        self.history: List = []                     # Fill records, append-only
        self.orders: Dict[str, Order] = {}          # every order ever accepted, by id
        self._pending: Dict[str, Order] = {}        # insertion ordered queue

        self.calendar = calendar or get_calendar("NYSE")
        self.commission_model: CommissionModel = commission_model or no_commission()
        # When set, pending fills re-check cash/shares and reject instead of overdrawing
        self.guard_fills = guard_fills

        # Held for a whole tick pass so passes for one portfolio never interleave
        self.lock = threading.RLock()
        self._logger = logging.getLogger("tradesim.portfolio")

    @classmethod
    def from_config(cls, config) -> "Portfolio":
        """Build a portfolio from a :class:`tradesim.config.SimulatorConfig`."""
        return cls(
            initial_cash=config.initial_cash,
            calendar=get_calendar(config.calendar),
            commission_model=config.commission_model,
            guard_fills=config.guard_fills,
        )

    # ---- pending queue -------------------------------------------------

    @property
    def pending_orders(self) -> List[Order]:
        """Pending orders in queue (placement) order."""
        return list(self._pending.values())

    def add_pending(self, order: Order) -> None:
        with self.lock:
            self.record(order)
            self._pending[order.id] = order

    def pop_pending(self, order_id: str) -> Order:
        """Remove and return a pending order.

        :raises OrderNotFound: If ``order_id`` is not in the pending queue.
        """
        with self.lock:
            try:
                return self._pending.pop(order_id)
            except KeyError:
                raise OrderNotFound(order_id) from None

    def record(self, order: Order) -> None:
        self.orders[order.id] = order

    def get_order(self, order_id: str) -> Optional[Order]:
        return self.orders.get(order_id)

    # ---- holdings -------------------------------------------------------

    def position(self, symbol: str) -> Decimal:
        return self.positions.get(symbol, ZERO)

    def market_value(self, prices: Dict[str, Any]) -> Decimal:
        """Return cash plus positions marked at ``prices`` (or cost basis if missing)."""
        total = self.cash
        for symbol, quantity in self.positions.items():
            mark = prices.get(symbol)
            if isinstance(mark, Quote):
                mark = mark.price
            price = to_decimal(mark) if mark is not None else self.cost_basis.get(symbol, ZERO)
            total += quantity * price
        return total

    def get_account(self) -> Dict[str, Any]:
        """Return a simplified account summary snapshot.

        :returns: Dictionary with cash, positions, pending order ids and fill count.
        :rtype: Dict[str, Any]
        """
        with self.lock:
            return {
                "cash": self.cash,
                "positions": {
                    symbol: {
                        "quantity": quantity,
                        "cost_basis": self.cost_basis.get(symbol, ZERO),
                    }
                    for symbol, quantity in self.positions.items()
                },
                "pending_orders": list(self._pending),
                "fills": len(self.history),
            }

    def __repr__(self) -> str:
        return (
            f"Portfolio(cash=${self.cash:.2f}, positions={len(self.positions)}, "
            f"pending={len(self._pending)})"
        )
