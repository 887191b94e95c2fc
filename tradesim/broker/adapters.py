from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from tradesim.broker.cancellation import cancel_order
from tradesim.broker.execution import Fill
from tradesim.broker.factory import submit_order
from tradesim.broker.orders import Order
from tradesim.broker.triggers import TickResult, process_tick
from tradesim.portfolio.statistics import OrderStatistics, get_order_statistics

logger = logging.getLogger("tradesim.broker.adapter")


class BrokerAdapter:
    """Abstract broker interface consumed by UI/API layers.

    Implementations expose a uniform API so callers can submit, cancel and
    observe orders without knowing how execution is produced.
    """

    def submit_order(self, order_type: Any, **params) -> Order:
        raise NotImplementedError

    def cancel_order(self, order_id: str) -> Order:
        raise NotImplementedError

    def get_open_orders(self) -> List[Order]:
        raise NotImplementedError

    def poll_fills(self) -> List[Fill]:
        """Return fills since last poll."""
        raise NotImplementedError

    def on_fill(self, callback: Callable[[List[Fill]], None]) -> None:
        """Register a callback invoked when fills are produced."""
        self._on_fill_cb = callback  # type: ignore[attr-defined]

    def get_account(self) -> Dict[str, Any]:
        raise NotImplementedError

    def get_order_statistics(self) -> OrderStatistics:
        raise NotImplementedError


class SimulatedBrokerAdapter(BrokerAdapter):
    """Adapter wrapping one in-process `Portfolio` and the simulated lifecycle."""

    def __init__(self, portfolio):
        self._portfolio = portfolio
        self._pending_fills: List[Fill] = []
        self._on_fill_cb: Optional[Callable[[List[Fill]], None]] = None

    @property
    def portfolio(self):
        return self._portfolio

    def submit_order(self, order_type: Any, **params) -> Order:
        """Create an order; market orders come back FILLED, others PENDING."""
        before = len(self._portfolio.history)
        order = submit_order(self._portfolio, order_type, **params)
        self._collect(self._portfolio.history[before:])
        return order

    def cancel_order(self, order_id: str) -> Order:
        return cancel_order(self._portfolio, order_id)

    def get_open_orders(self) -> List[Order]:
        return self._portfolio.pending_orders

    def process_tick(self, snapshot: Any, now: Optional[datetime] = None) -> TickResult:
        """Run one tick and stash resulting fills for polling."""
        with self._portfolio.lock:
            before = len(self._portfolio.history)
            result = process_tick(self._portfolio, snapshot, now=now)
            fills = self._portfolio.history[before:]
        self._collect(fills)
        return result

    def _collect(self, fills: List[Fill]) -> None:
        if not fills:
            return
        self._pending_fills.extend(fills)
        if self._on_fill_cb is not None:
            try:
                self._on_fill_cb(list(fills))
            except Exception:
                # Listener failures must not undo or block the fills already applied
                logger.exception("Fill callback raised")

    def poll_fills(self) -> List[Fill]:
        """Return fills captured since last poll."""
        fills = list(self._pending_fills)
        self._pending_fills.clear()
        return fills

    def get_account(self) -> Dict[str, Any]:
        return self._portfolio.get_account()

    def get_order_statistics(self) -> OrderStatistics:
        return get_order_statistics(self._portfolio)
