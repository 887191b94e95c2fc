from __future__ import annotations

import logging
from collections import deque
from datetime import datetime
from typing import Any, Callable, Deque, Dict, Iterable, List, Mapping, Optional, Tuple

import polars as pl

from tradesim.broker.orders import Quote, normalize_symbol

Snapshot = Dict[str, Quote]

logger = logging.getLogger("tradesim.marketdata")


def normalize_snapshot(snapshot: Any) -> Snapshot:
    """Return ``{SYMBOL: Quote}`` from any supported snapshot shape.

    Supported inputs:
      - Polars DataFrame with columns ``symbol`` and ``price`` and optional
        ``bid``/``ask`` (one row per symbol; the last row wins)
      - Mapping of symbol to :class:`Quote`, to a mapping with ``price``,
        ``bid`` and ``ask`` keys, or to a bare price

    :param snapshot: Price snapshot.
    :returns: Mapping of upper-cased symbol to quote.
    :rtype: Dict[str, Quote]
    :raises ValueError: If a row or entry has no price.
    """
    if snapshot is None:
        return {}
    if isinstance(snapshot, pl.DataFrame):
        if snapshot.is_empty():
            return {}
        if "symbol" not in snapshot.columns or "price" not in snapshot.columns:
            raise ValueError("snapshot frame needs 'symbol' and 'price' columns")
        return {
            normalize_symbol(row["symbol"]): _quote_from_mapping(row)
            for row in snapshot.to_dicts()
        }
    return {normalize_symbol(symbol): _to_quote(value) for symbol, value in snapshot.items()}


def _to_quote(value: Any) -> Quote:
    if isinstance(value, Quote):
        return value
    if isinstance(value, Mapping):
        return _quote_from_mapping(value)
    return Quote(price=value)


def _quote_from_mapping(row: Mapping) -> Quote:
    price = row.get("price")
    if price is None:
        raise ValueError(f"quote without a price: {dict(row)!r}")
    return Quote(price=price, bid=row.get("bid"), ask=row.get("ask"))


class QuoteFeed:
    """Abstract price feed producing timestamped snapshots.

    Feeds can be pull-based (via `next_snapshot()`) or push-based (via
    `on_snapshot()` registrations).
    """

    def subscribe(self, symbols: List[str]) -> None:
        raise NotImplementedError

    def next_snapshot(self) -> Optional[Tuple[datetime, Snapshot]]:
        """Return the next `(timestamp, snapshot)` or ``None`` when exhausted."""
        raise NotImplementedError

    def on_snapshot(self, callback: Callable[[datetime, Snapshot], None]) -> None:
        """Register a push-based callback invoked for each published snapshot.

        :param callback: Callable accepting `(timestamp, snapshot)`.
        :type callback: Callable[[datetime, Snapshot], None]
        """
        self._on_snapshot_cb = callback  # type: ignore[attr-defined]

    def close(self) -> None:
        pass


class ReplayQuoteFeed(QuoteFeed):
    """Deterministic feed replaying a prepared sequence of snapshots.

    Snapshots are normalized on construction and filtered to the subscribed
    symbols (all symbols when nothing is subscribed).
    """

    def __init__(self, snapshots: Iterable[Tuple[datetime, Any]], symbols: Optional[List[str]] = None):
        self._queue: Deque[Tuple[datetime, Snapshot]] = deque(
            (ts, normalize_snapshot(snap)) for ts, snap in snapshots
        )
        self._symbols: Optional[set] = None
        self._current_ts: Optional[datetime] = None
        self._closed = False
        self._on_snapshot_cb = None
        if symbols:
            self.subscribe(symbols)

    def subscribe(self, symbols: List[str]) -> None:
        self._symbols = {normalize_symbol(s) for s in symbols}

    def next_snapshot(self) -> Optional[Tuple[datetime, Snapshot]]:
        if self._closed or not self._queue:
            return None
        ts, snapshot = self._queue.popleft()
        if self._symbols is not None:
            snapshot = {s: q for s, q in snapshot.items() if s in self._symbols}
        self._current_ts = ts
        return ts, snapshot

    def current_time(self) -> Optional[datetime]:
        """Return the timestamp of the last emitted snapshot, if any."""
        return self._current_ts

    def publish_all(self) -> int:
        """Push every remaining snapshot to the registered callback; return the count."""
        if self._on_snapshot_cb is None:
            raise RuntimeError("No snapshot callback registered; call on_snapshot() first")
        count = 0
        while True:
            item = self.next_snapshot()
            if item is None:
                break
            self._on_snapshot_cb(*item)
            count += 1
        logger.debug(f"Replayed {count} snapshots")
        return count

    def close(self) -> None:
        self._closed = True
        self._queue.clear()
