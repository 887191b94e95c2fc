"""Per-portfolio tick workers.

Each :class:`PortfolioWorker` is the exclusive consumer of price ticks for
one portfolio: ticks are queued and evaluated strictly one at a time, so two
passes over the same pending queue never interleave. Independent portfolios
get independent workers and run in parallel.
"""

import logging
import queue
import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from tradesim.broker.triggers import TickResult, process_tick
from tradesim.marketdata.feed import QuoteFeed

_STOP = object()


class PortfolioWorker:
    """Background thread draining a tick queue into ``process_tick``.

    :param portfolio: Portfolio owned by this worker.
    :param name: Worker name used for the thread and log records.
    :param on_result: Optional callback receiving each :class:`TickResult`.
    """

    def __init__(
        self,
        portfolio,
        name: str = "portfolio",
        on_result: Optional[Callable[[TickResult], None]] = None,
    ):
        self.portfolio = portfolio
        self.name = name
        self.on_result = on_result
        self.results: List[TickResult] = []
        self.errors: List[Tuple[Any, Exception]] = []
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self.logger = logging.getLogger(f"tradesim.engine.{name}")

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._thread = threading.Thread(
            target=self._run, name=f"tradesim-{self.name}", daemon=True
        )
        self._thread.start()
        self.logger.debug("Worker started")

    def submit(self, snapshot: Any, now: Optional[datetime] = None) -> None:
        """Queue one price snapshot for evaluation."""
        self._queue.put((snapshot, now))

    def join(self) -> None:
        """Block until every queued tick has been evaluated.

        :raises RuntimeError: If the worker thread is not running.
        """
        if not self.running:
            raise RuntimeError(f"Worker '{self.name}' is not running; call start() first")
        self._queue.join()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Finish queued ticks, then stop the thread."""
        if self._thread is None:
            return
        self._queue.put(_STOP)
        self._thread.join(timeout)
        self._thread = None
        self.logger.debug("Worker stopped")

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                snapshot, now = item
                try:
                    result = process_tick(self.portfolio, snapshot, now=now)
                except Exception as exc:
                    # One malformed tick must not kill the portfolio's worker
                    self.logger.exception("Tick evaluation failed")
                    self.errors.append((snapshot, exc))
                    continue
                self.results.append(result)
                if self.on_result is not None and result.changed:
                    try:
                        self.on_result(result)
                    except Exception:
                        # Fills are already applied; a listener failure must not stop the queue
                        self.logger.exception("Result callback raised")
            finally:
                self._queue.task_done()


class TickDispatcher:
    """Fan price snapshots out to one worker per registered portfolio."""

    def __init__(self):
        self._workers: Dict[str, PortfolioWorker] = {}
        self.logger = logging.getLogger("tradesim.engine")

    def register(self, name: str, portfolio, on_result=None) -> PortfolioWorker:
        if name in self._workers:
            raise ValueError(f"Portfolio '{name}' is already registered")
        worker = PortfolioWorker(portfolio, name=name, on_result=on_result)
        self._workers[name] = worker
        return worker

    def worker(self, name: str) -> PortfolioWorker:
        return self._workers[name]

    def start(self) -> None:
        for worker in self._workers.values():
            worker.start()

    def broadcast(self, snapshot: Any, now: Optional[datetime] = None) -> None:
        for worker in self._workers.values():
            worker.submit(snapshot, now)

    def run_feed(self, feed: QuoteFeed) -> int:
        """Pull every snapshot from ``feed``, broadcast it, and wait for the workers.

        Workers that are not running yet are started first.
        """
        self.start()
        count = 0
        while True:
            item = feed.next_snapshot()
            if item is None:
                break
            ts, snapshot = item
            self.broadcast(snapshot, ts)
            count += 1
        self.join()
        self.logger.info(f"Dispatched {count} snapshots to {len(self._workers)} portfolios")
        return count

    def join(self) -> None:
        for worker in self._workers.values():
            worker.join()

    def stop(self, timeout: Optional[float] = None) -> None:
        for worker in self._workers.values():
            worker.stop(timeout)
