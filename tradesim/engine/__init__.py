"""Tick dispatch for one or more portfolios."""

from tradesim.engine.worker import PortfolioWorker, TickDispatcher

__all__ = ["PortfolioWorker", "TickDispatcher"]
