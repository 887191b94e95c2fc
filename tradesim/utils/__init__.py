"""Utility functions for the trading simulator."""

from tradesim.utils.logging import configure_logging

__all__ = [
    "configure_logging",
]
