"""Portfolio tracking for the trading simulator."""

from tradesim.portfolio.portfolio import Portfolio
from tradesim.portfolio.statistics import OrderStatistics, fills_to_frame, get_order_statistics

__all__ = ["Portfolio", "OrderStatistics", "fills_to_frame", "get_order_statistics"]
