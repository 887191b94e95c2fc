"""Commission models for the trading simulator.

This module provides commission models for charging trading fees when the
execution engine applies a fill. The simulator defaults to commission-free
trading; pass a model to the portfolio to charge fees.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Optional

from tradesim.broker.orders import to_decimal

ZERO = Decimal(0)


class CommissionModel(ABC):
    """Abstract base class for commission models."""
    @abstractmethod
    def calculate_commission(self, price: Decimal, quantity: Decimal) -> Decimal:
        """Calculate commission for a fill."""
        raise NotImplementedError


class FixedCommissionModel(CommissionModel):
    """Fixed commission model (fixed fee per trade)."""
    def __init__(self, commission: Any = 5):
        self.commission = to_decimal(commission)

    def calculate_commission(self, price: Decimal, quantity: Decimal) -> Decimal:
        return self.commission if quantity != 0 else ZERO


class PerShareCommissionModel(CommissionModel):
    """Per-share commission model with optional minimum trade cost."""
    def __init__(self, cost_per_share: Any = "0.005", min_trade_cost: Any = 1):
        self.cost_per_share = to_decimal(cost_per_share)
        self.min_trade_cost = to_decimal(min_trade_cost)

    def calculate_commission(self, price: Decimal, quantity: Decimal) -> Decimal:
        if quantity == 0:
            return ZERO
        commission = abs(quantity) * self.cost_per_share
        return max(commission, self.min_trade_cost)


class PercentageCommissionModel(CommissionModel):
    """Percentage-of-notional commission model with min/max bounds.

    ``percentage`` is a fraction: ``0.03`` charges 3% of the trade value.
    """
    def __init__(self, percentage: Any = "0.001", min_trade_cost: Any = 0,
                 max_trade_cost: Optional[Any] = None):
        self.percentage = to_decimal(percentage)
        self.min_trade_cost = to_decimal(min_trade_cost)
        self.max_trade_cost = None if max_trade_cost is None else to_decimal(max_trade_cost)

    def calculate_commission(self, price: Decimal, quantity: Decimal) -> Decimal:
        if quantity == 0:
            return ZERO
        commission = abs(price * quantity) * self.percentage
        commission = max(commission, self.min_trade_cost)
        if self.max_trade_cost is not None:
            commission = min(commission, self.max_trade_cost)
        return commission


def no_commission() -> CommissionModel:
    """Commission-free default used when a portfolio is built without a model."""
    return PerShareCommissionModel(cost_per_share=0, min_trade_cost=0)


# Short-hand namespace: Portfolio(commission_model=commission.PerShare(...))
class commission:
    """Factory helpers for the built-in commission models."""
    @staticmethod
    def Fixed(commission: Any = 5) -> CommissionModel:
        return FixedCommissionModel(commission=commission)

    @staticmethod
    def PerShare(cost_per_share: Any = "0.005", min_trade_cost: Any = 1) -> CommissionModel:
        return PerShareCommissionModel(cost_per_share=cost_per_share, min_trade_cost=min_trade_cost)

    @staticmethod
    def PerTrade(percent: Any = "0.001", min_trade_cost: Any = 0, max_trade_cost: Optional[Any] = None) -> CommissionModel:
        return PercentageCommissionModel(percentage=percent, min_trade_cost=min_trade_cost, max_trade_cost=max_trade_cost)
