"""Simulator configuration."""

from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Any, Mapping, Optional

from tradesim.broker.commission import CommissionModel, commission
from tradesim.broker.orders import to_decimal

_COMMISSION_FACTORIES = {
    "fixed": commission.Fixed,
    "per_share": commission.PerShare,
    "percentage": commission.PerTrade,
}


@dataclass
class SimulatorConfig:
    """Configuration for building portfolios.

    Attributes:
        initial_cash: Starting cash balance.
        calendar: Calendar name used to time DAY orders ("NYSE", "24/7").
        commission_model: Fee model; ``None`` trades commission-free.
        guard_fills: Re-check cash/shares when a pending order fills and
            reject it instead of overdrawing. ``False`` lets fills overdraw.
    """

    initial_cash: Decimal = Decimal(100000)
    calendar: str = "NYSE"
    commission_model: Optional[CommissionModel] = None
    guard_fills: bool = True

    def __post_init__(self):
        self.initial_cash = to_decimal(self.initial_cash)
        if self.initial_cash < 0:
            raise ValueError("initial_cash must not be negative")

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "SimulatorConfig":
        """Build a config from plain values.

        ``commission`` may be given as ``{"model": "percentage", "percent": 0.03}``;
        the remaining keys are passed to the matching factory. Unknown keys raise.

        :raises ValueError: On unknown keys or commission model names.
        """
        values = dict(values)
        commission_params = values.pop("commission", None)
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        if commission_params is not None:
            commission_params = dict(commission_params)
            name = str(commission_params.pop("model", "")).lower()
            if name not in _COMMISSION_FACTORIES:
                supported = ", ".join(sorted(_COMMISSION_FACTORIES))
                raise ValueError(f"Unknown commission model '{name}'. Supported: {supported}")
            values["commission_model"] = _COMMISSION_FACTORIES[name](**commission_params)
        return cls(**values)
