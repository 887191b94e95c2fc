from __future__ import annotations

from typing import Dict

from .base import TradingCalendar, TwentyFourSevenCalendar
from .nyse import NYSECalendar

_CALENDAR_REGISTRY: Dict[str, TradingCalendar] = {
    "NYSE": NYSECalendar(),
    "XNYS": NYSECalendar(),
    "24/7": TwentyFourSevenCalendar(),
}


def get_calendar(name: str) -> TradingCalendar:
    """Return a calendar instance by common name (case-insensitive).

    Supported names include "NYSE", "XNYS", and "24/7". Raises a helpful
    error listing supported names when an unknown name is supplied.

    :param name: Calendar name.
    :type name: str
    :returns: TradingCalendar instance.
    :rtype: TradingCalendar
    :raises KeyError: If the calendar name is not recognized.
    :Example:
        >>> cal = get_calendar('NYSE')
    """
    key = name.upper()
    if key not in _CALENDAR_REGISTRY:
        supported = ", ".join(sorted(_CALENDAR_REGISTRY))
        raise KeyError(f"Unknown calendar '{name}'. Supported: {supported}")
    return _CALENDAR_REGISTRY[key]


__all__ = [
    "TradingCalendar",
    "TwentyFourSevenCalendar",
    "NYSECalendar",
    "get_calendar",
]
