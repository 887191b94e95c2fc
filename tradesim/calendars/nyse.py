from __future__ import annotations

from dataclasses import dataclass
from datetime import time

from .base import TradingCalendar


@dataclass
class NYSECalendar(TradingCalendar):
    """NYSE-like calendar: sessions close at 16:00 US/Eastern.

    Note: Weekends and holidays are not modeled; a DAY order placed after the
    close expires at the following calendar day's 16:00.
    """

    name: str = "NYSE"
    timezone: str = "US/Eastern"
    close_time: time = time(16, 0)
