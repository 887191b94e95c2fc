"""Pytest configuration for tradesim tests."""

from datetime import datetime

import pytest
import pytz

from tradesim.broker import SimulatedBrokerAdapter
from tradesim.portfolio import Portfolio

EASTERN = pytz.timezone("US/Eastern")


def eastern(*args) -> datetime:
    """Aware US/Eastern datetime, e.g. ``eastern(2025, 6, 2, 10)``."""
    return EASTERN.localize(datetime(*args))


@pytest.fixture
def at():
    """Return the ``eastern`` helper so tests can build session times."""
    return eastern


@pytest.fixture
def morning():
    """Monday 2025-06-02 10:00 US/Eastern, well before the 16:00 close."""
    return eastern(2025, 6, 2, 10)


@pytest.fixture
def portfolio():
    """Create a portfolio with $100,000 cash on the NYSE calendar."""
    return Portfolio(initial_cash=100000)


@pytest.fixture
def adapter(portfolio):
    """Create a simulated broker adapter around the portfolio fixture."""
    return SimulatedBrokerAdapter(portfolio)
