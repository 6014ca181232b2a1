"""Shared fixtures for the utility bill tests."""

import numpy as np
import pytest

from models import FuelType, SimulationPeriod
from rate_tables import load_rate_tables


@pytest.fixture
def tables():
    return load_rate_tables()


@pytest.fixture
def full_year():
    return SimulationPeriod(calendar_year=2007)


def flat_hourly(annual_total, period=None, timesteps_per_hour=1):
    """Spread ``annual_total`` evenly over every timestep of ``period``."""
    period = period or SimulationPeriod()
    n = period.num_days * 24 * timesteps_per_hour
    return np.full(n, annual_total / n)


ELEC = (FuelType.ELECTRICITY, False)
PV = (FuelType.ELECTRICITY, True)
GAS = (FuelType.NATURAL_GAS, False)
OIL = (FuelType.FUEL_OIL, False)
PROPANE = (FuelType.PROPANE, False)
PELLETS = (FuelType.WOOD_PELLETS, False)
