"""Tests for monthly aggregation of simulation output."""

import numpy as np
import pytest

from conftest import ELEC, GAS, OIL, PV, flat_hourly
from models import FuelType, SimulationPeriod
from timeseries import aggregate_monthly, complete_series, fuel_keys, to_native_units


class TestAggregateMonthly:
    def test_hourly_full_year(self):
        period = SimulationPeriod(calendar_year=2007)
        monthly = aggregate_monthly({ELEC: np.ones(8760)}, period)
        values = monthly[ELEC].values
        assert values.shape == (12,)
        assert values[0] == pytest.approx(31 * 24)
        assert values[1] == pytest.approx(28 * 24)
        assert values.sum() == pytest.approx(8760)

    def test_leap_year(self):
        period = SimulationPeriod(calendar_year=2008)
        monthly = aggregate_monthly({ELEC: np.ones(8784)}, period)
        assert monthly[ELEC].values[1] == pytest.approx(29 * 24)

    def test_sub_hourly(self):
        period = SimulationPeriod(calendar_year=2007)
        monthly = aggregate_monthly({GAS: np.ones(8760 * 4)}, period, timesteps_per_hour=4)
        assert monthly[GAS].values[11] == pytest.approx(31 * 24 * 4)

    def test_partial_period(self):
        period = SimulationPeriod(2, 10, 4, 10, calendar_year=2002)
        n = period.num_days * 24
        monthly = aggregate_monthly({ELEC: np.ones(n)}, period)
        values = monthly[ELEC].values
        assert values[0] == 0.0
        assert values[1] == pytest.approx(19 * 24)
        assert values[2] == pytest.approx(31 * 24)
        assert values[3] == pytest.approx(10 * 24)
        assert values[4:].sum() == 0.0

    def test_missing_fuels_are_zero(self):
        monthly = aggregate_monthly({ELEC: flat_hourly(1000.0)}, SimulationPeriod())
        assert set(monthly) == set(fuel_keys())
        assert monthly[OIL].total == 0.0
        assert monthly[PV].total == 0.0
        assert (FuelType.NATURAL_GAS, True) not in monthly

    def test_total_is_conserved(self):
        monthly = aggregate_monthly({ELEC: flat_hourly(1234.5)}, SimulationPeriod())
        assert monthly[ELEC].total == pytest.approx(1234.5)

    def test_wrong_length(self):
        with pytest.raises(ValueError, match="Expected 8760 timesteps"):
            aggregate_monthly({ELEC: np.ones(100)}, SimulationPeriod())

    def test_unsupported_timestep(self):
        with pytest.raises(ValueError):
            aggregate_monthly({ELEC: np.ones(8760 * 7)}, SimulationPeriod(), timesteps_per_hour=7)


class TestCompleteSeries:
    def test_mismatched_lengths(self):
        with pytest.raises(ValueError, match="different lengths"):
            complete_series({ELEC: np.ones(10), GAS: np.ones(11)})

    def test_non_electric_production(self):
        with pytest.raises(ValueError):
            complete_series({(FuelType.PROPANE, True): np.ones(10)})

    def test_empty(self):
        with pytest.raises(ValueError):
            complete_series({})


class TestToNativeUnits:
    def test_electricity_from_joules(self):
        out = to_native_units([3.6e6, 7.2e6], "J", FuelType.ELECTRICITY)
        assert out == pytest.approx([1.0, 2.0])

    def test_propane_from_energy(self):
        joules = 91.6 * 1.05505585262e6
        assert to_native_units([joules], "J", FuelType.PROPANE) == pytest.approx([1.0])

    def test_fuel_oil_from_volume(self):
        assert to_native_units([0.003785411784], "m3", FuelType.FUEL_OIL) == pytest.approx([1.0])

    def test_wood_in_kbtu(self):
        assert to_native_units([1.05505585262e6], "J", FuelType.WOOD_CORD) == pytest.approx([1.0])
