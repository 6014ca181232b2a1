"""Tests for unit conversions."""

import pytest

from conversions import convert_value, energy_to_gallons
from exceptions import UnsupportedUnitError


class TestConvertValue:
    def test_kwh_to_joules(self):
        assert convert_value(1.0, "kWh", "J") == pytest.approx(3.6e6)

    def test_therm_to_kbtu(self):
        assert convert_value(1.0, "therm", "kBtu") == pytest.approx(100.0)

    def test_joules_to_therm(self):
        assert convert_value(105505585.262, "J", "therm") == pytest.approx(1.0)

    def test_mbtu_is_million_btu(self):
        assert convert_value(1.0, "MBtu", "kBtu") == pytest.approx(1000.0)

    def test_volume(self):
        assert convert_value(1.0, "m^3", "gal") == pytest.approx(264.172, rel=1e-5)

    def test_energy_to_volume_is_unsupported(self):
        with pytest.raises(UnsupportedUnitError):
            convert_value(1.0, "kWh", "gal")

    def test_unknown_unit_is_a_value_error(self):
        with pytest.raises(ValueError, match="furlong"):
            convert_value(1.0, "furlong", "J")


class TestEnergyToGallons:
    def test_propane_heat_content(self):
        assert energy_to_gallons(91.6, "kBtu", "Propane") == pytest.approx(1.0)

    def test_fuel_oil_heat_content(self):
        assert energy_to_gallons(139.0, "kBtu", "Fuel Oil") == pytest.approx(1.0)

    def test_from_joules(self):
        joules = convert_value(139.0 * 2, "kBtu", "J")
        assert energy_to_gallons(joules, "J", "Fuel Oil") == pytest.approx(2.0)

    def test_fuel_without_heat_content(self):
        with pytest.raises(UnsupportedUnitError):
            energy_to_gallons(1.0, "kBtu", "Coal")
