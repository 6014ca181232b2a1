"""Tests for automatic rate lookup and the state -> region -> national fallback."""

import pytest

from models import FuelRateOverride, FuelType
from rate_resolver import (
    lookup_average_rate,
    lookup_rates,
    main,
    resolve_rate,
)


class TestLookupRates:
    """Rate preview lines, rounded to six decimals."""

    def test_connecticut_electricity_national_gas(self, tables):
        lines = lookup_rates("CT", 12.0, None, "US", 12.0, None, "CT", "US", tables=tables)
        assert lines == [
            "Electricity 0.202184 0.2186",
            "Natural Gas 0.987814 1.180328",
            "Fuel Oil 3.436115 3.436115",
            "Propane 2.695423 2.695423",
        ]

    def test_user_marginal_rates(self, tables):
        lines = lookup_rates("US", 12.0, 0.12, "CT", 12.0, 0.8, "US", "CT", tables=tables)
        assert lines == [
            "Electricity 0.12 0.133043",
            "Natural Gas 0.8 0.955844",
            "Fuel Oil 3.495346 3.495346",
            "Propane 3.628692 3.628692",
        ]

    def test_default_fixed_charges(self, tables):
        lines = lookup_rates("CT", None, None, "US", None, None, "CT", "US", tables=tables)
        assert lines[:2] == ["Electricity 0.202184 0.2186", "Natural Gas 0.987814 1.180328"]

    def test_cli(self, capsys):
        main(["CT", "12", "auto", "US", "12", "0", "CT", "US"])
        out = capsys.readouterr().out.splitlines()
        assert out == [
            "Electricity 0.202184 0.2186",
            "Natural Gas 0.987814 1.180328",
            "Fuel Oil 3.436115 3.436115",
            "Propane 2.695423 2.695423",
        ]


class TestFallbackChain:
    def test_state_hit_has_no_warning(self, tables):
        rate, warnings = lookup_average_rate(FuelType.PROPANE, "CT", tables)
        assert rate == pytest.approx(3.628692)
        assert warnings == ()

    def test_region_fallback(self, tables):
        rate, warnings = lookup_average_rate(FuelType.FUEL_OIL, "FL", tables)
        assert rate == pytest.approx(3.28)
        assert warnings == (
            "Could not find state average fuel oil rate based on Florida; "
            "using region (PADD 1C) average.",
        )

    def test_national_fallback(self, tables):
        rate, warnings = lookup_average_rate(FuelType.PROPANE, "OR", tables)
        assert rate == pytest.approx(2.695423)
        assert warnings == (
            "Could not find state average propane rate based on Oregon; using national average.",
        )

    def test_national_code_has_no_warning(self, tables):
        rate, warnings = lookup_average_rate(FuelType.FUEL_OIL, "US", tables)
        assert rate == pytest.approx(3.495346153846154)
        assert warnings == ()

    def test_unknown_state_falls_back_to_national(self, tables):
        rate, warnings = lookup_average_rate(FuelType.ELECTRICITY, "XX", tables)
        assert rate == pytest.approx(0.1366)
        assert len(warnings) == 1
        assert "based on XX" in warnings[0]

    def test_non_us_country_has_no_rate(self, tables):
        rate, warnings = lookup_average_rate(FuelType.ELECTRICITY, "WC", tables, country="ZAF")
        assert rate is None
        assert warnings == ()

    def test_lookup_is_repeatable(self, tables):
        first = resolve_rate(FuelType.FUEL_OIL, "FL", tables)
        second = resolve_rate(FuelType.FUEL_OIL, "FL", tables)
        assert first == second

    def test_every_state_resolves_every_fuel(self, tables):
        fuels = (FuelType.ELECTRICITY, FuelType.NATURAL_GAS, FuelType.FUEL_OIL, FuelType.PROPANE)
        for state in tables.state_codes:
            for fuel_type in fuels:
                resolved = resolve_rate(fuel_type, state, tables)
                assert resolved.marginal_rate is not None, (state, fuel_type)
                assert len(resolved.warnings) <= 1


class TestResolveRate:
    def test_electricity_nets_out_fixed_charge(self, tables):
        resolved = resolve_rate(FuelType.ELECTRICITY, "CT", tables)
        assert resolved.fixed_charge == 12.0
        assert resolved.average_rate == pytest.approx(0.2186)
        assert resolved.marginal_rate == pytest.approx(0.2186 - 12 * 12 / 8772)

    def test_user_fixed_charge_changes_marginal(self, tables):
        resolved = resolve_rate(
            FuelType.NATURAL_GAS, "CT", tables, override=FuelRateOverride(fixed_charge=0.0)
        )
        assert resolved.fixed_charge == 0.0
        assert resolved.marginal_rate == pytest.approx(1.20)

    def test_user_marginal_rate_wins(self, tables):
        resolved = resolve_rate(
            FuelType.PROPANE, "OR", tables, override=FuelRateOverride(marginal_rate=2.0)
        )
        assert resolved.marginal_rate == 2.0
        assert resolved.warnings == ()

    def test_oil_has_no_default_fixed_charge(self, tables):
        assert resolve_rate(FuelType.FUEL_OIL, "CT", tables).fixed_charge == 0.0

    @pytest.mark.parametrize(
        "fuel_type", [FuelType.WOOD_CORD, FuelType.WOOD_PELLETS, FuelType.COAL]
    )
    def test_solid_fuel_defaults(self, tables, fuel_type):
        resolved = resolve_rate(fuel_type, "CT", tables)
        assert resolved.fixed_charge == 0.0
        assert resolved.marginal_rate == pytest.approx(0.015)
        assert resolved.warnings == ()

    def test_non_us_building_has_no_marginal_rate(self, tables):
        resolved = resolve_rate(FuelType.ELECTRICITY, "WC", tables, country="ZAF")
        assert resolved.marginal_rate is None

    def test_denver_reference_rates_with_eight_dollar_fixed_charge(self, tables):
        override = FuelRateOverride(fixed_charge=8.0)
        elec = resolve_rate(FuelType.ELECTRICITY, "CO", tables, override=override)
        gas = resolve_rate(FuelType.NATURAL_GAS, "CO", tables, override=override)
        assert elec.marginal_rate == pytest.approx(0.1195179675994109)
        assert gas.marginal_rate == pytest.approx(0.7468734851091381)
        assert elec.warnings == gas.warnings == ()
