# rate_resolver.py
"""
Resolve the fixed charge and marginal rate for one fuel.

User overrides win. Otherwise fixed charges take the documented default and
marginal rates come from the reference tables, tried in order:

    state  ->  region (census division or PADD)  ->  national average

Each step down the chain produces exactly one warning. A fuel with no data
at any step resolves to ``None``; whether that is fatal is decided by the
caller (only fuels actually in use need a rate).
"""
from __future__ import annotations

import argparse
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from models import (
    DEFAULT_FIXED_CHARGES,
    DEFAULT_MARGINAL_RATES,
    FuelRateOverride,
    FuelType,
)
from rate_tables import NATIONAL_CODE, RateTables, load_rate_tables

log = logging.getLogger(__name__)

US_COUNTRY_CODES = ("USA", "US")

# Fuels whose regional tier is a petroleum-marketing (PADD) region
PADD_FUELS = (FuelType.FUEL_OIL, FuelType.PROPANE)

# Fuels whose marginal rate nets out the fixed charge over typical household use
FIXED_CHARGE_ADJUSTED_FUELS = (FuelType.ELECTRICITY, FuelType.NATURAL_GAS)


@dataclass(frozen=True)
class TierResult:
    rate: float
    source: str  # e.g. "region (PADD 1C)", "national"


@dataclass(frozen=True)
class ResolvedRate:
    fuel_type: FuelType
    fixed_charge: float
    marginal_rate: Optional[float]
    average_rate: Optional[float]
    warnings: Tuple[str, ...] = ()


# ---------------------------------
# Lookup tiers
# ---------------------------------

class RateLookupTier(ABC):
    """One step of the average-rate fallback chain."""

    @abstractmethod
    def lookup(
        self, tables: RateTables, fuel_type: FuelType, state_code: str, country: str
    ) -> Optional[TierResult]:
        """Return the rate found at this tier, or None to fall through."""


class StateTier(RateLookupTier):
    def lookup(self, tables, fuel_type, state_code, country):
        if country not in US_COUNTRY_CODES or state_code == NATIONAL_CODE:
            return None
        rate = tables.average_rate(fuel_type, state_code)
        return None if rate is None else TierResult(rate, "state")


class RegionTier(RateLookupTier):
    def lookup(self, tables, fuel_type, state_code, country):
        if country not in US_COUNTRY_CODES:
            return None
        jurisdiction = tables.jurisdiction(state_code)
        if jurisdiction is None:
            return None
        region = jurisdiction.padd if fuel_type in PADD_FUELS else jurisdiction.census_division
        rate = tables.average_rate(fuel_type, region)
        return None if rate is None else TierResult(rate, f"region ({region})")


class NationalTier(RateLookupTier):
    def lookup(self, tables, fuel_type, state_code, country):
        if country not in US_COUNTRY_CODES:
            return None
        rate = tables.average_rate(fuel_type, NATIONAL_CODE)
        return None if rate is None else TierResult(rate, "national")


DEFAULT_TIERS: Tuple[RateLookupTier, ...] = (StateTier(), RegionTier(), NationalTier())


def lookup_average_rate(
    fuel_type: FuelType,
    state_code: str,
    tables: RateTables,
    country: str = "USA",
    tiers: Sequence[RateLookupTier] = DEFAULT_TIERS,
) -> Tuple[Optional[float], Tuple[str, ...]]:
    """Walk the tiers; return the first rate found and any fallback warning."""
    state_code = state_code.upper()
    country = country.upper()

    for i, tier in enumerate(tiers):
        result = tier.lookup(tables, fuel_type, state_code, country)
        if result is None:
            continue
        if i == 0 or state_code == NATIONAL_CODE:
            return result.rate, ()
        return result.rate, (_fallback_warning(fuel_type, state_code, tables, result.source),)

    log.debug("No %s rate at any tier for %s (%s)", fuel_type.label, state_code, country)
    return None, ()


def _fallback_warning(fuel_type: FuelType, state_code: str, tables: RateTables, source: str) -> str:
    jurisdiction = tables.jurisdiction(state_code)
    place = jurisdiction.state_name if jurisdiction else state_code
    return f"Could not find state average {fuel_type.label} rate based on {place}; using {source} average."


# ---------------------------------
# Resolution
# ---------------------------------

def resolve_rate(
    fuel_type: FuelType,
    state_code: str,
    tables: RateTables,
    override: Optional[FuelRateOverride] = None,
    country: str = "USA",
) -> ResolvedRate:
    """Resolve the (fixed charge, marginal rate) pair for one fuel."""
    override = override or FuelRateOverride()
    fixed_charge = override.fixed_charge
    if fixed_charge is None:
        fixed_charge = DEFAULT_FIXED_CHARGES[fuel_type]

    if fuel_type in DEFAULT_MARGINAL_RATES:
        marginal = override.marginal_rate
        if marginal is None:
            marginal = DEFAULT_MARGINAL_RATES[fuel_type]
        return ResolvedRate(fuel_type, fixed_charge, marginal, marginal)

    if fuel_type in FIXED_CHARGE_ADJUSTED_FUELS:
        household = tables.household_annual_consumption(fuel_type, state_code.upper())
        fixed_per_unit = 12.0 * fixed_charge / household if household else 0.0

        if override.marginal_rate is not None:
            marginal = override.marginal_rate
            return ResolvedRate(fuel_type, fixed_charge, marginal, marginal + fixed_per_unit)

        average, warnings = lookup_average_rate(fuel_type, state_code, tables, country)
        marginal = None if average is None else average - fixed_per_unit
        return ResolvedRate(fuel_type, fixed_charge, marginal, average, warnings)

    if override.marginal_rate is not None:
        marginal = override.marginal_rate
        return ResolvedRate(fuel_type, fixed_charge, marginal, marginal)

    average, warnings = lookup_average_rate(fuel_type, state_code, tables, country)
    return ResolvedRate(fuel_type, fixed_charge, average, average, warnings)


def lookup_rates(
    elec_state: str,
    elec_fixed_charge: Optional[float],
    elec_marginal_rate: Optional[float],
    gas_state: str,
    gas_fixed_charge: Optional[float],
    gas_marginal_rate: Optional[float],
    oil_state: str,
    propane_state: str,
    tables: Optional[RateTables] = None,
) -> List[str]:
    """
    Preview auto rates: one ``"<Fuel> <marginal> <average>"`` line per fuel.

    Fixed charges of None take the default; marginal rates of None are
    looked up. Values are rounded to 6 decimals.
    """
    tables = tables or load_rate_tables()
    fuel_requests = [
        (FuelType.ELECTRICITY, elec_state, FuelRateOverride(elec_fixed_charge, elec_marginal_rate)),
        (FuelType.NATURAL_GAS, gas_state, FuelRateOverride(gas_fixed_charge, gas_marginal_rate)),
        (FuelType.FUEL_OIL, oil_state, FuelRateOverride()),
        (FuelType.PROPANE, propane_state, FuelRateOverride()),
    ]

    lines: List[str] = []
    for fuel_type, state, override in fuel_requests:
        resolved = resolve_rate(fuel_type, state, tables, override)
        for warning in resolved.warnings:
            log.warning(warning)
        lines.append(
            f"{fuel_type.value} {_fmt_rate(resolved.marginal_rate)} {_fmt_rate(resolved.average_rate)}"
        )
    return lines


def _fmt_rate(value: Optional[float]) -> str:
    return "n/a" if value is None else f"{round(value, 6)}"


def _parse_rate(val: str) -> Optional[float]:
    """``auto`` (or 0) means look the rate up."""
    if val.lower() == "auto":
        return None
    rate = float(val)
    return None if rate == 0.0 else rate


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Print marginal and average rates per fuel.")
    parser.add_argument("elec_state")
    parser.add_argument("elec_fixed_charge", type=float)
    parser.add_argument("elec_marginal_rate", type=_parse_rate)
    parser.add_argument("gas_state")
    parser.add_argument("gas_fixed_charge", type=float)
    parser.add_argument("gas_marginal_rate", type=_parse_rate)
    parser.add_argument("oil_state")
    parser.add_argument("propane_state")
    args = parser.parse_args(argv)

    for line in lookup_rates(
        args.elec_state,
        args.elec_fixed_charge,
        args.elec_marginal_rate,
        args.gas_state,
        args.gas_fixed_charge,
        args.gas_marginal_rate,
        args.oil_state,
        args.propane_state,
    ):
        print(line)


if __name__ == "__main__":
    main()
