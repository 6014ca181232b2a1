# scenarios.py
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from bill_calculator import PVCompensation, calculate_simple_bills
from exceptions import ConfigurationError, RateResolutionError
from models import (
    BillRunOptions,
    BillType,
    Building,
    FuelType,
    ScenarioBill,
    UtilityBillScenario,
    UtilityRateType,
)
from rate_resolver import ResolvedRate, resolve_rate
from rate_tables import RateTables, load_rate_tables
from timeseries import FuelKey, FuelTimeSeries, aggregate_monthly

log = logging.getLogger(__name__)

CHARGE_FIXED = "Fixed"
CHARGE_MARGINAL = "Marginal"
CHARGE_PV_CREDIT = "PV Credit"
CHARGE_TOTAL = "Total"

# Report rows are keyed "<scenario>: <fuel>: <charge> ($)"; scenario names may not contain it
REPORT_KEY_SEPARATOR = ": "


@dataclass
class BillRunResult:
    """Everything a bill run produced: report rows, ledgers, warnings and per-scenario errors."""

    rows: Dict[str, float] = field(default_factory=dict)
    scenario_bills: List[ScenarioBill] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def has_output(self) -> bool:
        return bool(self.rows)


def report_key(scenario_name: str, fuel_type: Optional[FuelType], charge: str) -> str:
    parts = [scenario_name, charge] if fuel_type is None else [scenario_name, fuel_type.value, charge]
    return REPORT_KEY_SEPARATOR.join(parts) + " ($)"


def check_run_configuration(building: Building, options: BillRunOptions) -> None:
    """Reject configurations that no scenario can be billed under."""
    if building.has_distribution_system_efficiency:
        raise ConfigurationError("DSE is not currently supported when calculating utility bills.")

    if options.electricity_bill_type == BillType.DETAILED:
        if (
            options.electricity_utility_rate_type == UtilityRateType.USER_SPECIFIED
            and not options.electricity_utility_rate_path
        ):
            raise ConfigurationError(
                "Must specify a utility rate json path when choosing User-Specified utility rate type."
            )
        raise ConfigurationError(
            "Detailed electricity bill calculations are not supported; use the Simple bill type."
        )

    duplicates = [name for name, n in Counter(s.name for s in building.scenarios).items() if n > 1]
    if duplicates:
        raise ConfigurationError(f"Utility bill scenario names must be unique: {', '.join(duplicates)}")

    separated = [s.name for s in building.scenarios if REPORT_KEY_SEPARATOR in s.name]
    if separated:
        raise ConfigurationError(
            f"Utility bill scenario names must not contain '{REPORT_KEY_SEPARATOR}': {', '.join(separated)}"
        )


def billed_fuels(
    monthly: Mapping[FuelKey, FuelTimeSeries], scenario: UtilityBillScenario
) -> List[FuelType]:
    """Fuels in use by the building, plus any fuel the scenario gives an explicit rate."""
    fuels = []
    for fuel_type in FuelType:
        used = monthly[(fuel_type, False)].total != 0
        if fuel_type == FuelType.ELECTRICITY:
            used = used or monthly[(fuel_type, True)].total != 0
        if used or scenario.rate_override(fuel_type).is_set:
            fuels.append(fuel_type)
    return fuels


def calculate_scenario(
    building: Building,
    scenario: UtilityBillScenario,
    monthly: Mapping[FuelKey, FuelTimeSeries],
    tables: RateTables,
    warnings: List[str],
) -> ScenarioBill:
    """Resolve rates for one scenario and bill it; fallback warnings are appended to ``warnings``."""
    fuels = billed_fuels(monthly, scenario)
    compensation = PVCompensation.from_scenario(scenario, building.pv_capacity_kw)

    rates: Dict[FuelType, ResolvedRate] = {}
    for fuel_type in fuels:
        resolved = resolve_rate(
            fuel_type,
            building.state_code,
            tables,
            override=scenario.rate_override(fuel_type),
            country=building.country,
        )
        for warning in resolved.warnings:
            log.warning(warning)
            warnings.append(warning)
        rates[fuel_type] = resolved

    return calculate_simple_bills(
        scenario.name,
        monthly,
        rates,
        building.simulation_period,
        compensation,
        fuel_types=fuels,
    )


def scenario_rows(bill: ScenarioBill) -> Dict[str, float]:
    """Report rows for one scenario: the scenario total first, then each fuel."""
    rows = {report_key(bill.name, None, CHARGE_TOTAL): bill.total}
    for fuel_type, fuel_bill in bill.fuel_bills.items():
        if fuel_bill.annual_fixed != 0:
            rows[report_key(bill.name, fuel_type, CHARGE_FIXED)] = fuel_bill.annual_fixed
        rows[report_key(bill.name, fuel_type, CHARGE_MARGINAL)] = fuel_bill.annual_marginal
        if fuel_bill.annual_pv_credit != 0:
            rows[report_key(bill.name, fuel_type, CHARGE_PV_CREDIT)] = fuel_bill.annual_pv_credit
        rows[report_key(bill.name, fuel_type, CHARGE_TOTAL)] = fuel_bill.annual_total
    return rows


def run_bills(
    building: Building,
    timeseries: Mapping[FuelKey, Sequence[float]],
    tables: Optional[RateTables] = None,
    options: Optional[BillRunOptions] = None,
    timesteps_per_hour: int = 1,
) -> BillRunResult:
    """
    Calculate every scenario of ``building`` from raw per-timestep fuel series.

    Run-level configuration problems raise ConfigurationError before any
    scenario is evaluated. A scenario that fails (missing marginal rate,
    bad PV settings) is recorded in ``errors`` and contributes no rows; the
    remaining scenarios still run.
    """
    options = options or BillRunOptions()
    result = BillRunResult()

    try:
        check_run_configuration(building, options)
    except ConfigurationError as e:
        log.error(str(e))
        raise

    if not building.scenarios:
        log.info("No utility bill scenarios configured.")
        return result

    tables = tables or load_rate_tables()
    monthly = aggregate_monthly(timeseries, building.simulation_period, timesteps_per_hour)

    for scenario in building.scenarios:
        try:
            bill = calculate_scenario(building, scenario, monthly, tables, result.warnings)
        except RateResolutionError as e:
            for message in e.messages:
                log.error(message)
            result.errors[scenario.name] = e.messages
            continue
        except ConfigurationError as e:
            log.error(str(e))
            result.errors[scenario.name] = [str(e)]
            continue

        result.scenario_bills.append(bill)
        result.rows.update(scenario_rows(bill))

    return result
