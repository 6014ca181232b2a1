# bill_calculator.py
"""
Simple (flat-rate) utility bill calculation.

For every billed fuel the calculator walks months 1..12 in order:

  • fixed charge    = monthly fixed charge × fraction of the month simulated
  • marginal charge = monthly consumption × marginal rate

Electricity additionally nets PV production against consumption:

  • NetMetering, User-Specified sellback: each month bills max(net, 0); the
    month's excess production (kWh) is banked and valued once at year end
    at the annual excess sellback rate (the annual true-up).
  • NetMetering, Retail Electricity Cost: each month bills max(net, 0) and
    credits that month's excess at the marginal rate.
  • FeedInTariff: consumption is billed in full and every kWh produced is
    credited at the feed-in tariff rate.

A monthly grid connection fee (flat, or per kW of installed PV) is added
to the electricity fixed charge whenever the building has PV.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np

from exceptions import ConfigurationError, RateResolutionError
from models import (
    DEFAULT_FEED_IN_TARIFF_RATE,
    DEFAULT_SELLBACK_RATE,
    FuelBill,
    FuelType,
    MonthlyLedgerEntry,
    PVCompensationType,
    ScenarioBill,
    SellbackRateType,
    SimulationPeriod,
    UtilityBillScenario,
)
from proration import monthly_prorates
from rate_resolver import ResolvedRate
from timeseries import FuelKey, FuelTimeSeries

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PVCompensation:
    compensation_type: PVCompensationType = PVCompensationType.NET_METERING
    sellback_rate_type: SellbackRateType = SellbackRateType.USER_SPECIFIED
    sellback_rate: float = DEFAULT_SELLBACK_RATE
    feed_in_tariff_rate: float = DEFAULT_FEED_IN_TARIFF_RATE
    monthly_grid_connection_fee: float = 0.0  # $/month

    @classmethod
    def from_scenario(cls, scenario: UtilityBillScenario, pv_capacity_kw: float) -> "PVCompensation":
        per_kw = scenario.pv_monthly_grid_connection_fee_dollars_per_kw
        flat = scenario.pv_monthly_grid_connection_fee_dollars
        if per_kw is not None and flat is not None:
            raise ConfigurationError(
                f"Scenario '{scenario.name}': specify the PV grid connection fee "
                "either in $/kW or in $, not both."
            )

        fee = 0.0
        if pv_capacity_kw > 0:
            if per_kw is not None:
                fee = per_kw * pv_capacity_kw
            elif flat is not None:
                fee = flat

        return cls(
            compensation_type=scenario.pv_compensation_type,
            sellback_rate_type=scenario.pv_net_metering_annual_excess_sellback_rate_type,
            sellback_rate=scenario.sellback_rate,
            feed_in_tariff_rate=scenario.feed_in_tariff_rate,
            monthly_grid_connection_fee=fee,
        )


def missing_rate_message(fuel_type: FuelType) -> str:
    return f"Could not find a marginal {fuel_type.value} rate."


def calculate_fuel_bill(
    fuel_type: FuelType,
    consumption: Sequence[float],
    rate: ResolvedRate,
    prorates: Sequence[float],
    production: Optional[Sequence[float]] = None,
    compensation: Optional[PVCompensation] = None,
) -> FuelBill:
    """Run the monthly ledger for one fuel and return its annual bill."""
    consumption = np.asarray(consumption, dtype=float)
    production = np.zeros(12) if production is None else np.asarray(production, dtype=float)
    if consumption.size != 12 or production.size != 12 or len(prorates) != 12:
        raise ValueError("Simple bill calculation needs exactly 12 monthly values.")
    if production.any() and fuel_type != FuelType.ELECTRICITY:
        raise ValueError(f"Only electricity can have production, got {fuel_type.value}.")

    marginal_rate = rate.marginal_rate
    if marginal_rate is None:
        if consumption.any() or production.any():
            raise RateResolutionError([missing_rate_message(fuel_type)])
        marginal_rate = 0.0

    fixed_charge = rate.fixed_charge
    if compensation is not None:
        fixed_charge += compensation.monthly_grid_connection_fee
    net_metering = (
        compensation is not None
        and compensation.compensation_type == PVCompensationType.NET_METERING
    )
    retail_sellback = (
        net_metering and compensation.sellback_rate_type == SellbackRateType.RETAIL_ELECTRICITY_COST
    )

    entries: List[MonthlyLedgerEntry] = []
    cum_fixed = cum_marginal = cum_credit = 0.0
    banked_kwh = 0.0

    for month in range(12):
        used = float(consumption[month])
        produced = float(production[month])
        monthly_fixed = fixed_charge * prorates[month]
        monthly_credit = 0.0
        excess = 0.0

        if net_metering:
            net = used - produced
            monthly_marginal = max(net, 0.0) * marginal_rate
            excess = max(-net, 0.0)
            if retail_sellback:
                monthly_credit = -excess * marginal_rate
                excess = 0.0
            else:
                banked_kwh += excess
        else:
            monthly_marginal = used * marginal_rate
            if compensation is not None:
                monthly_credit = -produced * compensation.feed_in_tariff_rate

        cum_fixed += monthly_fixed
        cum_marginal += monthly_marginal
        cum_credit += monthly_credit
        entries.append(
            MonthlyLedgerEntry(
                month=month + 1,
                consumption=used,
                production=produced,
                fixed_charge=monthly_fixed,
                marginal_charge=monthly_marginal,
                pv_credit=monthly_credit,
                banked_excess=excess,
                cumulative_fixed=cum_fixed,
                cumulative_marginal=cum_marginal,
                cumulative_pv_credit=cum_credit,
            )
        )

    true_up = 0.0
    if net_metering and not retail_sellback:
        true_up = -banked_kwh * compensation.sellback_rate

    return FuelBill(
        fuel_type=fuel_type,
        monthly=tuple(entries),
        annual_fixed=cum_fixed,
        annual_marginal=cum_marginal,
        annual_pv_credit=cum_credit + true_up,
        true_up_credit=true_up,
    )


def calculate_simple_bills(
    scenario_name: str,
    monthly: Mapping[FuelKey, FuelTimeSeries],
    rates: Mapping[FuelType, ResolvedRate],
    period: SimulationPeriod,
    compensation: PVCompensation,
    fuel_types: Optional[Iterable[FuelType]] = None,
) -> ScenarioBill:
    """
    Bill every fuel in ``fuel_types`` (default: every fuel with a resolved rate).

    Raises RateResolutionError listing every used fuel without a marginal rate.
    """
    prorates = monthly_prorates(period)
    fuel_types = list(rates) if fuel_types is None else list(fuel_types)

    missing = []
    bills: Dict[FuelType, FuelBill] = {}
    for fuel_type in FuelType:
        if fuel_type not in fuel_types:
            continue
        consumption = monthly[(fuel_type, False)].values
        is_elec = fuel_type == FuelType.ELECTRICITY
        production = monthly[(fuel_type, True)].values if is_elec else None
        try:
            bills[fuel_type] = calculate_fuel_bill(
                fuel_type,
                consumption,
                rates[fuel_type],
                prorates,
                production=production,
                compensation=compensation if is_elec else None,
            )
        except RateResolutionError as e:
            missing.extend(e.messages)

    if missing:
        raise RateResolutionError(missing)

    log.debug("Scenario '%s' billed %d fuels", scenario_name, len(bills))
    return ScenarioBill(name=scenario_name, fuel_bills=bills)
