# models.py
from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


class FuelType(str, Enum):
    ELECTRICITY = "Electricity"
    NATURAL_GAS = "Natural Gas"
    FUEL_OIL = "Fuel Oil"
    PROPANE = "Propane"
    WOOD_CORD = "Wood Cord"
    WOOD_PELLETS = "Wood Pellets"
    COAL = "Coal"

    @property
    def units(self) -> str:
        """Native unit used for monthly aggregation and rates."""
        return FUEL_UNITS[self]

    @property
    def label(self) -> str:
        """Lower-case name used in warning messages."""
        return self.value.lower()


FUEL_UNITS: Dict[FuelType, str] = {
    FuelType.ELECTRICITY: "kWh",
    FuelType.NATURAL_GAS: "therm",
    FuelType.FUEL_OIL: "gal",
    FuelType.PROPANE: "gal",
    FuelType.WOOD_CORD: "kBtu",
    FuelType.WOOD_PELLETS: "kBtu",
    FuelType.COAL: "kBtu",
}

# Prefix of the flat scenario keys, e.g. "elec_fixed_charge", "wood_marginal_rate"
FUEL_KEY_PREFIXES: Dict[FuelType, str] = {
    FuelType.ELECTRICITY: "elec",
    FuelType.NATURAL_GAS: "natural_gas",
    FuelType.FUEL_OIL: "fuel_oil",
    FuelType.PROPANE: "propane",
    FuelType.WOOD_CORD: "wood",
    FuelType.WOOD_PELLETS: "wood_pellets",
    FuelType.COAL: "coal",
}

DEFAULT_FIXED_CHARGES: Dict[FuelType, float] = {
    FuelType.ELECTRICITY: 12.0,  # $/month
    FuelType.NATURAL_GAS: 12.0,
    FuelType.FUEL_OIL: 0.0,
    FuelType.PROPANE: 0.0,
    FuelType.WOOD_CORD: 0.0,
    FuelType.WOOD_PELLETS: 0.0,
    FuelType.COAL: 0.0,
}

# Fuels without a regional price dataset ($/kBtu)
DEFAULT_MARGINAL_RATES: Dict[FuelType, float] = {
    FuelType.WOOD_CORD: 0.015,
    FuelType.WOOD_PELLETS: 0.015,
    FuelType.COAL: 0.015,
}

DEFAULT_SELLBACK_RATE = 0.03  # $/kWh
DEFAULT_FEED_IN_TARIFF_RATE = 0.12  # $/kWh
DEFAULT_CALENDAR_YEAR = 2007


class PVCompensationType(str, Enum):
    NET_METERING = "NetMetering"
    FEED_IN_TARIFF = "FeedInTariff"


class SellbackRateType(str, Enum):
    USER_SPECIFIED = "User-Specified"
    RETAIL_ELECTRICITY_COST = "Retail Electricity Cost"


class BillType(str, Enum):
    SIMPLE = "Simple"
    DETAILED = "Detailed"


class UtilityRateType(str, Enum):
    AUTOSELECT = "Autoselect"
    USER_SPECIFIED = "User-Specified"


# ---------------------------------
# Building inputs
# ---------------------------------

@dataclass(frozen=True)
class SimulationPeriod:
    begin_month: int = 1
    begin_day: int = 1
    end_month: int = 12
    end_day: int = 31
    calendar_year: int = DEFAULT_CALENDAR_YEAR

    def __post_init__(self):
        for month, day in ((self.begin_month, self.begin_day), (self.end_month, self.end_day)):
            if not 1 <= month <= 12:
                raise ValueError(f"Invalid simulation month: {month}")
            if not 1 <= day <= self.days_in_month(month):
                raise ValueError(f"Invalid simulation day: {month}/{day} in {self.calendar_year}")
        if self.begin_date > self.end_date:
            raise ValueError("Simulation begin date must not be after the end date.")

    def days_in_month(self, month: int) -> int:
        return calendar.monthrange(self.calendar_year, month)[1]

    @property
    def begin_date(self) -> date:
        return date(self.calendar_year, self.begin_month, self.begin_day)

    @property
    def end_date(self) -> date:
        return date(self.calendar_year, self.end_month, self.end_day)

    @property
    def num_days(self) -> int:
        return (self.end_date - self.begin_date).days + 1


@dataclass(frozen=True)
class PVSystem:
    max_power_output_kw: float

    def __post_init__(self):
        if self.max_power_output_kw < 0:
            raise ValueError("PV capacity must be non-negative.")


@dataclass(frozen=True)
class FuelRateOverride:
    """User rate inputs for one fuel; None means use the default or auto rate."""

    fixed_charge: Optional[float] = None  # $/month
    marginal_rate: Optional[float] = None  # $ per native unit

    @property
    def is_set(self) -> bool:
        return self.fixed_charge is not None or self.marginal_rate is not None


@dataclass
class UtilityBillScenario:
    name: str
    rates: Dict[FuelType, FuelRateOverride] = field(default_factory=dict)
    pv_compensation_type: PVCompensationType = PVCompensationType.NET_METERING
    pv_net_metering_annual_excess_sellback_rate_type: SellbackRateType = SellbackRateType.USER_SPECIFIED
    pv_net_metering_annual_excess_sellback_rate: Optional[float] = None
    pv_feed_in_tariff_rate: Optional[float] = None
    pv_monthly_grid_connection_fee_dollars_per_kw: Optional[float] = None
    pv_monthly_grid_connection_fee_dollars: Optional[float] = None

    def rate_override(self, fuel_type: FuelType) -> FuelRateOverride:
        return self.rates.get(fuel_type, FuelRateOverride())

    @property
    def sellback_rate(self) -> float:
        if self.pv_net_metering_annual_excess_sellback_rate is None:
            return DEFAULT_SELLBACK_RATE
        return self.pv_net_metering_annual_excess_sellback_rate

    @property
    def feed_in_tariff_rate(self) -> float:
        if self.pv_feed_in_tariff_rate is None:
            return DEFAULT_FEED_IN_TARIFF_RATE
        return self.pv_feed_in_tariff_rate

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UtilityBillScenario":
        """Build a scenario from flat keys such as ``elec_fixed_charge``."""
        rates: Dict[FuelType, FuelRateOverride] = {}
        for fuel_type, prefix in FUEL_KEY_PREFIXES.items():
            override = FuelRateOverride(
                fixed_charge=_optional_float(data.get(f"{prefix}_fixed_charge")),
                marginal_rate=_optional_float(data.get(f"{prefix}_marginal_rate")),
            )
            if override.is_set:
                rates[fuel_type] = override

        kwargs: Dict[str, Any] = {}
        if data.get("pv_compensation_type"):
            kwargs["pv_compensation_type"] = PVCompensationType(data["pv_compensation_type"])
        if data.get("pv_net_metering_annual_excess_sellback_rate_type"):
            kwargs["pv_net_metering_annual_excess_sellback_rate_type"] = SellbackRateType(
                data["pv_net_metering_annual_excess_sellback_rate_type"]
            )
        for key in (
            "pv_net_metering_annual_excess_sellback_rate",
            "pv_feed_in_tariff_rate",
            "pv_monthly_grid_connection_fee_dollars_per_kw",
            "pv_monthly_grid_connection_fee_dollars",
        ):
            kwargs[key] = _optional_float(data.get(key))

        return cls(name=str(data["name"]), rates=rates, **kwargs)


@dataclass
class Building:
    state_code: str = "US"
    country: str = "USA"
    simulation_period: SimulationPeriod = field(default_factory=SimulationPeriod)
    pv_systems: List[PVSystem] = field(default_factory=list)
    scenarios: List[UtilityBillScenario] = field(default_factory=list)
    has_distribution_system_efficiency: bool = False

    @property
    def pv_capacity_kw(self) -> float:
        return sum(pv.max_power_output_kw for pv in self.pv_systems)


@dataclass(frozen=True)
class BillRunOptions:
    electricity_bill_type: BillType = BillType.SIMPLE
    electricity_utility_rate_type: UtilityRateType = UtilityRateType.AUTOSELECT
    electricity_utility_rate_path: Optional[str] = None
    output_format: str = "csv"


# ---------------------------------
# Ledger
# ---------------------------------

@dataclass(frozen=True)
class MonthlyLedgerEntry:
    month: int
    consumption: float
    production: float
    fixed_charge: float
    marginal_charge: float
    pv_credit: float
    banked_excess: float  # kWh carried to the annual true-up
    cumulative_fixed: float
    cumulative_marginal: float
    cumulative_pv_credit: float


@dataclass(frozen=True)
class FuelBill:
    fuel_type: FuelType
    monthly: Tuple[MonthlyLedgerEntry, ...]
    annual_fixed: float
    annual_marginal: float
    annual_pv_credit: float = 0.0
    true_up_credit: float = 0.0

    @property
    def annual_total(self) -> float:
        return self.annual_fixed + self.annual_marginal + self.annual_pv_credit


@dataclass(frozen=True)
class ScenarioBill:
    name: str
    fuel_bills: Mapping[FuelType, FuelBill]

    @property
    def total(self) -> float:
        return sum(bill.annual_total for bill in self.fuel_bills.values())


def _optional_float(val: Any) -> Optional[float]:
    """Treat missing values and empty strings as None."""
    return None if val in ("", None) else float(val)
