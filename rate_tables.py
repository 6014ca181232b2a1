# rate_tables.py
"""
Read-only reference tables used for automatic rate lookup.

Three CSV files under ``data/`` (or ``$UTILITY_BILLS_DATA_DIR``):

  • average_rates.csv          jurisdiction, fuel_type, average_rate, units
  • household_consumption.csv  jurisdiction, electricity_kwh, natural_gas_therm
  • jurisdictions.csv          state_code, state_name, census_division, padd

Jurisdiction keys in ``average_rates.csv`` are state codes, region names
(census divisions or PADD regions) or ``US`` for the national average.
Tables are loaded once per directory and never mutated afterwards.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

import pandas as pd

from models import FuelType

log = logging.getLogger(__name__)

DATASET_VERSION = "2022.1"
NATIONAL_CODE = "US"
DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "data"

AVERAGE_RATES_FILE = "average_rates.csv"
HOUSEHOLD_CONSUMPTION_FILE = "household_consumption.csv"
JURISDICTIONS_FILE = "jurisdictions.csv"

RATE_COLUMNS = ["jurisdiction", "fuel_type", "average_rate", "units"]


@dataclass(frozen=True)
class Jurisdiction:
    state_code: str
    state_name: str
    census_division: str
    padd: str


@dataclass(frozen=True)
class RateTables:
    average_rates: Mapping[Tuple[FuelType, str], float]
    household_consumption: Mapping[Tuple[FuelType, str], float]
    jurisdictions: Mapping[str, Jurisdiction]
    version: str = DATASET_VERSION

    def average_rate(self, fuel_type: FuelType, jurisdiction: str) -> Optional[float]:
        return self.average_rates.get((fuel_type, jurisdiction))

    def household_annual_consumption(self, fuel_type: FuelType, state_code: str) -> Optional[float]:
        """Typical annual household use of a fuel, falling back to the national figure."""
        value = self.household_consumption.get((fuel_type, state_code))
        if value is None:
            value = self.household_consumption.get((fuel_type, NATIONAL_CODE))
        return value

    def jurisdiction(self, state_code: str) -> Optional[Jurisdiction]:
        return self.jurisdictions.get(state_code)

    @property
    def state_codes(self) -> Tuple[str, ...]:
        return tuple(self.jurisdictions)


def data_dir() -> Path:
    env_dir = os.getenv("UTILITY_BILLS_DATA_DIR")
    return Path(env_dir) if env_dir else DEFAULT_DATA_DIR


def load_rate_tables(directory: str | os.PathLike | None = None) -> RateTables:
    """Load the reference tables (cached per directory)."""
    return _load_rate_tables(str(Path(directory) if directory else data_dir()))


@lru_cache(maxsize=None)
def _load_rate_tables(directory: str) -> RateTables:
    path = Path(directory)
    log.debug("Loading rate tables from %s", path)

    df_rates = pd.read_csv(path / AVERAGE_RATES_FILE, dtype={"jurisdiction": str})
    df_rates = df_rates.dropna(subset=["average_rate"])
    average_rates = {
        (FuelType(row.fuel_type), row.jurisdiction): float(row.average_rate)
        for row in df_rates.itertuples(index=False)
    }

    df_hh = pd.read_csv(path / HOUSEHOLD_CONSUMPTION_FILE, dtype={"jurisdiction": str})
    household = {}
    for row in df_hh.itertuples(index=False):
        if pd.notna(row.electricity_kwh):
            household[(FuelType.ELECTRICITY, row.jurisdiction)] = float(row.electricity_kwh)
        if pd.notna(row.natural_gas_therm):
            household[(FuelType.NATURAL_GAS, row.jurisdiction)] = float(row.natural_gas_therm)

    df_juris = pd.read_csv(path / JURISDICTIONS_FILE, dtype=str)
    jurisdictions = {
        row.state_code: Jurisdiction(row.state_code, row.state_name, row.census_division, row.padd)
        for row in df_juris.itertuples(index=False)
    }

    return RateTables(
        average_rates=MappingProxyType(average_rates),
        household_consumption=MappingProxyType(household),
        jurisdictions=MappingProxyType(jurisdictions),
    )


def refresh_average_rates(
    new_rows: pd.DataFrame,
    source_dir: str | os.PathLike | None = None,
    target_dir: str | os.PathLike | None = None,
) -> Path:
    """
    Write a refreshed copy of ``average_rates.csv`` into ``target_dir``.

    Rows in ``new_rows`` (same columns as the CSV) replace existing rows with
    the same (jurisdiction, fuel_type); other rows are kept. The source file
    is left untouched.
    """
    source = Path(source_dir) if source_dir else data_dir()
    target = Path(target_dir) if target_dir else source

    missing = [c for c in RATE_COLUMNS if c not in new_rows.columns]
    if missing:
        raise ValueError(f"Refresh rows are missing columns: {missing}")

    df_old = pd.read_csv(source / AVERAGE_RATES_FILE, dtype={"jurisdiction": str})
    df_new = new_rows[RATE_COLUMNS]
    df = pd.concat([df_old, df_new], ignore_index=True)
    df = df.drop_duplicates(subset=["jurisdiction", "fuel_type"], keep="last")

    target.mkdir(parents=True, exist_ok=True)
    out_path = target / AVERAGE_RATES_FILE
    df.to_csv(out_path, index=False)
    log.info("Wrote %d rate rows to %s", len(df), out_path)

    # Tables already handed out stay as they were; later loads see the new file
    _load_rate_tables.cache_clear()
    return out_path
