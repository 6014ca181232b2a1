# timeseries.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd

from conversions import VOLUME_UNITS, convert_value, energy_to_gallons
from models import FuelType, SimulationPeriod

log = logging.getLogger(__name__)

FuelKey = Tuple[FuelType, bool]  # (fuel type, is_production)


@dataclass(frozen=True, eq=False)
class FuelTimeSeries:
    fuel_type: FuelType
    is_production: bool
    values: np.ndarray  # native units, one value per timestep (or per month once aggregated)

    @property
    def key(self) -> FuelKey:
        return (self.fuel_type, self.is_production)

    @property
    def total(self) -> float:
        return float(np.sum(self.values))


def fuel_keys() -> List[FuelKey]:
    """Every series a bill run expects: consumption for each fuel, plus PV production."""
    keys: List[FuelKey] = [(fuel_type, False) for fuel_type in FuelType]
    keys.append((FuelType.ELECTRICITY, True))
    return keys


def to_native_units(values: Sequence[float], from_unit: str, fuel_type: FuelType) -> np.ndarray:
    """Convert a raw simulation series (energy or volume) to the fuel's native unit."""
    arr = np.asarray(values, dtype=float)
    native = fuel_type.units
    if native == "gal" and from_unit not in VOLUME_UNITS:
        factor = energy_to_gallons(1.0, from_unit, fuel_type.value)
    else:
        factor = convert_value(1.0, from_unit, native)
    return arr * factor


def complete_series(series: Mapping[FuelKey, Sequence[float]]) -> Dict[FuelKey, np.ndarray]:
    """
    Fill in every expected fuel key.

    Fuels missing from the simulation output become all-zero series of the
    same length as the fuels that are present. All series must share one
    timestep count.
    """
    for fuel_type, is_production in series:
        if is_production and fuel_type != FuelType.ELECTRICITY:
            raise ValueError(f"Only electricity can have production, got {fuel_type.value}.")

    arrays = {key: np.asarray(values, dtype=float) for key, values in series.items()}
    lengths = {arr.size for arr in arrays.values()}
    if not lengths:
        raise ValueError("No simulation output time series were provided.")
    if len(lengths) > 1:
        raise ValueError(f"Fuel time series have different lengths: {sorted(lengths)}")
    num_timesteps = lengths.pop()

    return {
        key: arrays[key] if key in arrays else np.zeros(num_timesteps)
        for key in fuel_keys()
    }


def aggregate_monthly(
    series: Mapping[FuelKey, Sequence[float]],
    period: SimulationPeriod,
    timesteps_per_hour: int = 1,
) -> Dict[FuelKey, FuelTimeSeries]:
    """
    Sum each per-timestep series into 12 calendar-month values.

    The series start at the simulation begin date; months outside the
    simulation period come out as zero.
    """
    if timesteps_per_hour < 1 or 60 % timesteps_per_hour != 0:
        raise ValueError(f"Unsupported timesteps per hour: {timesteps_per_hour}")

    completed = complete_series(series)
    num_timesteps = next(iter(completed.values())).size
    expected = period.num_days * 24 * timesteps_per_hour
    if num_timesteps != expected:
        raise ValueError(
            f"Expected {expected} timesteps for {period.num_days} simulated days "
            f"at {timesteps_per_hour}/hour, got {num_timesteps}."
        )

    index = pd.date_range(
        start=pd.Timestamp(period.begin_date),
        periods=num_timesteps,
        freq=pd.Timedelta(minutes=60 // timesteps_per_hour),
    )
    months = index.month

    monthly: Dict[FuelKey, FuelTimeSeries] = {}
    for (fuel_type, is_production), values in completed.items():
        sums = (
            pd.Series(values, index=index)
            .groupby(months)
            .sum()
            .reindex(range(1, 13), fill_value=0.0)
        )
        monthly[(fuel_type, is_production)] = FuelTimeSeries(
            fuel_type, is_production, sums.to_numpy(dtype=float)
        )

    log.debug("Aggregated %d series of %d timesteps to monthly values", len(monthly), num_timesteps)
    return monthly
