# data_connectors.py
from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from models import Building, FuelType, PVSystem, SimulationPeriod, UtilityBillScenario
from timeseries import FuelKey, to_native_units

log = logging.getLogger(__name__)

# "ELECTRICITY:UNIT_1 [J](Hourly)" -> name, unit, frequency
_COLUMN_RE = re.compile(r"^\s*(?P<name>.+?)\s*\[(?P<unit>[^\]]+)\]\s*\((?P<freq>[^)]+)\)\s*$")

# Checked in order; first keyword found in the upper-cased column name wins
_COLUMN_FUELS: List[Tuple[str, FuelKey]] = [
    ("PV:", (FuelType.ELECTRICITY, True)),
    ("PROPANE", (FuelType.PROPANE, False)),
    ("FUELOIL", (FuelType.FUEL_OIL, False)),
    ("FUEL OIL", (FuelType.FUEL_OIL, False)),
    ("WOODPELLETS", (FuelType.WOOD_PELLETS, False)),
    ("WOOD PELLETS", (FuelType.WOOD_PELLETS, False)),
    ("WOOD", (FuelType.WOOD_CORD, False)),
    ("COAL", (FuelType.COAL, False)),
    ("GAS", (FuelType.NATURAL_GAS, False)),
    ("ELECTRICITY", (FuelType.ELECTRICITY, False)),
]


class DataConnectors:
    """Inputs from the building description and the energy simulation."""

    @staticmethod
    def building_from_dict(data: Mapping[str, Any]) -> Building:
        period = SimulationPeriod(**data.get("simulation_period", {}))
        pv_systems = [PVSystem(float(pv["max_power_output_kw"])) for pv in data.get("pv_systems", [])]
        scenarios = [
            UtilityBillScenario.from_dict(s) for s in data.get("utility_bill_scenarios", [])
        ]
        return Building(
            state_code=str(data.get("state_code", "US")).upper(),
            country=str(data.get("country", "USA")).upper(),
            simulation_period=period,
            pv_systems=pv_systems,
            scenarios=scenarios,
            has_distribution_system_efficiency=bool(
                data.get("has_distribution_system_efficiency", False)
            ),
        )

    @staticmethod
    def load_building(path: str | os.PathLike) -> Building:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return DataConnectors.building_from_dict(data)

    @staticmethod
    def column_fuel(column: str) -> Optional[Tuple[FuelKey, str]]:
        """Map a simulation output column to ((fuel, is_production), unit), or None."""
        match = _COLUMN_RE.match(column)
        if not match:
            return None
        name = match.group("name").upper()
        for keyword, key in _COLUMN_FUELS:
            if keyword in name:
                return key, match.group("unit").strip()
        return None

    @staticmethod
    def timeseries_from_frame(df: pd.DataFrame) -> Dict[FuelKey, np.ndarray]:
        """Convert simulation output columns to native-unit series; same-fuel columns are summed."""
        series: Dict[FuelKey, np.ndarray] = {}
        for column in df.columns:
            mapped = DataConnectors.column_fuel(str(column))
            if mapped is None:
                log.debug("Skipping simulation output column '%s'", column)
                continue
            key, unit = mapped
            values = to_native_units(pd.to_numeric(df[column]).to_numpy(), unit, key[0])
            series[key] = series[key] + values if key in series else values
        return series

    @staticmethod
    def load_timeseries_csv(path: str | os.PathLike) -> Dict[FuelKey, np.ndarray]:
        return DataConnectors.timeseries_from_frame(pd.read_csv(path))

    @staticmethod
    def infer_timesteps_per_hour(num_timesteps: int, period: SimulationPeriod) -> int:
        hours = period.num_days * 24
        if num_timesteps == 0 or num_timesteps % hours != 0:
            raise ValueError(
                f"{num_timesteps} timesteps do not cover {period.num_days} simulated days evenly."
            )
        return num_timesteps // hours
