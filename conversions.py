# conversions.py
from __future__ import annotations

from typing import Dict

from exceptions import UnsupportedUnitError

# Energy units, expressed in joules
ENERGY_UNITS: Dict[str, float] = {
    "J": 1.0,
    "kJ": 1e3,
    "MJ": 1e6,
    "GJ": 1e9,
    "Wh": 3600.0,
    "kWh": 3.6e6,
    "MWh": 3.6e9,
    "Btu": 1055.05585262,
    "kBtu": 1.05505585262e6,
    "MBtu": 1.05505585262e9,  # million Btu
    "MMBtu": 1.05505585262e9,
    "therm": 1.05505585262e8,
}

# Volume units, expressed in cubic meters
VOLUME_UNITS: Dict[str, float] = {
    "m^3": 1.0,
    "m3": 1.0,
    "L": 1e-3,
    "gal": 0.003785411784,
    "gallon": 0.003785411784,
}

# Heat content of liquid fuels sold by the gallon (kBtu/gal)
HEAT_CONTENT_KBTU_PER_GAL: Dict[str, float] = {
    "Propane": 91.6,
    "Fuel Oil": 139.0,
}


def convert_value(value: float, from_unit: str, to_unit: str) -> float:
    """Convert ``value`` between two energy units or two volume units."""
    for table in (ENERGY_UNITS, VOLUME_UNITS):
        if from_unit in table and to_unit in table:
            return value * (table[from_unit] / table[to_unit])
    raise UnsupportedUnitError(from_unit, to_unit)


def energy_to_gallons(value: float, from_unit: str, fuel_name: str) -> float:
    """Convert an energy quantity of a liquid fuel to gallons via its heat content."""
    if fuel_name not in HEAT_CONTENT_KBTU_PER_GAL:
        raise UnsupportedUnitError(from_unit, "gal")
    return convert_value(value, from_unit, "kBtu") / HEAT_CONTENT_KBTU_PER_GAL[fuel_name]
