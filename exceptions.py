# exceptions.py
from __future__ import annotations

from typing import Iterable, List


class UtilityBillError(Exception):
    """Base class for errors raised while calculating utility bills."""


class ConfigurationError(UtilityBillError):
    """An unsupported or incomplete billing configuration."""


class RateResolutionError(UtilityBillError):
    """No usable marginal rate for one or more fuels in use.

    ``messages`` holds one line per fuel, e.g.
    ``"Could not find a marginal Electricity rate."``
    """

    def __init__(self, messages: Iterable[str]):
        self.messages: List[str] = list(messages)
        super().__init__(" ".join(self.messages))


class UnsupportedUnitError(UtilityBillError, ValueError):
    """No conversion path exists between two unit strings."""

    def __init__(self, from_unit: str, to_unit: str):
        self.from_unit = from_unit
        self.to_unit = to_unit
        super().__init__(f"Unit not supported: cannot convert '{from_unit}' to '{to_unit}'")
