# report_writer.py
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

import pandas as pd

log = logging.getLogger(__name__)

OUTPUT_FORMATS = ("csv", "json")
REPORT_BASENAME = "results_bills"


def _display(value: float) -> float:
    # adding 0.0 turns -0.0 into 0.0
    return round(float(value), 2) + 0.0


def default_output_path(output_dir: str | os.PathLike, output_format: str = "csv") -> Path:
    return Path(output_dir) / f"{REPORT_BASENAME}.{output_format}"


def nest_rows(rows: Mapping[str, float]) -> Dict[str, Dict[str, float]]:
    """Group ``"<Scenario>: <rest>"`` keys by scenario name for the JSON report."""
    nested: Dict[str, Dict[str, float]] = {}
    for key, value in rows.items():
        scenario, _, rest = key.partition(": ")
        nested.setdefault(scenario, {})[rest] = _display(value)
    return nested


def write_bill_report(
    rows: Mapping[str, float],
    output_path: str | os.PathLike,
    output_format: str = "csv",
) -> Optional[Path]:
    """
    Write the bill rows; returns the path written.

    With no rows (no scenarios, or every scenario failed) nothing is
    written and None is returned.
    """
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"Unsupported output format '{output_format}'; use one of {OUTPUT_FORMATS}.")

    path = Path(output_path)
    if not rows:
        log.info("No utility bill results; %s not written.", path)
        return None

    path.parent.mkdir(parents=True, exist_ok=True)
    if output_format == "csv":
        series = pd.Series({key: _display(value) for key, value in rows.items()})
        series.to_csv(path, header=False)
    else:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(nest_rows(rows), f, indent=2)

    log.info("Wrote %d utility bill rows to %s", len(rows), path)
    return path


def read_bill_report(path: str | os.PathLike) -> Dict[str, float]:
    """Read a CSV bill report back into ``{key: value}``."""
    df = pd.read_csv(path, header=None, names=["key", "value"])
    return {str(k).strip(): float(v) for k, v in zip(df["key"], df["value"])}
