# proration.py
from __future__ import annotations

import calendar
from typing import List

from models import SimulationPeriod


def num_days_in_months(year: int) -> List[int]:
    """Days in each month of ``year`` (February has 29 in leap years)."""
    return [calendar.monthrange(year, month)[1] for month in range(1, 13)]


def calculate_monthly_prorate(period: SimulationPeriod, month: int) -> float:
    """
    Fraction of ``month`` (1-12) that falls inside the simulation period.

    Used to scale that month's fixed charge; marginal charges follow the
    metered consumption and are never prorated.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")

    begin_month, begin_day = period.begin_month, period.begin_day
    end_month, end_day = period.end_month, period.end_day
    days_in_month = period.days_in_month(month)

    if month < begin_month or month > end_month:
        return 0.0
    if month == begin_month and month == end_month:
        return (end_day - begin_day + 1) / days_in_month
    if month == begin_month:
        return (days_in_month - begin_day + 1) / days_in_month
    if month == end_month:
        return end_day / days_in_month
    return 1.0


def monthly_prorates(period: SimulationPeriod) -> List[float]:
    return [calculate_monthly_prorate(period, month) for month in range(1, 13)]
