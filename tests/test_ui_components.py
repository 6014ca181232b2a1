"""Tests for the table and chart helpers behind the bill viewer."""

import numpy as np
import pytest

from bill_calculator import PVCompensation, calculate_fuel_bill
from models import FuelType, ScenarioBill
from rate_resolver import ResolvedRate
from ui_components import LEDGER_COLUMNS, ledger_frame, monthly_charges_figure, report_frame


def sample_bill():
    elec = calculate_fuel_bill(
        FuelType.ELECTRICITY,
        np.full(12, 100.0),
        ResolvedRate(FuelType.ELECTRICITY, 12.0, 0.1, 0.1),
        [1.0] * 12,
        production=np.full(12, 150.0),
        compensation=PVCompensation(),
    )
    propane = calculate_fuel_bill(
        FuelType.PROPANE,
        np.full(12, 10.0),
        ResolvedRate(FuelType.PROPANE, 0.0, 2.5, 2.5),
        [1.0] * 12,
    )
    return ScenarioBill("Default", {FuelType.ELECTRICITY: elec, FuelType.PROPANE: propane})


class TestLedgerFrame:
    def test_one_row_per_fuel_month(self):
        df = ledger_frame(sample_bill())
        assert list(df.columns) == LEDGER_COLUMNS
        assert len(df) == 24
        assert df["Month"].iloc[0] == "Jan"
        assert df.loc[df["Fuel"] == "Propane", "Marginal ($)"].sum() == pytest.approx(300.0)
        assert df.loc[df["Fuel"] == "Electricity", "Banked Excess (kWh)"].sum() == pytest.approx(600.0)

    def test_empty_bill(self):
        df = ledger_frame(ScenarioBill("Empty", {}))
        assert df.empty
        assert list(df.columns) == LEDGER_COLUMNS


class TestReportFrame:
    def test_keeps_order_and_rounds(self):
        df = report_frame({"A: Total ($)": 10.126, "A: Propane: Total ($)": 10.126})
        assert df["Item"].tolist() == ["A: Total ($)", "A: Propane: Total ($)"]
        assert df["Value ($)"].tolist() == [10.13, 10.13]


class TestMonthlyChargesFigure:
    def test_one_trace_per_fuel(self):
        fig = monthly_charges_figure(sample_bill())
        assert {trace.name for trace in fig.data} == {"Electricity", "Propane"}
        assert fig.layout.barmode == "relative"
        assert "Default" in fig.layout.title.text
