"""Tests for writing the bill report."""

import json

import pytest

from report_writer import default_output_path, nest_rows, read_bill_report, write_bill_report

ROWS = {
    "Default: Total ($)": 1514.4567,
    "Default: Electricity: Fixed ($)": 96.0,
    "Default: Electricity: Marginal ($)": 629.004,
    "Default: Electricity: PV Credit ($)": -0.001,
    "Default: Electricity: Total ($)": 725.003,
}


class TestWriteBillReport:
    def test_csv(self, tmp_path):
        path = write_bill_report(ROWS, default_output_path(tmp_path))
        assert path == tmp_path / "results_bills.csv"
        lines = path.read_text().splitlines()
        assert lines[0] == "Default: Total ($),1514.46"
        assert read_bill_report(path) == {
            "Default: Total ($)": 1514.46,
            "Default: Electricity: Fixed ($)": 96.0,
            "Default: Electricity: Marginal ($)": 629.0,
            "Default: Electricity: PV Credit ($)": 0.0,
            "Default: Electricity: Total ($)": 725.0,
        }

    def test_json(self, tmp_path):
        path = write_bill_report(ROWS, default_output_path(tmp_path, "json"), output_format="json")
        data = json.loads(path.read_text())
        assert data["Default"]["Total ($)"] == 1514.46
        assert data["Default"]["Electricity: Marginal ($)"] == 629.0

    def test_no_rows_writes_nothing(self, tmp_path):
        path = tmp_path / "results_bills.csv"
        assert write_bill_report({}, path) is None
        assert not path.exists()

    def test_unknown_format(self, tmp_path):
        with pytest.raises(ValueError):
            write_bill_report(ROWS, tmp_path / "out.xml", output_format="xml")

    def test_creates_output_directory(self, tmp_path):
        path = write_bill_report(ROWS, tmp_path / "run" / "results_bills.csv")
        assert path.exists()


class TestNestRows:
    def test_groups_by_scenario(self):
        nested = nest_rows({"A: Total ($)": 1.0, "B: Propane: Total ($)": 2.004})
        assert nested == {"A": {"Total ($)": 1.0}, "B": {"Propane: Total ($)": 2.0}}
