# ui_components.py
from __future__ import annotations

import calendar
from typing import Iterable, Mapping, Tuple

import pandas as pd
import plotly.express as px
import streamlit as st

from models import ScenarioBill

LEDGER_COLUMNS = [
    "Fuel",
    "Month",
    "Consumption",
    "Production",
    "Fixed ($)",
    "Marginal ($)",
    "PV Credit ($)",
    "Banked Excess (kWh)",
]


def report_frame(rows: Mapping[str, float]) -> pd.DataFrame:
    """Report rows as a two-column table, in report order, rounded for display."""
    return pd.DataFrame(
        {"Item": list(rows.keys()), "Value ($)": [round(float(v), 2) for v in rows.values()]}
    )


def ledger_frame(bill: ScenarioBill) -> pd.DataFrame:
    """One row per fuel per month from a scenario's monthly ledgers."""
    records = []
    for fuel_type, fuel_bill in bill.fuel_bills.items():
        for entry in fuel_bill.monthly:
            records.append(
                {
                    "Fuel": fuel_type.value,
                    "Month": calendar.month_abbr[entry.month],
                    "Consumption": entry.consumption,
                    "Production": entry.production,
                    "Fixed ($)": entry.fixed_charge,
                    "Marginal ($)": entry.marginal_charge,
                    "PV Credit ($)": entry.pv_credit,
                    "Banked Excess (kWh)": entry.banked_excess,
                }
            )
    return pd.DataFrame.from_records(records, columns=LEDGER_COLUMNS)


def monthly_charges_figure(bill: ScenarioBill):
    """Stacked monthly charges per fuel (fixed + marginal + credits)."""
    df = ledger_frame(bill)
    df["Charges ($)"] = df["Fixed ($)"] + df["Marginal ($)"] + df["PV Credit ($)"]
    fig = px.bar(
        df,
        x="Month",
        y="Charges ($)",
        color="Fuel",
        title=f"{bill.name}: monthly charges",
        category_orders={"Month": list(calendar.month_abbr)[1:]},
    )
    fig.update_layout(barmode="relative", yaxis_title="$", xaxis_title=None)
    return fig


def two_col_metrics(left_items: Iterable[Tuple[str, str]], right_items: Iterable[Tuple[str, str]]):
    c1, c2 = st.columns(2)
    with c1:
        for k, v in left_items:
            st.metric(k, v)
    with c2:
        for k, v in right_items:
            st.metric(k, v)


def note(msg: str):
    st.info(msg)
