# Project: Utility Bills: Streamlit App (annual utility bills from simulated energy use)

# app.py
from __future__ import annotations

import io
import logging
import os
import tempfile

import pandas as pd
import streamlit as st

from data_connectors import DataConnectors
from eia_client import EIA
from exceptions import UtilityBillError
from models import (
    Building,
    FuelType,
    PVCompensationType,
    PVSystem,
    SellbackRateType,
    SimulationPeriod,
    UtilityBillScenario,
    DEFAULT_CALENDAR_YEAR,
    FUEL_KEY_PREFIXES,
)
from rate_resolver import lookup_rates
from rate_tables import data_dir, load_rate_tables, refresh_average_rates
from report_writer import write_bill_report
from scenarios import run_bills
from ui_components import ledger_frame, monthly_charges_figure, note, report_frame, two_col_metrics

log = logging.getLogger(__name__)

# ---------------------------------
# App State / Navigation
# ---------------------------------

PAGES = {
    "Utility Bills": "bills",
    "Rate Lookup": "rates",
    "Refresh Rates (EIA)": "eia",
}


def _init_state():
    if "page" not in st.session_state:
        st.session_state.page = "bills"


def sidebar_building() -> Building:
    tables = load_rate_tables()
    with st.sidebar:
        st.markdown("###  Navigate features")
        labels = list(PAGES.keys())
        current = list(PAGES.values()).index(st.session_state.page)
        choice = st.radio("Page", labels, index=current, label_visibility="collapsed")
        st.session_state.page = PAGES[choice]

        st.markdown("---")
        st.markdown("###  Building")
        states = ["US"] + list(tables.state_codes)
        state = st.selectbox("State", states, index=0)
        year = st.number_input("Calendar year", 1900, 2100, DEFAULT_CALENDAR_YEAR, step=1)
        pv_kw = st.number_input("PV capacity (kW)", 0.0, 1000.0, 0.0, step=0.5)

    return Building(
        state_code=state,
        simulation_period=SimulationPeriod(calendar_year=int(year)),
        pv_systems=[PVSystem(pv_kw)] if pv_kw > 0 else [],
    )


def _optional(value: float):
    # 0 in a number input means "use the default or auto rate"
    return None if not value else float(value)


def scenario_editor() -> UtilityBillScenario:
    with st.expander("Scenario", expanded=True):
        name = st.text_input("Scenario name", "Default")
        rates = {}
        cols = st.columns(2)
        for i, fuel_type in enumerate(FuelType):
            with cols[i % 2]:
                fixed = st.number_input(
                    f"{fuel_type.value} fixed charge ($/month, 0 = default)",
                    0.0, 1000.0, 0.0, key=f"fixed_{fuel_type.name}",
                )
                marginal = st.number_input(
                    f"{fuel_type.value} marginal rate ($/{fuel_type.units}, 0 = auto)",
                    0.0, 100.0, 0.0, format="%.4f", key=f"marginal_{fuel_type.name}",
                )
            rates[f"{FUEL_KEY_PREFIXES[fuel_type]}_fixed_charge"] = _optional(fixed)
            rates[f"{FUEL_KEY_PREFIXES[fuel_type]}_marginal_rate"] = _optional(marginal)

        st.markdown("**PV compensation**")
        comp = st.selectbox("Compensation type", [t.value for t in PVCompensationType])
        sellback_type = st.selectbox(
            "Annual excess sellback rate type", [t.value for t in SellbackRateType]
        )
        sellback = st.number_input("Sellback rate ($/kWh, 0 = default)", 0.0, 10.0, 0.0, format="%.4f")
        fit = st.number_input("Feed-in tariff rate ($/kWh, 0 = default)", 0.0, 10.0, 0.0, format="%.4f")
        fee_per_kw = st.number_input("Grid connection fee ($/kW/month)", 0.0, 100.0, 0.0)
        fee_flat = st.number_input("Grid connection fee ($/month)", 0.0, 1000.0, 0.0)

    return UtilityBillScenario.from_dict(
        {
            "name": name,
            **rates,
            "pv_compensation_type": comp,
            "pv_net_metering_annual_excess_sellback_rate_type": sellback_type,
            "pv_net_metering_annual_excess_sellback_rate": _optional(sellback),
            "pv_feed_in_tariff_rate": _optional(fit),
            "pv_monthly_grid_connection_fee_dollars_per_kw": _optional(fee_per_kw),
            "pv_monthly_grid_connection_fee_dollars": _optional(fee_flat),
        }
    )


# ---------------------------------
# Pages
# ---------------------------------

def page_bills(building: Building):
    st.header("Utility Bills")
    st.caption(
        "Upload the simulation's timeseries CSV (columns like `ELECTRICITY:UNIT_1 [J](Hourly)`) "
        "and get annual bills per fuel, with fixed, marginal and PV credit charges."
    )

    upload = st.file_uploader("Simulation output (CSV)", type=["csv"])
    building.scenarios = [scenario_editor()]

    if upload is None:
        note("Upload a simulation CSV to calculate bills.")
        return

    if not st.button("Calculate bills", type="primary"):
        return

    try:
        series = DataConnectors.timeseries_from_frame(pd.read_csv(upload))
        if not series:
            st.error("No fuel columns found in the uploaded file.")
            return
        length = len(next(iter(series.values())))
        tph = DataConnectors.infer_timesteps_per_hour(length, building.simulation_period)
        result = run_bills(building, series, timesteps_per_hour=tph)
    except (UtilityBillError, ValueError) as e:
        log.error("Bill calculation failed: %s", e)
        st.error(str(e))
        return

    for warning in result.warnings:
        st.warning(warning)
    for scenario, messages in result.errors.items():
        for message in messages:
            st.error(f"{scenario}: {message}")

    if not result.has_output:
        note("No bills were produced.")
        return

    for bill in result.scenario_bills:
        elec = bill.fuel_bills.get(FuelType.ELECTRICITY)
        two_col_metrics(
            [("Annual total", f"${bill.total:,.2f}")],
            [("PV credit", f"${(elec.annual_pv_credit if elec else 0.0):,.2f}")],
        )
        st.plotly_chart(monthly_charges_figure(bill), width="stretch")
        with st.expander("Monthly ledger"):
            st.dataframe(ledger_frame(bill), width="stretch")

    st.dataframe(report_frame(result.rows), width="stretch", hide_index=True)

    with tempfile.TemporaryDirectory() as tmp:
        path = write_bill_report(result.rows, os.path.join(tmp, "results_bills.csv"))
        with open(path, "rb") as f:
            st.download_button("Download results_bills.csv", f.read(), "results_bills.csv", "text/csv")


def page_rates(building: Building):
    st.header("Rate Lookup")
    st.caption("Preview the marginal and average rates used when a scenario leaves them on auto.")

    lines = lookup_rates(
        building.state_code, None, None,
        building.state_code, None, None,
        building.state_code, building.state_code,
    )
    rows = []
    for line in lines:
        fuel, marginal, average = line.rsplit(" ", 2)
        rows.append({"Fuel": fuel, "Marginal": marginal, "Average": average})
    st.dataframe(pd.DataFrame(rows), width="stretch", hide_index=True)


def page_eia():
    st.header("Refresh Rates (EIA)")
    st.caption(
        "Pull state residential electricity prices from the EIA v2 `electricity/retail-sales` "
        "dataset and write a refreshed copy of the average rate table."
    )

    client = EIA()
    if not client.available():
        st.error("No EIA_API_KEY available. Add it to `.streamlit/secrets.toml` or the environment.")
        return

    tables = load_rate_tables()
    year = st.number_input("Year", 2001, 2100, 2022, step=1)
    states = st.multiselect("States", list(tables.state_codes), default=list(tables.state_codes))
    target = st.text_input("Write refreshed table to", str(data_dir()))

    if st.button("Fetch from EIA", type="primary"):
        df = client.fetch_average_rates(int(year), states)
        if df is None:
            st.error(client.last_error or "EIA request failed.")
            return
        st.dataframe(df, width="stretch", hide_index=True)
        try:
            path = refresh_average_rates(df, target_dir=target)
        except (OSError, ValueError) as e:
            st.error(str(e))
            return
        st.success(f"Wrote {len(df)} electricity rates to {path}")

        buf = io.StringIO()
        df.to_csv(buf, index=False)
        st.download_button("Download fetched rows", buf.getvalue(), "eia_rates.csv", "text/csv")


def _route(building: Building):
    page = st.session_state.page
    if page == "bills":
        page_bills(building)
    elif page == "rates":
        page_rates(building)
    elif page == "eia":
        page_eia()


# ---------------------------------
# Entry
# ---------------------------------

def main():
    st.set_page_config(page_title="Utility Bills", layout="wide")
    _init_state()
    building = sidebar_building()
    _route(building)


if __name__ == "__main__":
    main()
