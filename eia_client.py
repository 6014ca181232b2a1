# eia_client.py
from __future__ import annotations

import logging
import os
from typing import Optional, Dict, Any, Iterable, List

import requests
import pandas as pd
import streamlit as st

log = logging.getLogger(__name__)


class EIA:
    """
    Minimal EIA API client used to refresh the electricity rows of the
    reference rate table.

    v2 endpoint used:
      • electricity/retail-sales → state residential retail price (cents/kWh)

    Public attributes:
      • api_key
      • last_error
      • last_url

    Bill calculations never call this client; it only produces new rows for
    rate_tables.refresh_average_rates(...).
    """

    base_v2: str = "https://api.eia.gov/v2"

    def __init__(self, api_key: Optional[str] = None):
        # Prefer explicit key, then Streamlit secrets, then env var
        if api_key is None:
            try:
                api_key = st.secrets.get("EIA_API_KEY", None)
            except Exception:
                api_key = None
            if api_key is None:
                api_key = os.getenv("EIA_API_KEY")

        self.api_key: Optional[str] = api_key
        self.last_error: Optional[str] = None
        self.last_url: Optional[str] = None

    # ------------------------------------------------------------------
    # Basic helpers
    # ------------------------------------------------------------------
    def available(self) -> bool:
        """Return True if we have an API key configured."""
        return bool(self.api_key)

    @staticmethod
    def _normalize_v2_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        EIA v2 responses look like:
            { "response": { "total": ..., "data": [...] }, "request": {...}, ... }

        Some responses put 'total' and 'data' at the top level; return the
        object that actually holds them.
        """
        if isinstance(payload, dict) and "response" in payload and isinstance(
            payload["response"], dict
        ):
            return payload["response"]
        return payload

    def _get_v2(self, path: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Internal helper to call a v2 endpoint.

        path: "electricity/retail-sales/data" (no leading slash)
        params: EIA v2 request parameters (GET query)
        """
        self.last_error = None
        self.last_url = None

        if not self.available():
            self.last_error = "No EIA_API_KEY configured (in secrets.toml or environment)."
            return None

        url = f"{self.base_v2}/{path.lstrip('/')}"
        params = dict(params or {})
        params["api_key"] = self.api_key
        self.last_url = url

        try:
            resp = requests.get(url, params=params, timeout=20)

            if resp.status_code == 403:
                self.last_error = (
                    "EIA returned 403 Forbidden. The API key is invalid, not "
                    "activated for API v2, or has been revoked."
                )
                log.error("EIA 403 error. URL: %s", url)
                return None

            resp.raise_for_status()
            raw = resp.json()
        except (requests.RequestException, ValueError) as e:
            self.last_error = f"Exception calling EIA v2: {e}"
            log.error("EIA v2 error: %s\nURL: %s", e, url)
            return None

        data = self._normalize_v2_payload(raw)

        # EIA v2 often returns total=0 with 200 when filters don't match
        try:
            total = int(data.get("total", 0))
        except (TypeError, ValueError):
            total = 0

        if total == 0 or not data.get("data"):
            self.last_error = "No records returned from EIA for this selection."
            return None

        return data

    # ------------------------------------------------------------------
    # Retail prices
    # ------------------------------------------------------------------
    def fetch_retail_price(
        self,
        year: int,
        states: Iterable[str],
        sector: str = "RES",
    ) -> Optional[pd.DataFrame]:
        """
        Annual electricity retail price (cents/kWh) for one or more states.

        Returns:
            DataFrame with the EIA columns plus:
              • price_cents_per_kwh
              • price_usd_per_kwh
            or None if no rows or an error.
        """
        state_ids = [s.upper() for s in states]
        if not state_ids:
            self.last_error = "No state codes provided."
            return None

        params: Dict[str, Any] = {
            "frequency": "annual",
            "data[0]": "price",
            "facets[stateid][]": state_ids,
            "facets[sectorid][]": sector,
            "start": str(year),
            "end": str(year),
            "sort[0][column]": "period",
            "sort[0][direction]": "desc",
            "length": "5000",
        }

        raw = self._get_v2("electricity/retail-sales/data", params)
        if raw is None:
            return None

        df = pd.DataFrame(raw.get("data", []))
        if "price" not in df.columns:
            self.last_error = "EIA response has no 'price' column."
            return None

        # Handle "Not Available" and similar by coercing to NaN
        df["price_cents_per_kwh"] = pd.to_numeric(df["price"], errors="coerce")
        df = df.dropna(subset=["price_cents_per_kwh"])
        df["price_usd_per_kwh"] = df["price_cents_per_kwh"] / 100.0
        df.attrs["request_url"] = raw.get("requestUrl") or self.last_url
        return df

    def fetch_average_rates(self, year: int, states: Iterable[str]) -> Optional[pd.DataFrame]:
        """
        Residential electricity prices as rows of the reference rate table:
        jurisdiction, fuel_type, average_rate, units.
        """
        df = self.fetch_retail_price(year=year, states=states, sector="RES")
        if df is None:
            return None

        rows: List[Dict[str, Any]] = [
            {
                "jurisdiction": str(row["stateid"]).upper(),
                "fuel_type": "Electricity",
                "average_rate": float(row["price_usd_per_kwh"]),
                "units": "$/kWh",
            }
            for _, row in df.iterrows()
        ]
        if not rows:
            self.last_error = "No usable prices returned from EIA."
            return None
        return pd.DataFrame(rows).drop_duplicates(subset=["jurisdiction"], keep="first")
