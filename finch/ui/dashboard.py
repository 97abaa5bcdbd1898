"""
Dashboard page: aging tables, cash snapshot, runway what-if, and anomalies.
"""

from datetime import date
from typing import Callable

import streamlit as st
from loguru import logger

from finch.core.queries import QueryError
from finch.ui.components import money, render_rows_table, to_float, to_int
from finch.ui.state import API_BASE, get_query_client


def render_dashboard() -> None:
    """
    Render the dashboard page.
    """
    st.header("📊 Dashboard")

    company_id = st.session_state.company_id
    client = get_query_client()

    c1, c2, c3 = st.columns(3)

    # ── Aging params ───────────────────────────────────────────
    with c1:
        with st.container(border=True):
            st.subheader("Aging Params")
            a, b = st.columns(2)
            min_days = a.text_input("Min days", value="30")
            limit = b.text_input("Limit", value="10")
            b1, b2 = st.columns(2)
            if b1.button("Fetch AR", width="stretch"):
                _load(
                    "ar_rows",
                    lambda: client.ar_aging(
                        company_id, to_int(min_days), to_int(limit, 10)
                    ),
                )
            if b2.button("Fetch AP", width="stretch"):
                _load(
                    "ap_rows",
                    lambda: client.ap_due(
                        company_id, to_int(min_days), to_int(limit, 10)
                    ),
                )

    # ── Cash snapshot ──────────────────────────────────────────
    with c2:
        with st.container(border=True):
            st.subheader("Cash Snapshot")
            as_of = st.date_input("As of", value=date.today())
            if st.button("Get Cash", width="stretch"):
                _load("cash_row", lambda: client.cash(as_of.isoformat()))
            row = st.session_state.cash_row
            if row:
                st.markdown(
                    f"As of **{row.get('as_of_date')}**: **{money(row.get('cash_balance'))}**"
                )
            else:
                st.caption("No data yet.")

    # ── Runway what-if ─────────────────────────────────────────
    with c3:
        with st.container(border=True):
            st.subheader("Runway What-If")
            a, b = st.columns(2)
            rev = a.text_input("Rev %", value="0")
            exp = b.text_input("Exp %", value="0")
            if st.button("Compute", width="stretch"):
                _load(
                    "runway_row",
                    lambda: client.runway(90, to_float(rev), to_float(exp)),
                )
            row = st.session_state.runway_row
            if row:
                st.markdown(
                    f"Cash: **{money(row.get('current_cash'))}** · Estimated runway: "
                    f"**{row.get('est_days_of_runway')} days**"
                )
            else:
                st.caption("No data yet.")

    st.divider()

    # ── Aging results ──────────────────────────────────────────
    left, right = st.columns(2)
    with left:
        st.subheader("AR Aging Results")
        render_rows_table(st.session_state.ar_rows, empty="Run Fetch AR to load data")
    with right:
        st.subheader("AP Due Results")
        render_rows_table(st.session_state.ap_rows, empty="Run Fetch AP to load data")

    st.divider()

    # ── Anomalies + chart ──────────────────────────────────────
    left, right = st.columns(2)
    with left:
        st.subheader("Anomalies")
        if st.button("Refresh"):
            _load(
                "duplicate_rows", lambda: client.duplicate_payments(company_id, 60)
            )
            _load("outlier_rows", lambda: client.vendor_outliers(company_id, 60, 3))
        st.markdown("**Duplicate Payments**")
        render_rows_table(st.session_state.duplicate_rows, empty="No duplicates found")
        st.markdown("**Vendor Outliers**")
        render_rows_table(st.session_state.outlier_rows, empty="No outliers found")
    with right:
        st.subheader("Runway Chart")
        chart_url = f"{API_BASE.rstrip('/')}/api/query/runway_chart"
        st.caption(f"Served by the backend: `{chart_url}`")
        st.image(chart_url, width="stretch")


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _load(key: str, fetch: Callable[[], object]) -> None:
    """
    Run a query and store its result in session state; report failures.

    Args:
        key: Session-state key receiving the result.
        fetch: Zero-argument callable performing the query.
    """
    try:
        with st.spinner("Working…"):
            st.session_state[key] = fetch()
    except QueryError as e:
        logger.error("Query failed: {}", e)
        st.toast(str(e), icon="⚠️")
