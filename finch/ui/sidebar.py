"""Sidebar: navigation, company selector, and backend status."""

import requests
import streamlit as st

from finch.ui.state import (
    AGENT_BASE,
    API_BASE,
    COMPANIES,
    PAGE_ICONS,
    PAGES,
    PROXY_HOST,
    company_options,
)


def render_sidebar() -> None:
    """Render the full sidebar: branding, nav, company control, hosts."""
    with st.sidebar:
        # ── Branding ──────────────────────────────────────────────
        st.markdown("## 🐦 Finch")
        st.caption("AI Accountant")

        st.divider()

        # ── Navigation ───────────────────────────────────────────
        st.radio(
            "Navigation",
            options=PAGES,
            format_func=lambda p: f"{PAGE_ICONS.get(p, '')}  {p}",
            key="current_page",
            label_visibility="collapsed",
        )

        st.divider()

        # ── Company selector ─────────────────────────────────────
        _render_company_selector()

        st.divider()

        # ── Hosts ────────────────────────────────────────────────
        _render_hosts()


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _render_company_selector() -> None:
    """Render the company dropdown."""
    st.markdown("##### 🏢 Company")
    current = st.session_state.company_id
    options = company_options(*COMPANIES.values(), current)
    names = list(options)
    index = list(options.values()).index(current)
    selected = st.selectbox(
        label="Company",
        options=names,
        index=index,
        label_visibility="collapsed",
    )
    st.session_state.company_id = options[selected]


def _render_hosts() -> None:
    """Show configured hosts and whether the proxy answers."""
    try:
        online = requests.get(f"{PROXY_HOST}/health", timeout=5).status_code == 200
    except requests.RequestException:
        online = False
    st.caption(f"Proxy: {PROXY_HOST} {'🟢' if online else '🔴'}")
    st.caption(f"Backend: {API_BASE}")
    st.caption(f"Agent: {AGENT_BASE}")
