"""Centralized session-state initialization and backend configuration."""

import streamlit as st

from finch.agents import ConversationOrchestrator, default_orchestrator
from finch.core.queries import QueryClient
from finch.utils.env_cfg import load_agent_env, load_host_env

_host_cfg = load_host_env()
_agent_cfg = load_agent_env()

PROXY_HOST: str = _host_cfg.proxy_host
"""Forwarding proxy that carries agent, export and query calls."""

API_BASE: str = _host_cfg.api_base
"""Public backend URL (chart images are loaded from here by the browser)."""

AGENT_BASE: str = _host_cfg.agent_base
"""Backend URL of the finance agent, displayed for reference."""

DEFAULT_COMPANY_IDS: tuple[int, ...] = (1,)


def company_options(*company_ids: int) -> dict[str, int]:
    """
    Build the selector labels for the default tenants plus any extra ids.

    Args:
        *company_ids (int): Additional ids, e.g. the configured or current company.

    Returns:
        dict[str, int]: Label to company id, ordered by id.
    """
    ids = sorted({*DEFAULT_COMPANY_IDS, *company_ids})
    return {f"Company {cid}": cid for cid in ids}


COMPANIES: dict[str, int] = company_options(_agent_cfg.company_id)
"""Selectable tenants, including the configured ``FINCH_COMPANY_ID``."""

PAGES: list[str] = ["Chat", "Dashboard"]
"""Ordered list of page names for sidebar navigation."""

PAGE_ICONS: dict[str, str] = {"Chat": "💬", "Dashboard": "📊"}
"""Emoji icon for each page."""


def init_session_state() -> None:
    """
    Initialise all session-state keys with sane defaults.

    Must be called once, before any widget is rendered, so that every key
    referenced elsewhere already exists.
    """
    defaults: dict[str, object] = {
        "current_page": "Chat",
        "company_id": _agent_cfg.company_id,
        "chat_running": False,
        "pending_followup": None,
        "exports": {},
        "ar_rows": [],
        "ap_rows": [],
        "cash_row": None,
        "runway_row": None,
        "duplicate_rows": [],
        "outlier_rows": [],
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def get_orchestrator() -> ConversationOrchestrator:
    """
    Return the conversation for the selected company, creating it on first use.

    Switching company starts a fresh conversation.

    Returns:
        ConversationOrchestrator: The session-scoped orchestrator.
    """
    orch: ConversationOrchestrator | None = st.session_state.get("orchestrator")
    company_id = st.session_state.company_id
    if orch is None or orch.session.company_id != company_id:
        orch = default_orchestrator(company_id)
        st.session_state.orchestrator = orch
        st.session_state.exports = {}
    return orch


def get_query_client() -> QueryClient:
    """Return the dashboard query client, shared across reruns."""
    if "query_client" not in st.session_state:
        st.session_state.query_client = QueryClient(PROXY_HOST)
    return st.session_state.query_client
