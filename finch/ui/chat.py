"""
Chat page: conversation with the finance agent, suggestion chips, and CSV export.
"""

from typing import Callable

import streamlit as st
from loguru import logger

from finch.agents import (
    ConversationOrchestrator,
    DispatchInFlightError,
    ExportError,
    Turn,
)
from finch.ui.state import get_orchestrator

EXAMPLES = (
    "Try: “show overdue invoices over 60 days”, “what’s my cash last Friday?”, "
    "“simulate runway revenue -10 expenses +5”. Type “reset” to start over."
)


def render_chat() -> None:
    """
    Render the chat interface.
    This includes the message history, follow-up chips, and the chat input.
    """
    st.header("💬 Conversational Agent")

    orch = get_orchestrator()
    st.caption(f"🏢 Company {orch.session.company_id}")

    # ── Queued chip click from the previous run ──────────────
    label = st.session_state.pending_followup
    if label:
        st.session_state.pending_followup = None
        _run_turn(orch, lambda: orch.send_followup(label))

    # ── Message history ──────────────────────────────────────
    if not orch.session.history:
        st.caption(EXAMPLES)

    for index, turn in enumerate(orch.session.history):
        _render_turn(orch, index, turn)

    # ── Suggested follow-ups ─────────────────────────────────
    followups = orch.followups
    if followups:
        cols = st.columns(min(len(followups), 4))
        for i, suggestion in enumerate(followups):
            with cols[i % len(cols)]:
                st.button(
                    suggestion,
                    key=f"followup_{len(orch.session.history)}_{i}",
                    on_click=_queue_followup,
                    args=(suggestion,),
                    disabled=orch.busy or st.session_state.chat_running,
                )

    # ── Chat input ───────────────────────────────────────────
    if prompt := st.chat_input(
        "Ask your finance agent…",
        disabled=orch.busy or st.session_state.chat_running,
    ):
        _run_turn(orch, lambda: orch.send(prompt))


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _queue_followup(label: str) -> None:
    """
    Remember a clicked chip so the next run dispatches it.

    Args:
        label: The suggestion text.
    """
    st.session_state.pending_followup = label


def _run_turn(orch: ConversationOrchestrator, action: Callable[[], object]) -> None:
    """
    Run one dispatch with the input locked, then rerun to redraw history.

    Args:
        orch: The session orchestrator.
        action: Zero-argument callable performing the send.
    """
    st.session_state.chat_running = True
    try:
        with st.spinner("Thinking…"):
            action()
    except DispatchInFlightError as e:
        logger.warning("Send ignored: {}", e)
        st.warning("Please wait for the current answer.")
        return
    finally:
        st.session_state.chat_running = False
    st.rerun()


def _render_turn(orch: ConversationOrchestrator, index: int, turn: Turn) -> None:
    """
    Render one history entry with its chart and export controls.

    Args:
        orch: The session orchestrator.
        index: Position in history; keys the per-turn widgets.
        turn: The entry to render.
    """
    with st.chat_message("user" if turn.role == "user" else "assistant"):
        st.markdown(turn.text)

        if turn.role != "agent":
            return

        if turn.chart_reference:
            st.image(turn.chart_reference, caption="Chart", width="stretch")

        if turn.export_reference:
            exports = st.session_state.exports
            exported = exports.get(index)
            if exported is None:
                if st.button("📄 Prepare CSV", key=f"export_{index}"):
                    try:
                        exports[index] = orch.export(turn)
                        st.rerun()
                    except ExportError as e:
                        logger.error("Export failed: {}", e)
                        st.toast(f"Export failed: {e}", icon="⚠️")
            else:
                st.download_button(
                    label="📥 Download CSV",
                    data=exported.content,
                    file_name=exported.filename,
                    mime=exported.media_type,
                    key=f"download_{index}",
                )
