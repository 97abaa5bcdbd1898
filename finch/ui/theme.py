"""Page configuration and shared chrome."""

import streamlit as st


def configure_page() -> None:
    """
    Set the Streamlit page config.  Must be the **first** Streamlit call.
    """
    st.set_page_config(
        page_title="Finch · AI Accountant",
        page_icon="🐦",
        layout="wide",
        initial_sidebar_state="expanded",
    )


def render_header() -> None:
    st.title("Finch for AI Accountant")
    st.caption("Conversational finance agent UI")
