import sys
from pathlib import Path

import streamlit as st
from loguru import logger
from streamlit.runtime import exists
from streamlit.web import cli as st_cli

from finch.ui.chat import render_chat
from finch.ui.dashboard import render_dashboard
from finch.ui.sidebar import render_sidebar
from finch.ui.state import init_session_state
from finch.ui.theme import configure_page, render_header
from finch.utils.logging_cfg import setup_logging


def setup_app() -> None:
    """
    Configure the page, logging, and session state.
    """
    configure_page()
    if "_logging_ready" not in st.session_state:
        setup_logging()
        st.session_state._logging_ready = True
    init_session_state()


def main() -> None:
    setup_app()
    render_sidebar()
    render_header()

    if st.session_state.current_page == "Dashboard":
        render_dashboard()
    else:
        render_chat()


# ---- Streamlit CLI wrapper ----------------------------------------------- #
def run() -> None:
    """
    CLI entry point for the Streamlit app. This function is used to run the app from the command
    line. It sets up the command line arguments as if the user typed them. For example: `streamlit
    run app.py <any extra args>`.
    """
    app_path = Path(__file__).resolve()
    sys.argv = ["streamlit", "run", str(app_path)] + sys.argv[1:]
    sys.exit(st_cli.main())


if __name__ == "__main__":
    try:
        if exists():
            main()
        else:
            run()
    except ImportError as e:
        logger.exception(f"Failed to run the Streamlit app: {e}")
        run()
