from pathlib import Path
from unittest.mock import MagicMock, patch

from streamlit.testing.v1 import AppTest

from finch.ui.state import company_options

APP_PATH = Path(__file__).resolve().parents[1] / "finch" / "app.py"


def _healthy_proxy(mock_get: MagicMock) -> None:
    # Mock the proxy health check to avoid network calls/timeouts
    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_get.return_value = mock_response


@patch("requests.get")
def test_streamlit_app_loads(mock_get: MagicMock) -> None:
    """
    Test that the Streamlit app loads without errors.

    Args:
        mock_get (MagicMock): The mock object for requests.get.
    """
    _healthy_proxy(mock_get)

    at = AppTest.from_file(str(APP_PATH))
    at.run(timeout=30)
    assert not at.exception


@patch("requests.get")
def test_company_outside_defaults_survives_first_render(mock_get: MagicMock) -> None:
    """
    The sidebar selector must not reset a company id it does not list by default.

    Args:
        mock_get (MagicMock): The mock object for requests.get.
    """
    _healthy_proxy(mock_get)

    at = AppTest.from_file(str(APP_PATH))
    at.session_state["company_id"] = 4
    at.run(timeout=30)

    assert not at.exception
    assert at.session_state["company_id"] == 4
    assert at.selectbox[0].value == "Company 4"


def test_company_options_include_configured_id() -> None:
    assert company_options(4) == {"Company 1": 1, "Company 4": 4}
    assert company_options(1) == {"Company 1": 1}
