"""
Response interpretation: turn a raw agent payload into a displayable turn.

Chart links are fetched directly by the rendering surface, so they are made
absolute against the public backend base. Export links stay relative; they are
replayed later through the forwarding proxy (see ``finch.agents.export``).
"""

import re

from finch.agents.types import NO_MESSAGE, InterpretedTurn, RawAgentResponse

_ABSOLUTE = re.compile(r"^[a-z][a-z0-9+.\-]*://", flags=re.IGNORECASE)
API_PREFIX = "/api/"


def is_absolute(url: str) -> bool:
    """Return True for scheme-qualified locators such as ``https://...``."""
    return bool(_ABSOLUTE.match(url))


def absolutize(path_or_url: str, base: str) -> str:
    """
    Resolve a chart or export locator against a base URL.

    Relative paths are rebased under ``/api/``: ``/api/x`` is kept, ``/x`` and
    ``x`` both become ``/api/x``.

    Args:
        path_or_url (str): Locator from the agent response.
        base (str): Backend base URL, e.g. ``https://api.example.com``.

    Returns:
        str: Absolute URL.
    """
    if is_absolute(path_or_url):
        return path_or_url
    b = base.rstrip("/")
    if path_or_url.startswith(API_PREFIX):
        p = path_or_url
    elif path_or_url.startswith("/"):
        p = f"/api{path_or_url}"
    else:
        p = f"{API_PREFIX}{path_or_url}"
    return f"{b}{p}"


class ResponseInterpreter:
    """
    Extracts message, attachments and next-round state from agent responses.
    """

    def __init__(self, chart_base: str) -> None:
        """
        Initialize the ResponseInterpreter.

        Args:
            chart_base (str): Public backend base used to absolutize chart links.
        """
        self.chart_base = chart_base

    def interpret(self, raw: RawAgentResponse) -> InterpretedTurn:
        """
        Interpret a shape-checked agent response. Never raises on missing fields.

        Args:
            raw (RawAgentResponse): The agent payload.

        Returns:
            InterpretedTurn: Message, chart/export references, next context and follow-ups.
        """
        data = raw.data
        chart_url = data.chart_url if data else None
        csv_url = data.csv_url if data else None
        return InterpretedTurn(
            message=raw.message if raw.message is not None else NO_MESSAGE,
            chart_reference=absolutize(chart_url, self.chart_base)
            if chart_url
            else None,
            export_reference=csv_url,
            next_context=raw.context,
            next_followups=list(raw.followups),
        )


def interpret(raw: RawAgentResponse, chart_base: str) -> InterpretedTurn:
    """Functional shortcut for ``ResponseInterpreter(chart_base).interpret(raw)``."""
    return ResponseInterpreter(chart_base).interpret(raw)
