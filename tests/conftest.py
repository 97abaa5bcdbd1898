import json
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest
import requests

from finch.agents import (
    AgentDispatcher,
    ConversationOrchestrator,
    ConversationSession,
    ExportReplayer,
    ResponseInterpreter,
)

ResponseFactory = Callable[..., requests.Response]


def _make_response(
    status: int = 200,
    json_body: Any = None,
    text: str | None = None,
    content: bytes | None = None,
    headers: dict[str, str] | None = None,
) -> requests.Response:
    """
    Build a real ``requests.Response`` without touching the network.

    Args:
        status (int, optional): HTTP status code. Defaults to 200.
        json_body (Any, optional): Payload serialized as JSON. Defaults to None.
        text (str | None, optional): Plain-text body. Defaults to None.
        content (bytes | None, optional): Raw body. Defaults to None.
        headers (dict[str, str] | None, optional): Response headers. Defaults to None.

    Returns:
        requests.Response: The prepared response.
    """
    resp = requests.Response()
    resp.status_code = status
    resp.encoding = "utf-8"
    resp.url = "http://proxy.test/"
    if json_body is not None:
        resp._content = json.dumps(json_body).encode("utf-8")
        resp.headers["Content-Type"] = "application/json"
    elif text is not None:
        resp._content = text.encode("utf-8")
        resp.headers["Content-Type"] = "text/plain"
    else:
        resp._content = content or b""
    resp.headers.update(headers or {})
    return resp


@pytest.fixture
def make_response() -> ResponseFactory:
    """
    Factory fixture for canned HTTP responses.

    Returns:
        ResponseFactory: Callable building ``requests.Response`` objects.
    """
    return _make_response


@pytest.fixture
def http() -> MagicMock:
    """
    A stand-in for ``requests.Session`` whose ``post`` is configured per test.

    Returns:
        MagicMock: The mocked session.
    """
    return MagicMock(spec=requests.Session)


@pytest.fixture
def session() -> ConversationSession:
    return ConversationSession(company_id=1)


@pytest.fixture
def orchestrator(session: ConversationSession, http: MagicMock) -> ConversationOrchestrator:
    """
    Orchestrator wired to the mocked HTTP session.

    Args:
        session (ConversationSession): The conversation session fixture.
        http (MagicMock): The mocked HTTP session.

    Returns:
        ConversationOrchestrator: The orchestrator under test.
    """
    return ConversationOrchestrator(
        session=session,
        dispatcher=AgentDispatcher("http://proxy.test", session=http),
        interpreter=ResponseInterpreter("https://api.example.com"),
        exporter=ExportReplayer("http://proxy.test", session=http),
    )
