"""Agent dispatcher: one request to the finance agent endpoint."""

from typing import Any

import requests
from loguru import logger
from pydantic import ValidationError

from finch.agents.errors import DispatchError, is_success
from finch.agents.types import RawAgentResponse, SessionParams


class AgentDispatcher:
    """
    Sends a single utterance, with optional context, to the agent endpoint.
    Performs no retries and never touches the context store.
    """

    def __init__(
        self,
        base_url: str,
        path: str = "/api/agent/ask",
        timeout: float = 120,
        session: requests.Session | None = None,
    ) -> None:
        """
        Initialize the AgentDispatcher.

        Args:
            base_url (str): Host of the forwarding proxy, e.g. ``http://localhost:8001``.
            path (str, optional): Agent endpoint path below the host. Defaults to "/api/agent/ask".
            timeout (float, optional): Request timeout in seconds. Defaults to 120.
            session (requests.Session | None, optional): HTTP session to reuse. Defaults to None.
        """
        self.url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"
        self.timeout = timeout
        self.http = session or requests.Session()

    @staticmethod
    def build_payload(
        text: str, session_params: SessionParams, context: Any = None
    ) -> dict[str, Any]:
        """
        Build the request body. ``context`` is omitted entirely when not given.

        Args:
            text (str): The user utterance.
            session_params (SessionParams): Session identifiers.
            context (Any, optional): Context to echo back. Defaults to None.

        Returns:
            dict[str, Any]: JSON-serializable request body.
        """
        payload: dict[str, Any] = {"text": text, **session_params.to_payload()}
        if context is not None:
            payload["context"] = context
        return payload

    def ask(
        self, text: str, session_params: SessionParams, context: Any = None
    ) -> RawAgentResponse:
        """
        Issue exactly one POST to the agent endpoint.

        Args:
            text (str): Non-empty user utterance.
            session_params (SessionParams): Session identifiers.
            context (Any, optional): Stored context, attached only for follow-ups. Defaults to None.

        Returns:
            RawAgentResponse: The shape-checked backend payload.

        Raises:
            DispatchError: On transport failure, non-2xx status, or a malformed body.
        """
        payload = self.build_payload(text, session_params, context)
        logger.debug(
            "POST {} (context attached: {})", self.url, "context" in payload
        )
        try:
            resp = self.http.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("DispatchError: agent request failed: {}", e)
            raise DispatchError(None, str(e)) from e

        if not is_success(resp.status_code):
            logger.error(
                "DispatchError: agent returned {}: {}", resp.status_code, resp.text
            )
            raise DispatchError(resp.status_code, resp.text)

        try:
            body = resp.json()
        except ValueError as e:
            logger.error("DispatchError: agent returned non-JSON body")
            raise DispatchError(resp.status_code, resp.text) from e

        if not isinstance(body, dict):
            logger.error("DispatchError: agent returned {}", type(body).__name__)
            raise DispatchError(resp.status_code, resp.text)

        try:
            return RawAgentResponse.model_validate(body)
        except ValidationError as e:
            logger.error("DispatchError: malformed agent response: {}", e)
            raise DispatchError(resp.status_code, resp.text) from e
