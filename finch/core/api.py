"""Forwarding proxy: relays ``/api/*`` calls to the finance backend."""

import json
from typing import Any, cast
from urllib.parse import urlsplit

import anyio
import requests
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from loguru import logger
from starlette.middleware.cors import CORSMiddleware

from finch.utils.env_cfg import load_host_env

host_cfg = load_host_env()

# Load allowed origins from environment or default to Streamlit's default ports
allowed_origins = host_cfg.cors_allowed_origins.split(",")

app = FastAPI(title="Finch Proxy")
app.add_middleware(
    middleware_class=cast(Any, CORSMiddleware),
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

UPSTREAM: str = host_cfg.proxy_upstream.rstrip("/")
"""Backend origin every ``/api/*`` request is forwarded to."""

FORWARD_TIMEOUT = 300
_RELAYED_HEADERS = ("content-disposition",)


def _upstream_url(path: str, query: str = "") -> str:
    """
    Build the upstream URL for a proxied path.

    Args:
        path (str): Path below ``/api/``.
        query (str, optional): Raw query string. Defaults to "".

    Returns:
        str: Absolute upstream URL.
    """
    target = f"{UPSTREAM}/api/{path.lstrip('/')}"
    return f"{target}?{query}" if query else target


def _decode_body(raw: bytes) -> Any:
    """
    Decode a JSON request body, treating an empty body as ``{}``.

    Args:
        raw (bytes): Raw request body.

    Returns:
        Any: The decoded JSON value.
    """
    if not raw.strip():
        return {}
    return json.loads(raw)


def _forward(method: str, url: str, body: Any) -> requests.Response:
    """
    Send the proxied request upstream, preserving method and JSON body.

    Args:
        method (str): HTTP method.
        url (str): Upstream URL.
        body (Any): Decoded JSON body; not sent for GET.

    Returns:
        requests.Response: The upstream response.
    """
    return requests.request(
        method,
        url,
        headers={"Content-Type": "application/json"},
        data=None if method == "GET" else json.dumps(body if body is not None else {}),
        timeout=FORWARD_TIMEOUT,
    )


def _relay(upstream: requests.Response) -> Response:
    """
    Mirror an upstream response: JSON stays JSON, anything else is passed as bytes.

    Args:
        upstream (requests.Response): The upstream response.

    Returns:
        Response: Response with the upstream status code and content type.
    """
    content_type = upstream.headers.get("content-type", "")
    if "application/json" in content_type:
        return JSONResponse(status_code=upstream.status_code, content=upstream.json())

    headers = {
        name: upstream.headers[name]
        for name in _RELAYED_HEADERS
        if upstream.headers.get(name)
    }
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=content_type or None,
        headers=headers,
    )


# --- API Endpoints ---


@app.get("/health", tags=["Health"])
def health() -> dict[str, str]:
    """
    Report proxy liveness and the configured upstream host.

    Returns:
        dict[str, str]: Status and upstream host.
    """
    return {"status": "ok", "upstream": urlsplit(UPSTREAM).netloc}


@app.api_route(
    "/api/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    tags=["Proxy"],
)
async def proxy(path: str, request: Request) -> Response:
    """
    Forward any ``/api/*`` call to the backend and relay its answer verbatim.

    Args:
        path (str): Path below ``/api/``.
        request (Request): The incoming request.

    Returns:
        Response: The relayed upstream response, or a 500 JSON error.
    """
    target = _upstream_url(path, request.url.query)
    logger.info("{} {} -> {}", request.method, request.url.path, target)
    try:
        body = None if request.method == "GET" else _decode_body(await request.body())
        upstream = await anyio.to_thread.run_sync(
            _forward, request.method, target, body
        )
        return _relay(upstream)
    except Exception as e:
        logger.error("Proxy error forwarding to {}: {}", target, e)
        return JSONResponse(status_code=500, content={"error": str(e)})


def run() -> None:
    """
    CLI entry point for the proxy server.
    """
    import uvicorn

    from finch.utils.logging_cfg import setup_logging

    setup_logging()
    host = urlsplit(host_cfg.proxy_host)
    uvicorn.run(app, host=host.hostname or "127.0.0.1", port=host.port or 8001)


if __name__ == "__main__":
    run()
