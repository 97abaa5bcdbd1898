"""Export replay: re-issue the last query to materialize a CSV download."""

import re
from typing import Any
from urllib.parse import unquote

import requests
from loguru import logger

from finch.agents.errors import ExportError, is_success
from finch.agents.interpreter import absolutize
from finch.agents.types import ExportedFile

_FILENAME_EXT = re.compile(r"filename\*\s*=\s*([^']*)'[^']*'([^;]+)", re.IGNORECASE)
_FILENAME = re.compile(r'filename\s*=\s*"?([^";]+)"?', re.IGNORECASE)


def filename_from_disposition(header: str | None) -> str | None:
    """
    Extract the filename from a Content-Disposition header.

    The RFC 5987 ``filename*=`` form wins over plain ``filename=``.

    Args:
        header (str | None): Raw header value.

    Returns:
        str | None: The filename, or None if the header has none.
    """
    if not header:
        return None
    ext = _FILENAME_EXT.search(header)
    if ext:
        charset = ext.group(1) or "utf-8"
        try:
            name = unquote(ext.group(2).strip(), encoding=charset)
        except LookupError:
            name = unquote(ext.group(2).strip())
        if name:
            return name
    plain = _FILENAME.search(header)
    if plain:
        name = plain.group(1).strip()
        return name or None
    return None


class ExportReplayer:
    """
    Replays captured query parameters against an export reference.

    The reference is resolved against the proxy host so the request takes the
    same forwarding path (and headers) as every other data call.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 120,
        default_filename: str = "export.csv",
        session: requests.Session | None = None,
    ) -> None:
        """
        Initialize the ExportReplayer.

        Args:
            base_url (str): Host of the forwarding proxy.
            timeout (float, optional): Request timeout in seconds. Defaults to 120.
            default_filename (str, optional): Fallback filename. Defaults to "export.csv".
            session (requests.Session | None, optional): HTTP session to reuse. Defaults to None.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.default_filename = default_filename
        self.http = session or requests.Session()

    def resolve(self, export_reference: str) -> str:
        # The proxy only forwards /api/..., so relative refs get the same rebase as charts.
        return absolutize(export_reference, self.base_url)

    def export_csv(
        self, export_reference: str, last_params: dict[str, Any] | None = None
    ) -> ExportedFile:
        """
        Issue one POST carrying ``last_params`` and return the downloaded payload.

        Args:
            export_reference (str): Backend-relative export locator.
            last_params (dict[str, Any] | None, optional): Parameters of the query to replay. Defaults to None.

        Returns:
            ExportedFile: Binary content, filename and media type.

        Raises:
            ExportError: On transport failure or non-2xx status.
        """
        url = self.resolve(export_reference)
        body = last_params if last_params is not None else {}
        logger.info("Replaying export {} with {} param(s)", url, len(body))
        try:
            resp = self.http.post(url, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("ExportError: export request failed: {}", e)
            raise ExportError(None, str(e)) from e

        if not is_success(resp.status_code):
            logger.error("ExportError: export returned {}: {}", resp.status_code, resp.text)
            raise ExportError(resp.status_code, resp.text)

        filename = (
            filename_from_disposition(resp.headers.get("content-disposition"))
            or self.default_filename
        )
        media_type = resp.headers.get("content-type") or "text/csv"
        return ExportedFile(
            content=resp.content, filename=filename, media_type=media_type
        )
