"""Client for the fixed dashboard query endpoints."""

from typing import Any

import requests
from loguru import logger

from finch.agents.errors import is_success

Row = dict[str, Any]


class QueryError(RuntimeError):
    """A dashboard query failed in transport or status."""

    def __init__(self, path: str, status_code: int | None, body: str = "") -> None:
        self.path = path
        self.status_code = status_code
        self.body = body
        super().__init__(body or f"Request to {path} failed with status {status_code}")


class QueryClient:
    """
    Posts query parameters through the forwarding proxy and returns ``rows``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 60,
        session: requests.Session | None = None,
    ) -> None:
        """
        Initialize the QueryClient.

        Args:
            base_url (str): Host of the forwarding proxy.
            timeout (float, optional): Request timeout in seconds. Defaults to 60.
            session (requests.Session | None, optional): HTTP session to reuse. Defaults to None.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    def rows(self, path: str, body: dict[str, Any]) -> list[Row]:
        """
        POST a query and return its rows.

        Args:
            path (str): Endpoint path, e.g. ``/api/query/ar``.
            body (dict[str, Any]): Query parameters.

        Returns:
            list[Row]: The ``rows`` of the response, empty if absent.

        Raises:
            QueryError: On transport failure, non-2xx status or a non-JSON body.
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = self.http.post(url, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("QueryError: {} failed: {}", path, e)
            raise QueryError(path, None, str(e)) from e
        if not is_success(resp.status_code):
            logger.error("QueryError: {} returned {}: {}", path, resp.status_code, resp.text)
            raise QueryError(path, resp.status_code, resp.text)
        try:
            data = resp.json()
        except ValueError as e:
            raise QueryError(path, resp.status_code, resp.text) from e
        rows = data.get("rows") if isinstance(data, dict) else None
        return rows if isinstance(rows, list) else []

    def ar_aging(self, company_id: int, min_days_overdue: int = 0, limit: int = 10) -> list[Row]:
        return self.rows(
            "/api/query/ar",
            {"company_id": company_id, "min_days_overdue": min_days_overdue, "limit": limit},
        )

    def ap_due(self, company_id: int, min_days_overdue: int = 0, limit: int = 10) -> list[Row]:
        return self.rows(
            "/api/query/ap",
            {"company_id": company_id, "min_days_overdue": min_days_overdue, "limit": limit},
        )

    def cash(self, as_of_date: str) -> Row | None:
        """Return the single cash snapshot row, or None."""
        rows = self.rows("/api/query/cash", {"as_of_date": as_of_date})
        return rows[0] if rows else None

    def runway(
        self, horizon_days: int = 90, rev_shift_pct: float = 0, exp_shift_pct: float = 0
    ) -> Row | None:
        """Return the single runway projection row, or None."""
        rows = self.rows(
            "/api/query/runway",
            {
                "horizon_days": horizon_days,
                "rev_shift_pct": rev_shift_pct,
                "exp_shift_pct": exp_shift_pct,
            },
        )
        return rows[0] if rows else None

    def duplicate_payments(self, company_id: int, lookback_days: int = 60) -> list[Row]:
        return self.rows(
            "/api/query/anomalies/duplicates",
            {"company_id": company_id, "lookback_days": lookback_days},
        )

    def vendor_outliers(
        self,
        company_id: int,
        lookback_days: int = 60,
        threshold_multiplier: float = 3,
    ) -> list[Row]:
        return self.rows(
            "/api/query/anomalies/vendor_outliers",
            {
                "company_id": company_id,
                "lookback_days": lookback_days,
                "threshold_multiplier": threshold_multiplier,
            },
        )
