"""Error taxonomy for the dispatch layer."""


class FinchError(RuntimeError):
    """Base class for recoverable dispatch-layer failures."""


class _HTTPFailure(FinchError):
    label = "Request"

    def __init__(self, status_code: int | None, body: str = "") -> None:
        """
        Initialize the failure.

        Args:
            status_code (int | None): HTTP status, or None when no response arrived.
            body (str, optional): Raw response text or transport error message.
        """
        self.status_code = status_code
        self.body = body
        super().__init__(self._describe())

    def _describe(self) -> str:
        if self.body:
            return self.body
        if self.status_code is None:
            return f"{self.label} failed"
        return f"{self.label} failed ({self.status_code})"


class DispatchError(_HTTPFailure):
    """Agent call failed in transport, status, or body shape."""

    label = "Agent request"


class ExportError(_HTTPFailure):
    """Export replay failed in transport or status."""

    label = "Export request"


class DispatchInFlightError(FinchError):
    """A second dispatch was started while one is still outstanding."""


def is_success(status_code: int) -> bool:
    """Return True only for 2xx statuses; redirects and 1xx count as failures."""
    return 200 <= status_code < 300
