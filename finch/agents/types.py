"""Shared types for conversational dispatch."""

from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from pydantic import BaseModel, ConfigDict, field_validator

Role = Literal["user", "agent"]

NO_MESSAGE = "(no message)"
"""Placeholder shown when the agent response carries no message."""


@dataclass(frozen=True)
class Turn:
    """One displayed exchange entry. Immutable once appended to history."""

    role: Role
    text: str
    chart_reference: str | None = None
    export_reference: str | None = None


@dataclass(frozen=True)
class SessionParams:
    """Session identifiers sent alongside every dispatch."""

    company_id: int | str
    extra: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """
        Serialize to the top-level request fields the agent endpoint expects.

        Returns:
            dict[str, Any]: The session fields, ``company_id`` first.
        """
        return {"company_id": self.company_id, **self.extra}


@dataclass
class ConversationSession:
    """
    State of one open conversation view.

    ``history`` is display-only. ``context``, ``followups`` and the sequence
    counters belong to the :class:`~finch.agents.context.ContextStore`; nothing
    else should write them.
    """

    company_id: int | str
    history: list[Turn] = field(default_factory=list)
    context: Any = None
    followups: list[str] = field(default_factory=list)
    latest_seq: int = 0
    reset_seq: int = 0

    @property
    def params(self) -> SessionParams:
        return SessionParams(company_id=self.company_id)

    def append(self, turn: Turn) -> None:
        self.history.append(turn)


class AgentData(BaseModel):
    """The attachment block of an agent response. Unknown keys pass through."""

    model_config = ConfigDict(extra="allow")

    chart_url: str | None = None
    csv_url: str | None = None

    @field_validator("chart_url", "csv_url", mode="before")
    @classmethod
    def _coerce_locator(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None


class RawAgentResponse(BaseModel):
    """
    Partially-known agent payload.

    Only ``message``, ``data.chart_url``, ``data.csv_url``, ``context`` and
    ``followups`` are read; everything else is kept as opaque extra fields.
    """

    model_config = ConfigDict(extra="allow")

    message: str | None = None
    data: AgentData | None = None
    context: Any = None
    followups: list[str] = []

    @field_validator("message", mode="before")
    @classmethod
    def _coerce_message(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @field_validator("data", mode="before")
    @classmethod
    def _drop_non_mapping_data(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    @field_validator("followups", mode="before")
    @classmethod
    def _coerce_followups(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [str(item) for item in value if item is not None]


@dataclass
class InterpretedTurn:
    """User-facing view of one agent response plus the next round's state."""

    message: str
    chart_reference: str | None = None
    export_reference: str | None = None
    next_context: Any = None
    next_followups: list[str] = field(default_factory=list)

    def to_turn(self) -> Turn:
        """Return the agent-role history entry for this response."""
        return Turn(
            role="agent",
            text=self.message,
            chart_reference=self.chart_reference,
            export_reference=self.export_reference,
        )


@dataclass
class ContextSnapshot:
    """Read-only view returned by ``ContextStore.get``."""

    context: Any
    followups: list[str]


@dataclass
class PendingDispatch:
    """A dispatch that has been issued but whose response is not yet applied."""

    seq: int
    text: str
    context: Any = None


@dataclass
class ExportedFile:
    """Materialized export ready for a client-side save."""

    content: bytes
    filename: str
    media_type: str = "text/csv"


class FollowupClassifier(Protocol):
    """Interface for deciding whether an utterance continues the prior exchange."""

    def classify(self, text: str) -> bool:  # pragma: no cover - interface
        """Return True when ``text`` is a follow-up."""
        ...
