"""Session-scoped context store."""

from typing import Any

from loguru import logger

from finch.agents.types import ContextSnapshot, ConversationSession


class ContextStore:
    """
    Holds the latest backend context and suggested follow-ups for one session.

    All writes to ``session.context`` / ``session.followups`` go through here.
    Dispatches are tagged with sequence numbers from :meth:`issue`; only the
    most recently issued one, not invalidated by :meth:`clear`, may be applied.
    """

    def __init__(self, session: ConversationSession) -> None:
        self.session = session

    def get(self) -> ContextSnapshot:
        return ContextSnapshot(
            context=self.session.context, followups=list(self.session.followups)
        )

    def set(self, context: Any, followups: list[str] | None) -> None:
        self.session.context = context
        self.session.followups = list(followups or [])

    def clear(self) -> None:
        """
        Drop context and follow-ups, and invalidate every dispatch issued so far.
        """
        self.session.context = None
        self.session.followups = []
        self.session.reset_seq = self.session.latest_seq
        logger.debug("Context cleared at seq {}", self.session.latest_seq)

    def issue(self) -> int:
        """
        Allocate the sequence number for a new dispatch.

        Returns:
            int: A number strictly greater than any issued before.
        """
        self.session.latest_seq += 1
        return self.session.latest_seq

    def is_current(self, seq: int) -> bool:
        s = self.session
        return seq == s.latest_seq and seq > s.reset_seq

    def apply(self, seq: int, context: Any, followups: list[str] | None) -> bool:
        """
        Store a dispatch result if it is still the current one.

        Args:
            seq (int): Sequence number the dispatch was issued with.
            context (Any): Context returned by the backend.
            followups (list[str] | None): Suggested follow-ups returned by the backend.

        Returns:
            bool: True if applied, False if the result was stale and discarded.
        """
        if not self.is_current(seq):
            logger.info(
                "Discarding stale response seq={} (latest={}, reset={})",
                seq,
                self.session.latest_seq,
                self.session.reset_seq,
            )
            return False
        self.set(context, followups)
        return True

    def last_params(self) -> dict[str, Any]:
        """
        Return ``lastParams`` from the stored context, for export replay.

        Returns:
            dict[str, Any]: The captured query parameters, or an empty dict.
        """
        ctx = self.session.context
        if not isinstance(ctx, dict):
            return {}
        params = ctx.get("lastParams")
        return dict(params) if isinstance(params, dict) else {}
