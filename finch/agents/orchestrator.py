"""Conversation orchestrator that routes classification, dispatch, and interpretation."""

from loguru import logger

from finch.agents.context import ContextStore
from finch.agents.dispatcher import AgentDispatcher
from finch.agents.errors import DispatchError, DispatchInFlightError, ExportError
from finch.agents.export import ExportReplayer
from finch.agents.interpreter import ResponseInterpreter
from finch.agents.policies import KeywordFollowupClassifier, is_reset_command
from finch.agents.types import (
    ConversationSession,
    ExportedFile,
    FollowupClassifier,
    PendingDispatch,
    Turn,
)
from finch.utils.env_cfg import load_agent_env, load_host_env

RESET_REPLY = "Context reset. Ask a new question anytime."


class ConversationOrchestrator:
    """
    Coordinate one conversation session.
    Handles reset, follow-up classification, dispatch, and context updates in sequence.
    """

    def __init__(
        self,
        session: ConversationSession,
        dispatcher: AgentDispatcher,
        interpreter: ResponseInterpreter,
        exporter: ExportReplayer,
        classifier: FollowupClassifier | None = None,
    ) -> None:
        """
        Initialize the ConversationOrchestrator.

        Args:
            session (ConversationSession): The session whose history and context are managed.
            dispatcher (AgentDispatcher): Sends utterances to the agent endpoint.
            interpreter (ResponseInterpreter): Turns raw responses into displayable turns.
            exporter (ExportReplayer): Replays export references.
            classifier (FollowupClassifier | None, optional): Follow-up policy. Defaults to None.
        """
        self.session = session
        self.store = ContextStore(session)
        self.dispatcher = dispatcher
        self.interpreter = interpreter
        self.exporter = exporter
        self.classifier = classifier or KeywordFollowupClassifier()
        self._in_flight: int | None = None

    @property
    def busy(self) -> bool:
        return self._in_flight is not None

    @property
    def followups(self) -> list[str]:
        return self.store.get().followups

    def send(self, text: str) -> Turn | None:
        """
        Handle typed input end to end.

        Args:
            text (str): Raw user input.

        Returns:
            Turn | None: The agent turn appended, or None for empty input or a stale result.
        """
        t = (text or "").strip()
        if not t:
            return None
        if is_reset_command(t):
            return self.reset(t)
        return self.complete(self.begin(t))

    def send_followup(self, label: str) -> Turn | None:
        """
        Handle a clicked suggestion chip. Chips always continue the prior exchange.

        Args:
            label (str): The suggestion text.

        Returns:
            Turn | None: The agent turn appended, or None for an empty label or a stale result.
        """
        t = (label or "").strip()
        if not t:
            return None
        return self.complete(self.begin(t, followup=True))

    def begin(self, text: str, followup: bool | None = None) -> PendingDispatch:
        """
        Record the user turn and issue a sequence-tagged dispatch.

        Args:
            text (str): Trimmed, non-empty user input.
            followup (bool | None, optional): Override the classifier. Defaults to None.

        Returns:
            PendingDispatch: The issued dispatch, to be passed to :meth:`complete`.

        Raises:
            DispatchInFlightError: If another dispatch is still outstanding.
        """
        if self.busy:
            logger.error("DispatchInFlightError: seq {} still in flight", self._in_flight)
            raise DispatchInFlightError("A request is already in flight.")

        self.session.append(Turn(role="user", text=text))
        is_followup = self.classifier.classify(text) if followup is None else followup
        stored = self.store.get().context
        context = stored if is_followup and stored is not None else None

        seq = self.store.issue()
        self._in_flight = seq
        logger.info(
            "Dispatch seq={} followup={} context={}",
            seq,
            is_followup,
            "attached" if context is not None else "omitted",
        )
        return PendingDispatch(seq=seq, text=text, context=context)

    def complete(self, pending: PendingDispatch) -> Turn | None:
        """
        Run the dispatch and apply its result if it is still current.

        Args:
            pending (PendingDispatch): A dispatch returned by :meth:`begin`.

        Returns:
            Turn | None: The agent turn appended, or None when the result was stale.
        """
        try:
            raw = self.dispatcher.ask(pending.text, self.session.params, pending.context)
        except DispatchError as e:
            return self._finish(pending, Turn(role="agent", text=f"Oops: {e}"))
        finally:
            if self._in_flight == pending.seq:
                self._in_flight = None

        interpreted = self.interpreter.interpret(raw)
        if not self.store.apply(
            pending.seq, interpreted.next_context, interpreted.next_followups
        ):
            return None
        turn = interpreted.to_turn()
        self.session.append(turn)
        return turn

    def _finish(self, pending: PendingDispatch, turn: Turn) -> Turn | None:
        if not self.store.is_current(pending.seq):
            logger.info("Dropping failure of stale dispatch seq={}", pending.seq)
            return None
        self.session.append(turn)
        return turn

    def reset(self, text: str = "reset") -> Turn:
        """
        Clear context and follow-ups, and record the reset in history.

        Args:
            text (str, optional): The command as typed. Defaults to "reset".

        Returns:
            Turn: The confirmation turn.
        """
        self.store.clear()
        self._in_flight = None
        self.session.append(Turn(role="user", text=text))
        reply = Turn(role="agent", text=RESET_REPLY)
        self.session.append(reply)
        logger.info("Session reset for company {}", self.session.company_id)
        return reply

    def export(self, turn: Turn) -> ExportedFile:
        """
        Replay the export of a prior agent turn with the stored ``lastParams``.

        Args:
            turn (Turn): An agent turn carrying an export reference.

        Returns:
            ExportedFile: The downloaded dataset.

        Raises:
            ExportError: If the turn has no export reference or the replay fails.
        """
        if not turn.export_reference:
            raise ExportError(None, "This message has no export attached.")
        return self.exporter.export_csv(turn.export_reference, self.store.last_params())


def default_orchestrator(company_id: int | str | None = None) -> ConversationOrchestrator:
    """
    Create an orchestrator wired from environment configuration.

    Args:
        company_id (int | str | None, optional): Company for the new session. Defaults to the configured one.

    Returns:
        ConversationOrchestrator: A fresh session with proxy-backed dispatcher and exporter.
    """
    host_cfg = load_host_env()
    agent_cfg = load_agent_env()
    session = ConversationSession(
        company_id=agent_cfg.company_id if company_id is None else company_id
    )
    return ConversationOrchestrator(
        session=session,
        dispatcher=AgentDispatcher(
            host_cfg.proxy_host,
            path=agent_cfg.ask_path,
            timeout=agent_cfg.request_timeout,
        ),
        interpreter=ResponseInterpreter(host_cfg.api_base),
        exporter=ExportReplayer(
            host_cfg.proxy_host,
            timeout=agent_cfg.export_timeout,
            default_filename=agent_cfg.default_export_filename,
        ),
    )
