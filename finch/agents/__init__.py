"""Conversational dispatch package.

Provides the building blocks for talking to the finance agent: follow-up
classification, context storage, dispatch, response interpretation, and
export replay.
"""

from finch.agents.types import (
    ContextSnapshot,
    ConversationSession,
    ExportedFile,
    FollowupClassifier,
    InterpretedTurn,
    PendingDispatch,
    RawAgentResponse,
    SessionParams,
    Turn,
)
from finch.agents.errors import (
    DispatchError,
    DispatchInFlightError,
    ExportError,
    FinchError,
)
from finch.agents.policies import (
    FollowupConfig,
    KeywordFollowupClassifier,
    is_reset_command,
)
from finch.agents.context import ContextStore
from finch.agents.dispatcher import AgentDispatcher
from finch.agents.interpreter import ResponseInterpreter, absolutize, interpret
from finch.agents.export import ExportReplayer, filename_from_disposition
from finch.agents.orchestrator import ConversationOrchestrator, default_orchestrator

__all__ = [
    "AgentDispatcher",
    "ContextSnapshot",
    "ContextStore",
    "ConversationOrchestrator",
    "ConversationSession",
    "DispatchError",
    "DispatchInFlightError",
    "ExportError",
    "ExportReplayer",
    "ExportedFile",
    "FinchError",
    "FollowupClassifier",
    "FollowupConfig",
    "InterpretedTurn",
    "KeywordFollowupClassifier",
    "PendingDispatch",
    "RawAgentResponse",
    "ResponseInterpreter",
    "SessionParams",
    "Turn",
    "absolutize",
    "default_orchestrator",
    "filename_from_disposition",
    "interpret",
    "is_reset_command",
]
