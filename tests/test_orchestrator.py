from typing import Callable
from unittest.mock import MagicMock

import pytest
import requests

from finch.agents import (
    ConversationOrchestrator,
    DispatchInFlightError,
    ExportError,
    KeywordFollowupClassifier,
    Turn,
)
from finch.agents.orchestrator import RESET_REPLY

ResponseFactory = Callable[..., requests.Response]

FIRST_REPLY = {
    "message": "3 invoices are overdue.",
    "data": {"chart_url": "/export/ar.png", "csv_url": "/api/export/ar"},
    "context": {"intent": "ar", "lastParams": {"company_id": 1, "min_days_overdue": 60}},
    "followups": ["Show details", "Export CSV"],
}


def _sent_json(http: MagicMock, call: int = -1) -> dict:
    return http.post.call_args_list[call].kwargs["json"]


def test_fresh_question_updates_history_and_store(
    orchestrator: ConversationOrchestrator,
    http: MagicMock,
    make_response: ResponseFactory,
) -> None:
    """
    A top-level question is sent without context and its reply becomes the stored state.

    Args:
        orchestrator (ConversationOrchestrator): The orchestrator fixture.
        http (MagicMock): The mocked HTTP session.
        make_response (ResponseFactory): Response factory.
    """
    http.post.return_value = make_response(json_body=FIRST_REPLY)

    turn = orchestrator.send("  overdue invoices over 60 days ")

    assert _sent_json(http) == {"text": "overdue invoices over 60 days", "company_id": 1}
    assert turn == Turn(
        role="agent",
        text="3 invoices are overdue.",
        chart_reference="https://api.example.com/api/export/ar.png",
        export_reference="/api/export/ar",
    )
    assert [t.role for t in orchestrator.session.history] == ["user", "agent"]
    assert orchestrator.session.history[0].text == "overdue invoices over 60 days"
    assert orchestrator.store.get().context == FIRST_REPLY["context"]
    assert orchestrator.followups == ["Show details", "Export CSV"]
    assert orchestrator.busy is False


def test_followup_attaches_stored_context(
    orchestrator: ConversationOrchestrator,
    http: MagicMock,
    make_response: ResponseFactory,
) -> None:
    http.post.side_effect = [
        make_response(json_body=FIRST_REPLY),
        make_response(json_body={"message": "Details below."}),
    ]

    orchestrator.send("overdue invoices")
    orchestrator.send("yes")

    assert _sent_json(http)["context"] == FIRST_REPLY["context"]


def test_new_question_omits_but_keeps_context(
    orchestrator: ConversationOrchestrator,
    http: MagicMock,
    make_response: ResponseFactory,
) -> None:
    """
    A non-follow-up is sent without context; the stored context survives a failed call.

    Args:
        orchestrator (ConversationOrchestrator): The orchestrator fixture.
        http (MagicMock): The mocked HTTP session.
        make_response (ResponseFactory): Response factory.
    """
    http.post.side_effect = [
        make_response(json_body=FIRST_REPLY),
        make_response(status=503, text="agent busy"),
    ]

    orchestrator.send("overdue invoices")
    turn = orchestrator.send("what is our revenue this quarter")

    assert "context" not in _sent_json(http)
    assert turn is not None
    assert turn.text == "Oops: agent busy"
    assert orchestrator.store.get().context == FIRST_REPLY["context"]
    assert orchestrator.followups == ["Show details", "Export CSV"]


def test_successful_reply_replaces_context_wholesale(
    orchestrator: ConversationOrchestrator,
    http: MagicMock,
    make_response: ResponseFactory,
) -> None:
    http.post.side_effect = [
        make_response(json_body=FIRST_REPLY),
        make_response(json_body={"message": "Cash is fine."}),
    ]

    orchestrator.send("overdue invoices")
    orchestrator.send("how much cash do we have")

    snapshot = orchestrator.store.get()
    assert snapshot.context is None
    assert snapshot.followups == []


def test_chip_click_is_always_followup(
    orchestrator: ConversationOrchestrator,
    http: MagicMock,
    make_response: ResponseFactory,
) -> None:
    http.post.side_effect = [
        make_response(json_body=FIRST_REPLY),
        make_response(json_body={"message": "ok"}),
    ]

    orchestrator.send("overdue invoices")
    orchestrator.send_followup("Tell me about vendor Acme")

    assert _sent_json(http)["context"] == FIRST_REPLY["context"]


def test_followup_without_stored_context_omits_field(
    orchestrator: ConversationOrchestrator,
    http: MagicMock,
    make_response: ResponseFactory,
) -> None:
    http.post.return_value = make_response(json_body={"message": "ok"})
    orchestrator.send("yes")
    assert "context" not in _sent_json(http)


def test_empty_input_is_noop(orchestrator: ConversationOrchestrator, http: MagicMock) -> None:
    assert orchestrator.send("   ") is None
    assert orchestrator.send_followup("") is None
    assert orchestrator.session.history == []
    http.post.assert_not_called()


def test_reset_clears_context_without_dispatch(
    orchestrator: ConversationOrchestrator,
    http: MagicMock,
    make_response: ResponseFactory,
) -> None:
    """
    ``reset`` short-circuits classification and never reaches the backend.

    Args:
        orchestrator (ConversationOrchestrator): The orchestrator fixture.
        http (MagicMock): The mocked HTTP session.
        make_response (ResponseFactory): Response factory.
    """
    http.post.return_value = make_response(json_body=FIRST_REPLY)
    orchestrator.send("overdue invoices")

    reply = orchestrator.send("RESET")

    assert http.post.call_count == 1
    assert reply.text == RESET_REPLY
    assert orchestrator.store.get().context is None
    assert orchestrator.followups == []
    assert [t.text for t in orchestrator.session.history[-2:]] == ["RESET", RESET_REPLY]


def test_second_begin_while_in_flight_is_rejected(
    orchestrator: ConversationOrchestrator,
) -> None:
    orchestrator.begin("first question")

    assert orchestrator.busy is True
    with pytest.raises(DispatchInFlightError):
        orchestrator.begin("second question")
    assert [t.text for t in orchestrator.session.history] == ["first question"]


def test_late_response_after_reset_is_discarded(
    orchestrator: ConversationOrchestrator,
    http: MagicMock,
    make_response: ResponseFactory,
) -> None:
    """
    A response issued before a reset never reaches the store, even if it resolves last.

    Args:
        orchestrator (ConversationOrchestrator): The orchestrator fixture.
        http (MagicMock): The mocked HTTP session.
        make_response (ResponseFactory): Response factory.
    """
    stale = orchestrator.begin("overdue invoices")
    orchestrator.reset()
    fresh = orchestrator.begin("cash today")
    assert fresh.seq > stale.seq

    http.post.side_effect = [
        make_response(json_body={"message": "fresh", "context": {"n": 2}, "followups": ["b"]}),
        make_response(json_body={"message": "stale", "context": {"n": 1}, "followups": ["a"]}),
    ]
    applied = orchestrator.complete(fresh)
    discarded = orchestrator.complete(stale)

    assert applied is not None and applied.text == "fresh"
    assert discarded is None
    assert orchestrator.store.get().context == {"n": 2}
    assert orchestrator.followups == ["b"]
    assert "stale" not in [t.text for t in orchestrator.session.history]


def test_stale_failure_is_not_appended(
    orchestrator: ConversationOrchestrator,
    http: MagicMock,
    make_response: ResponseFactory,
) -> None:
    stale = orchestrator.begin("overdue invoices")
    orchestrator.reset()
    http.post.return_value = make_response(status=500, text="boom")

    assert orchestrator.complete(stale) is None
    assert orchestrator.session.history[-1].text == RESET_REPLY


def test_injected_classifier_is_used(
    orchestrator: ConversationOrchestrator,
    http: MagicMock,
    make_response: ResponseFactory,
) -> None:
    classifier = MagicMock(spec=KeywordFollowupClassifier)
    classifier.classify.return_value = True
    orchestrator.classifier = classifier
    orchestrator.store.set({"k": 1}, [])
    http.post.return_value = make_response(json_body={"message": "ok"})

    orchestrator.send("anything at all")

    classifier.classify.assert_called_once_with("anything at all")
    assert _sent_json(http)["context"] == {"k": 1}


def test_export_replays_last_params(
    orchestrator: ConversationOrchestrator,
    http: MagicMock,
    make_response: ResponseFactory,
) -> None:
    http.post.side_effect = [
        make_response(json_body=FIRST_REPLY),
        make_response(
            content=b"id,amount\n",
            headers={"Content-Disposition": 'attachment; filename="ar.csv"'},
        ),
    ]
    turn = orchestrator.send("overdue invoices")
    assert turn is not None

    exported = orchestrator.export(turn)

    export_call = http.post.call_args_list[-1]
    assert export_call.args[0] == "http://proxy.test/api/export/ar"
    assert export_call.kwargs["json"] == {"company_id": 1, "min_days_overdue": 60}
    assert exported.filename == "ar.csv"


def test_export_after_reset_sends_empty_params(
    orchestrator: ConversationOrchestrator,
    http: MagicMock,
    make_response: ResponseFactory,
) -> None:
    http.post.side_effect = [
        make_response(json_body=FIRST_REPLY),
        make_response(content=b"x"),
    ]
    turn = orchestrator.send("overdue invoices")
    orchestrator.reset()

    exported = orchestrator.export(turn)

    assert http.post.call_args.kwargs["json"] == {}
    assert exported.filename == "export.csv"


def test_export_without_reference_raises(orchestrator: ConversationOrchestrator) -> None:
    with pytest.raises(ExportError):
        orchestrator.export(Turn(role="agent", text="no file"))
