"""Unit tests for OutreachOrchestrator over the in-memory recruiter UI."""
from __future__ import annotations

import asyncio

import pytest

from domain.errors import LoginTimeout, SessionError
from domain.models import CandidateInfo, CandidateStatus, RunMode, RunPhase, RunRecord, RunStatus
from test.mocks import (
    FakeRecruiterUi,
    ScriptedLLMClient,
    build_engine,
    candidate,
    playwright_error,
    run_config,
)

NAMES = ("Ada Lovelace", "Grace Hopper", "Alan Turing")


def _assert_counters_balance(run: RunRecord) -> None:
    assert run.processed == run.succeeded + run.failed + run.skipped


# -- run modes ---------------------------------------------------------------


def test_dry_run_respects_max_and_never_touches_composer() -> None:
    engine = build_engine(FakeRecruiterUi.with_names(*NAMES))

    run = asyncio.run(engine.orchestrator.run(run_config(RunMode.DRY_RUN, max_candidates=2)))

    assert run.status is RunStatus.COMPLETED
    assert (run.processed, run.succeeded, run.failed, run.skipped) == (2, 2, 0, 0)
    _assert_counters_balance(run)
    assert engine.run_repo.get(run.id) == run
    records = engine.candidate_repo.all()
    assert [r.name for r in records] == ["Ada Lovelace", "Grace Hopper"]
    assert all(r.status is CandidateStatus.DRY_RUN for r in records)
    assert "open_composer" not in engine.ui.call_names()
    assert "send" not in engine.ui.call_names()


def test_rate_limit_applies_between_candidates_only() -> None:
    engine = build_engine(FakeRecruiterUi.with_names(*NAMES))

    asyncio.run(engine.orchestrator.run(run_config(max_candidates=2)))

    assert len(engine.waits) == 1
    assert 1 <= engine.waits[0] <= 2
    assert len(engine.events.of("waiting")) == 1


def test_generated_message_is_tuned_and_stored() -> None:
    engine = build_engine(FakeRecruiterUi.with_names("Ada Lovelace"))

    asyncio.run(engine.orchestrator.run(run_config(max_candidates=1)))

    record = engine.candidate_repo.by_name("Ada Lovelace")[0]
    assert record.subject == "Quick question about your work"
    assert "We are building" in (record.message or "")
    assert "We're building" in (record.tuned_message or "")
    generated = engine.events.of("message_generated")[0]
    assert generated["message"] == record.tuned_message


def test_manual_review_parks_candidates_for_approval() -> None:
    engine = build_engine(FakeRecruiterUi.with_names(*NAMES))

    run = asyncio.run(engine.orchestrator.run(run_config(RunMode.MANUAL_REVIEW, max_candidates=3)))

    assert run.succeeded == 3
    assert [r.status for r in engine.candidate_repo.list_pending()] == [CandidateStatus.PENDING_REVIEW] * 3
    assert len(engine.events.of("pending_review")) == 3
    assert "open_composer" not in engine.ui.call_names()


def test_auto_send_sends_and_resets_list_after_each_message() -> None:
    engine = build_engine(FakeRecruiterUi.with_names(*NAMES))

    run = asyncio.run(engine.orchestrator.run(run_config(RunMode.AUTO_SEND, max_candidates=3)))

    assert engine.ui.sent == list(NAMES)
    assert run.succeeded == 3
    assert engine.ui.call_names().count("reset_to_list") == 3
    assert engine.screenshots.labels()[-3:] == ["compose-3", "filled-3", "sent-3"]
    assert all(r.status is CandidateStatus.SENT for r in engine.candidate_repo.all())


def test_auto_send_continues_when_subject_field_is_missing() -> None:
    engine = build_engine(FakeRecruiterUi.with_names("Ada Lovelace", has_subject_field=False))

    run = asyncio.run(engine.orchestrator.run(run_config(RunMode.AUTO_SEND, max_candidates=1)))

    assert run.succeeded == 1
    assert engine.ui.sent == ["Ada Lovelace"]
    assert "subject_field_missing" in engine.logger.messages("warning")


# -- failure containment ----------------------------------------------------


def test_composer_failure_is_contained_and_run_continues() -> None:
    ui = FakeRecruiterUi.with_names(*NAMES, fail_open_for={"Grace Hopper"})
    engine = build_engine(ui)

    run = asyncio.run(engine.orchestrator.run(run_config(RunMode.AUTO_SEND, max_candidates=3)))

    assert run.status is RunStatus.COMPLETED
    assert (run.processed, run.succeeded, run.failed) == (3, 2, 1)
    _assert_counters_balance(run)
    assert ui.sent == ["Ada Lovelace", "Alan Turing"]

    failed = engine.candidate_repo.by_name("Grace Hopper")
    assert len(failed) == 1
    assert failed[0].status is CandidateStatus.ERROR
    assert failed[0].error == "All message compose approaches failed"
    assert (failed[0].screenshot_path or "").startswith("screenshots/error-2")

    errors = engine.events.of("candidate_error")
    assert errors[0]["name"] == "Grace Hopper"
    assert "duplicate_candidate_skipped" in engine.logger.messages()


def test_generator_failure_marks_candidate_error() -> None:
    def fail_first(call: int) -> None:
        if call == 1:
            raise RuntimeError("LLM unavailable")

    engine = build_engine(
        FakeRecruiterUi.with_names("Ada Lovelace", "Grace Hopper"),
        llm=ScriptedLLMClient(on_call=fail_first),
    )

    run = asyncio.run(engine.orchestrator.run(run_config(max_candidates=2)))

    assert (run.processed, run.succeeded, run.failed) == (2, 1, 1)
    ada = engine.candidate_repo.by_name("Ada Lovelace")[0]
    assert ada.status is CandidateStatus.ERROR
    assert ada.error == "LLM unavailable"
    assert engine.candidate_repo.by_name("Grace Hopper")[0].status is CandidateStatus.DRY_RUN


def test_empty_generated_message_is_skipped() -> None:
    engine = build_engine(
        FakeRecruiterUi.with_names("Ada Lovelace"),
        llm=ScriptedLLMClient([""]),
    )

    run = asyncio.run(engine.orchestrator.run(run_config(RunMode.AUTO_SEND, max_candidates=1)))

    assert (run.processed, run.succeeded, run.skipped) == (1, 0, 1)
    record = engine.candidate_repo.all()[0]
    assert record.status is CandidateStatus.SKIPPED
    assert record.error == "Generated message was empty"
    assert "open_composer" not in engine.ui.call_names()


def test_failed_recovery_ends_the_list() -> None:
    ui = FakeRecruiterUi.with_names(
        "Ada Lovelace", "Grace Hopper",
        reset_error=SessionError("Navigation failed"),
    )
    engine = build_engine(ui)

    run = asyncio.run(engine.orchestrator.run(run_config(RunMode.AUTO_SEND, max_candidates=2)))

    assert run.status is RunStatus.COMPLETED
    assert run.processed == 1
    assert ui.sent == ["Ada Lovelace"]
    assert "recovery_failed" in engine.logger.messages("error")


def test_fatal_session_error_ends_run_with_error_status() -> None:
    ui = FakeRecruiterUi.with_names(*NAMES, authenticate_error=LoginTimeout("Login timed out after 300 seconds"))
    engine = build_engine(ui)

    with pytest.raises(LoginTimeout):
        asyncio.run(engine.orchestrator.run(run_config()))

    run = engine.run_repo.get("run-1")
    assert run is not None
    assert run.status is RunStatus.ERROR
    assert run.error == "Login timed out after 300 seconds"
    assert run.finished_at is not None
    assert engine.events.of("run_error")[0]["error"] == "Login timed out after 300 seconds"
    assert not engine.orchestrator.is_running
    assert engine.orchestrator.phase is RunPhase.FINISHED


# -- list handling -----------------------------------------------------------


def test_empty_list_completes_without_processing() -> None:
    engine = build_engine(FakeRecruiterUi([[]]))

    run = asyncio.run(engine.orchestrator.run(run_config()))

    assert run.status is RunStatus.COMPLETED
    assert run.processed == 0
    assert "no-candidates" in engine.screenshots.labels()
    assert engine.events.of("candidates_found")[0]["total"] == 0


def test_duplicate_names_are_processed_once() -> None:
    engine = build_engine(FakeRecruiterUi.with_names("Ada Lovelace", "Ada Lovelace", "Grace Hopper"))

    run = asyncio.run(engine.orchestrator.run(run_config(max_candidates=5)))

    assert run.processed == 2
    assert [r.name for r in engine.candidate_repo.all()] == ["Ada Lovelace", "Grace Hopper"]


def test_no_wait_after_the_last_candidate_when_list_runs_out() -> None:
    engine = build_engine(FakeRecruiterUi.with_names("Ada Lovelace", "Grace Hopper"))

    run = asyncio.run(engine.orchestrator.run(run_config(max_candidates=5)))

    assert run.processed == 2
    assert len(engine.waits) == 1
    assert len(engine.events.of("waiting")) == 1


def test_stop_during_wait_ends_run_before_next_candidate() -> None:
    engine = build_engine(FakeRecruiterUi.with_names(*NAMES))

    def stop_on_wait(event: str) -> None:
        if event == "waiting":
            engine.orchestrator.request_stop()

    engine.events.listeners.append(stop_on_wait)

    run = asyncio.run(engine.orchestrator.run(run_config(max_candidates=3)))

    assert run.status is RunStatus.STOPPED
    assert run.processed == 1
    assert len(engine.waits) == 1
    assert [r.name for r in engine.candidate_repo.all()] == ["Ada Lovelace"]


def test_failed_next_page_click_ends_run_as_completed() -> None:
    ui = FakeRecruiterUi(
        [[candidate("Ada Lovelace")], [candidate("Grace Hopper")]],
        next_page_error=playwright_error("Timeout 30000ms exceeded while clicking Next"),
    )
    engine = build_engine(ui)

    run = asyncio.run(engine.orchestrator.run(run_config(max_candidates=3)))

    assert run.status is RunStatus.COMPLETED
    assert run.error is None
    assert run.processed == 1
    assert "page_advance_failed" in engine.logger.messages("error")
    assert "run_error" not in engine.events.names()


def test_sent_candidate_listed_again_after_reset_is_not_resent() -> None:
    ui = FakeRecruiterUi.with_names("Ada Lovelace", "Grace Hopper", hide_contacted=False)
    engine = build_engine(ui)

    run = asyncio.run(engine.orchestrator.run(run_config(RunMode.AUTO_SEND, max_candidates=5)))

    assert run.status is RunStatus.COMPLETED
    assert (run.processed, run.succeeded) == (2, 2)
    assert ui.sent == ["Ada Lovelace", "Grace Hopper"]
    assert ui.call_names().count("reset_to_list") == 2
    extracted = [arg for name, arg in ui.calls if name == "extract_candidate"]
    assert extracted.count("Ada Lovelace") == 3
    assert engine.logger.messages().count("duplicate_candidate_skipped") == 3
    assert len(engine.candidate_repo.by_name("Ada Lovelace")) == 1


def test_unreadable_names_are_told_apart_by_profile_url() -> None:
    ui = FakeRecruiterUi([[
        CandidateInfo(name="Unknown", profile_url="https://www.linkedin.com/in/first"),
        CandidateInfo(name="Unknown", profile_url="https://www.linkedin.com/in/second"),
        CandidateInfo(name="Unknown", profile_url="https://www.linkedin.com/in/first"),
    ]])
    engine = build_engine(ui)

    run = asyncio.run(engine.orchestrator.run(run_config(max_candidates=5)))

    assert run.processed == 2
    urls = [r.profile_url for r in engine.candidate_repo.all()]
    assert urls == ["https://www.linkedin.com/in/first", "https://www.linkedin.com/in/second"]


def test_pagination_advances_when_page_is_exhausted() -> None:
    ui = FakeRecruiterUi([
        [candidate("Ada Lovelace"), candidate("Grace Hopper")],
        [candidate("Alan Turing")],
    ])
    engine = build_engine(ui)

    run = asyncio.run(engine.orchestrator.run(run_config(max_candidates=3)))

    assert run.processed == 3
    changed = engine.events.of("page_changed")
    assert changed == [{"page": 2, "candidates": 1, "pageIndicator": "page 2"}]


def test_missing_uncontacted_filter_is_not_fatal() -> None:
    engine = build_engine(FakeRecruiterUi.with_names("Ada Lovelace", filter_available=False))

    run = asyncio.run(engine.orchestrator.run(run_config(max_candidates=1)))

    assert run.status is RunStatus.COMPLETED
    assert "uncontacted_filter_unavailable" in engine.logger.messages()


# -- stop --------------------------------------------------------------------


def test_stop_is_honoured_at_next_candidate_boundary() -> None:
    holder: list = []
    engine = build_engine(
        FakeRecruiterUi.with_names(*NAMES),
        llm=ScriptedLLMClient(on_call=lambda call: holder[0].request_stop() if call == 1 else None),
    )
    holder.append(engine.orchestrator)

    run = asyncio.run(engine.orchestrator.run(run_config(max_candidates=3)))

    assert run.status is RunStatus.STOPPED
    assert run.processed == 1
    assert engine.waits == []
    assert "stop_requested" in engine.events.names()
    assert "run_stopped" in engine.events.names()


def test_request_stop_outside_a_run_is_ignored() -> None:
    engine = build_engine(FakeRecruiterUi.with_names("Ada Lovelace"))

    engine.orchestrator.request_stop()
    run = asyncio.run(engine.orchestrator.run(run_config(max_candidates=1)))

    assert run.status is RunStatus.COMPLETED
    assert engine.events.of("stop_requested") == []


def test_events_follow_run_lifecycle_order() -> None:
    engine = build_engine(FakeRecruiterUi.with_names("Ada Lovelace"))

    asyncio.run(engine.orchestrator.run(run_config(max_candidates=1)))

    names = engine.events.names()
    assert names[0] == "run_started"
    assert names.index("candidates_found") < names.index("processing_candidate")
    assert names.index("processing_candidate") < names.index("message_generated")
    assert names[-1] == "run_completed"
    started = engine.events.of("run_started")[0]
    assert started == {"runId": "run-1", "runMode": "dry_run", "maxCandidates": 1}
