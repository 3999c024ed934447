from __future__ import annotations

import asyncio

import pytest

from domain.errors import LoginTimeout, RunAlreadyInProgress
from domain.models import CandidateStatus, OutreachMode, RunMode, RunPhase, RunStatus
from test.mocks import FakeRecruiterUi, build_engine, run_config


def test_start_run_returns_id_and_runs_in_background() -> None:
    engine = build_engine(FakeRecruiterUi.with_names("Ada Lovelace", "Grace Hopper"))

    async def scenario():
        run_id = await engine.facade.start_run(max_candidates=1)
        record = await engine.facade.wait_for_run()
        return run_id, record

    run_id, record = asyncio.run(scenario())

    assert run_id == "run-1"
    assert record.id == "run-1"
    assert record.status is RunStatus.COMPLETED
    assert record.processed == 1
    assert not engine.facade.is_running


def test_only_one_run_and_no_approval_while_running() -> None:
    engine = build_engine(FakeRecruiterUi.with_names("Ada Lovelace"))

    async def scenario():
        engine.ui.session_gate = asyncio.Event()
        await engine.facade.start_run()
        with pytest.raises(RunAlreadyInProgress):
            await engine.facade.start_run()
        with pytest.raises(RunAlreadyInProgress):
            await engine.facade.approve("cand-1")
        status = engine.facade.status()
        engine.ui.session_gate.set()
        await engine.facade.wait_for_run()
        return status

    status = asyncio.run(scenario())

    assert status.running
    assert status.phase is RunPhase.STARTING
    assert status.current_run is not None
    assert status.current_run.id == "run-1"
    assert not status.browser_connected


def test_stop_run_ends_active_run() -> None:
    engine = build_engine(FakeRecruiterUi.with_names("Ada Lovelace", "Grace Hopper"))

    async def scenario():
        engine.ui.session_gate = asyncio.Event()
        await engine.facade.start_run()
        stopped = engine.facade.stop_run()
        engine.ui.session_gate.set()
        return stopped, await engine.facade.wait_for_run()

    stopped, record = asyncio.run(scenario())

    assert stopped
    assert record.status is RunStatus.STOPPED
    assert record.processed == 0
    assert engine.facade.stop_run() is False


def test_failed_run_is_logged_not_raised() -> None:
    ui = FakeRecruiterUi.with_names("Ada Lovelace", authenticate_error=LoginTimeout("Login timed out"))
    engine = build_engine(ui)

    record = asyncio.run(engine.facade.run_to_completion())

    assert record is None
    assert "run_task_failed" in engine.logger.messages("error")
    assert engine.facade.status().current_run.status is RunStatus.ERROR


def test_build_run_config_applies_overrides_and_ignores_none() -> None:
    engine = build_engine(FakeRecruiterUi())

    config = engine.facade.build_run_config(
        run_mode="auto_send",
        outreach_mode="sales",
        max_candidates=None,
    )

    assert config.run_mode is RunMode.AUTO_SEND
    assert config.outreach_mode is OutreachMode.SALES
    assert config.max_candidates == 20


def test_queries_reflect_repositories() -> None:
    engine = build_engine(FakeRecruiterUi.with_names("Ada Lovelace", fail_open_for={"Ada Lovelace"}))
    asyncio.run(engine.orchestrator.run(run_config(RunMode.MANUAL_REVIEW, max_candidates=1)))
    asyncio.run(engine.orchestrator.run(run_config(RunMode.AUTO_SEND, max_candidates=1)))

    history = engine.facade.history()
    assert [r.id for r in history.runs] == ["run-2", "run-1"]
    assert [p.name for p in engine.facade.pending()] == ["Ada Lovelace"]
    failures = engine.facade.failures()
    assert [f.name for f in failures] == ["Ada Lovelace"]
    assert engine.facade.status_counts() == {
        CandidateStatus.PENDING_REVIEW: 1,
        CandidateStatus.ERROR: 1,
    }
    assert engine.facade.status().pending_review == 1


def test_shutdown_closes_browser() -> None:
    engine = build_engine(FakeRecruiterUi())

    asyncio.run(engine.facade.shutdown())

    assert engine.ui.call_names() == ["close"]
