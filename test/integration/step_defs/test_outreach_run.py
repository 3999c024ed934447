"""Step definitions for outreach run BDD scenarios."""
from __future__ import annotations

import asyncio

from pytest_bdd import given, parsers, scenarios, then, when

from domain.models import CandidateStatus, RunStatus
from test.mocks import FakeRecruiterUi

from .conftest import OutreachContext, split_names

scenarios("../features/outreach_run.feature")


# -- Given steps ------------------------------------------------------------


@given(parsers.parse('a pipeline with candidates "{names}"'))
def given_pipeline(ctx: OutreachContext, names: str) -> None:
    ctx.ui = FakeRecruiterUi.with_names(*split_names(names))


@given(parsers.parse('the composer fails for "{name}"'))
def given_composer_fails(ctx: OutreachContext, name: str) -> None:
    ctx.ui.fail_open_for.add(name)


# -- When steps -------------------------------------------------------------


@when(parsers.parse('I run outreach in "{mode}" mode for at most {count:d} candidates'))
def when_run(ctx: OutreachContext, mode: str, count: int) -> None:
    facade = ctx.get_engine().facade
    ctx.run = asyncio.run(facade.run_to_completion(run_mode=mode, max_candidates=count))


@when(parsers.parse('I approve the message for "{name}"'))
def when_approve(ctx: OutreachContext, name: str) -> None:
    engine = ctx.get_engine()
    record = next(r for r in engine.facade.pending() if r.name == name)
    asyncio.run(engine.facade.approve(record.id))


# -- Then steps -------------------------------------------------------------


@then(parsers.parse('the run finishes with status "{status}"'))
def then_run_status(ctx: OutreachContext, status: str) -> None:
    assert ctx.run is not None
    assert ctx.run.status is RunStatus(status)
    assert ctx.run.processed == ctx.run.succeeded + ctx.run.failed + ctx.run.skipped


@then(parsers.parse("the run counted {succeeded:d} succeeded and {failed:d} failed"))
def then_run_counters(ctx: OutreachContext, succeeded: int, failed: int) -> None:
    assert ctx.run is not None
    assert (ctx.run.succeeded, ctx.run.failed) == (succeeded, failed)


@then(parsers.parse('{count:d} candidates are recorded as "{status}"'))
def then_candidates_with_status(ctx: OutreachContext, count: int, status: str) -> None:
    records = ctx.get_engine().candidate_repo.all()
    assert len([r for r in records if r.status is CandidateStatus(status)]) == count


@then("no messages were sent")
def then_nothing_sent(ctx: OutreachContext) -> None:
    assert ctx.ui.sent == []


@then(parsers.parse('messages were sent to "{names}"'))
def then_sent_to(ctx: OutreachContext, names: str) -> None:
    assert ctx.ui.sent == split_names(names)


@then(parsers.parse('"{name}" is recorded as "{status}" with a screenshot'))
def then_recorded_with_screenshot(ctx: OutreachContext, name: str, status: str) -> None:
    records = ctx.get_engine().candidate_repo.by_name(name)
    assert len(records) == 1
    assert records[0].status is CandidateStatus(status)
    assert records[0].screenshot_path
    assert records[0].error
