from __future__ import annotations

import os
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from domain.models import CandidateRecord, CandidateStatus, RunMode
from domain.ports import CandidateRepositoryPort
from infra.persistence import SQLiteCandidateRepository, SQLiteRunRepository

CREATED = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def repo(tmp_path: str) -> SQLiteCandidateRepository:
    db = os.path.join(tmp_path, "outreach.db")
    r = SQLiteCandidateRepository(db_path=db)
    yield r
    r.close()


def _make_record(**overrides: object) -> CandidateRecord:
    defaults: dict = dict(
        id="cand-1",
        run_id="run-1",
        name="Ada Lovelace",
        headline="Staff Engineer at Example",
        profile_url="https://www.linkedin.com/in/ada-lovelace",
        run_mode=RunMode.MANUAL_REVIEW,
        created_at=CREATED,
        updated_at=CREATED,
    )
    defaults.update(overrides)
    return CandidateRecord(**defaults)


# -- protocol conformance --------------------------------------------------

def test_conforms_to_candidate_repository_port(repo: SQLiteCandidateRepository) -> None:
    assert isinstance(repo, CandidateRepositoryPort)


# -- add / get / update -----------------------------------------------------

def test_add_and_get(repo: SQLiteCandidateRepository) -> None:
    record = _make_record()
    repo.add(record)

    loaded = repo.get("cand-1")
    assert loaded == record
    assert loaded is not None and loaded.status is CandidateStatus.PENDING
    assert loaded.subject is None


def test_get_returns_none_for_missing(repo: SQLiteCandidateRepository) -> None:
    assert repo.get("nonexistent") is None


def test_update_stores_messages_and_diagnostics(repo: SQLiteCandidateRepository) -> None:
    repo.add(_make_record())
    updated = replace(
        _make_record(),
        status=CandidateStatus.ERROR,
        subject="Quick question",
        message="Hi Ada, we are building ...",
        tuned_subject="Quick question",
        tuned_message="Hi Ada, we're building ...",
        error="Could not find Send button",
        screenshot_path="screenshots/error-1-1748779200000.png",
        updated_at=CREATED + timedelta(seconds=30),
    )

    repo.update(updated)

    assert repo.get("cand-1") == updated


# -- queries ----------------------------------------------------------------

def test_list_pending_returns_only_review_items_oldest_first(
    repo: SQLiteCandidateRepository,
) -> None:
    repo.add(_make_record(id="c-1", status=CandidateStatus.PENDING_REVIEW, created_at=CREATED))
    repo.add(_make_record(id="c-2", status=CandidateStatus.SENT))
    repo.add(
        _make_record(
            id="c-3",
            status=CandidateStatus.PENDING_REVIEW,
            created_at=CREATED - timedelta(minutes=5),
        )
    )

    assert [r.id for r in repo.list_pending()] == ["c-3", "c-1"]


def test_list_recent_is_newest_first(repo: SQLiteCandidateRepository) -> None:
    for i in range(4):
        repo.add(_make_record(id=f"c-{i}", created_at=CREATED + timedelta(minutes=i)))

    assert [r.id for r in repo.list_recent(limit=2)] == ["c-3", "c-2"]


def test_list_by_status_and_counts(repo: SQLiteCandidateRepository) -> None:
    repo.add(_make_record(id="c-1", status=CandidateStatus.ERROR, error="first"))
    repo.add(_make_record(id="c-2", status=CandidateStatus.SENT))
    repo.add(_make_record(id="c-3", status=CandidateStatus.ERROR, error="second"))

    failures = repo.list_by_status(CandidateStatus.ERROR)
    assert [r.error for r in failures] == ["second", "first"]
    assert len(repo.list_by_status(CandidateStatus.ERROR, limit=1)) == 1
    assert repo.count_by_status() == {CandidateStatus.ERROR: 2, CandidateStatus.SENT: 1}


def test_run_and_candidate_tables_share_one_database(tmp_path: str) -> None:
    db = os.path.join(tmp_path, "outreach.db")
    runs = SQLiteRunRepository(db_path=db)
    candidates = SQLiteCandidateRepository(db_path=db)
    try:
        candidates.add(_make_record())
        assert runs.latest() is None
        assert candidates.get("cand-1") is not None
    finally:
        candidates.close()
        runs.close()
