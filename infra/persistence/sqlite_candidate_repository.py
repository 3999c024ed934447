from __future__ import annotations

import sqlite3
from typing import Sequence

from domain.models import CandidateRecord, CandidateStatus, RunMode
from infra.persistence._datetime import dt_to_iso, iso_to_dt

_COLUMNS = (
    "id, run_id, name, headline, profile_url, run_mode, status, subject, message, "
    "tuned_subject, tuned_message, error, screenshot_path, created_at, updated_at"
)


class SQLiteCandidateRepository:
    """SQLite-backed implementation of ``CandidateRepositoryPort``."""

    _SCHEMA_SQL = """\
    CREATE TABLE IF NOT EXISTS candidates (
        id              TEXT PRIMARY KEY,
        run_id          TEXT NOT NULL,
        name            TEXT NOT NULL,
        headline        TEXT NOT NULL DEFAULT '',
        profile_url     TEXT NOT NULL DEFAULT '',
        run_mode        TEXT NOT NULL,
        status          TEXT NOT NULL,
        subject         TEXT,
        message         TEXT,
        tuned_subject   TEXT,
        tuned_message   TEXT,
        error           TEXT,
        screenshot_path TEXT,
        created_at      TEXT,
        updated_at      TEXT
    );
    CREATE INDEX IF NOT EXISTS idx_candidates_status ON candidates (status);
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        self._conn = sqlite3.connect(db_path)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(self._SCHEMA_SQL)

    def add(self, record: CandidateRecord) -> None:
        self._conn.execute(
            f"INSERT INTO candidates ({_COLUMNS}) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            self._record_to_row(record),
        )
        self._conn.commit()

    def update(self, record: CandidateRecord) -> None:
        row = self._record_to_row(record)
        self._conn.execute(
            "UPDATE candidates SET "
            "run_id=?, name=?, headline=?, profile_url=?, run_mode=?, status=?, "
            "subject=?, message=?, tuned_subject=?, tuned_message=?, error=?, "
            "screenshot_path=?, created_at=?, updated_at=? "
            "WHERE id=?",
            (*row[1:], row[0]),
        )
        self._conn.commit()

    def get(self, candidate_id: str) -> CandidateRecord | None:
        row = self._conn.execute(
            f"SELECT {_COLUMNS} FROM candidates WHERE id = ?",
            (candidate_id,),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_record(row)

    def list_pending(self) -> Sequence[CandidateRecord]:
        rows = self._conn.execute(
            f"SELECT {_COLUMNS} FROM candidates WHERE status = ? ORDER BY created_at, rowid",
            (CandidateStatus.PENDING_REVIEW.value,),
        ).fetchall()
        return [self._row_to_record(r) for r in rows]

    def list_recent(self, limit: int = 100) -> Sequence[CandidateRecord]:
        rows = self._conn.execute(
            f"SELECT {_COLUMNS} FROM candidates ORDER BY created_at DESC, rowid DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [self._row_to_record(r) for r in rows]

    def list_by_status(
        self,
        status: CandidateStatus,
        limit: int = 10,
    ) -> Sequence[CandidateRecord]:
        rows = self._conn.execute(
            f"SELECT {_COLUMNS} FROM candidates WHERE status = ? "
            "ORDER BY rowid DESC LIMIT ?",
            (status.value, limit),
        ).fetchall()
        return [self._row_to_record(r) for r in rows]

    def count_by_status(self) -> dict[CandidateStatus, int]:
        rows = self._conn.execute(
            "SELECT status, COUNT(*) FROM candidates GROUP BY status",
        ).fetchall()
        return {CandidateStatus(status): int(count) for status, count in rows}

    def close(self) -> None:
        self._conn.close()

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _record_to_row(r: CandidateRecord) -> tuple[object, ...]:
        return (
            r.id,
            r.run_id,
            r.name,
            r.headline,
            r.profile_url,
            r.run_mode.value,
            r.status.value,
            r.subject,
            r.message,
            r.tuned_subject,
            r.tuned_message,
            r.error,
            r.screenshot_path,
            dt_to_iso(r.created_at),
            dt_to_iso(r.updated_at),
        )

    @staticmethod
    def _row_to_record(row: tuple[object, ...]) -> CandidateRecord:
        return CandidateRecord(
            id=str(row[0]),
            run_id=str(row[1]),
            name=str(row[2]),
            headline=str(row[3] or ""),
            profile_url=str(row[4] or ""),
            run_mode=RunMode(row[5]),
            status=CandidateStatus(row[6]),
            subject=_text(row[7]),
            message=_text(row[8]),
            tuned_subject=_text(row[9]),
            tuned_message=_text(row[10]),
            error=_text(row[11]),
            screenshot_path=_text(row[12]),
            created_at=iso_to_dt(row[13]),
            updated_at=iso_to_dt(row[14]),
        )


def _text(value: object) -> str | None:
    return str(value) if value is not None else None
