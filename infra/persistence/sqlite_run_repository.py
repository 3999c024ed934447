from __future__ import annotations

import sqlite3
from typing import Sequence

from domain.models import RunMode, RunRecord, RunStatus
from infra.persistence._datetime import dt_to_iso, iso_to_dt

_COLUMNS = (
    "id, project_url, run_mode, max_candidates, processed, succeeded, "
    "failed, skipped, status, started_at, finished_at, error"
)


class SQLiteRunRepository:
    """
    SQLite-backed implementation of ``RunRepositoryPort``.

    One row per orchestrator run; counters are rewritten after every
    candidate so an interrupted process still leaves accurate totals.
    """

    _SCHEMA_SQL = """\
    CREATE TABLE IF NOT EXISTS runs (
        id             TEXT PRIMARY KEY,
        project_url    TEXT NOT NULL,
        run_mode       TEXT NOT NULL,
        max_candidates INTEGER NOT NULL,
        processed      INTEGER NOT NULL DEFAULT 0,
        succeeded      INTEGER NOT NULL DEFAULT 0,
        failed         INTEGER NOT NULL DEFAULT 0,
        skipped        INTEGER NOT NULL DEFAULT 0,
        status         TEXT NOT NULL,
        started_at     TEXT,
        finished_at    TEXT,
        error          TEXT
    );
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        self._conn = sqlite3.connect(db_path)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(self._SCHEMA_SQL)

    def add(self, record: RunRecord) -> None:
        self._conn.execute(
            f"INSERT INTO runs ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            self._record_to_row(record),
        )
        self._conn.commit()

    def update(self, record: RunRecord) -> None:
        row = self._record_to_row(record)
        self._conn.execute(
            "UPDATE runs SET "
            "project_url=?, run_mode=?, max_candidates=?, processed=?, succeeded=?, "
            "failed=?, skipped=?, status=?, started_at=?, finished_at=?, error=? "
            "WHERE id=?",
            (*row[1:], row[0]),
        )
        self._conn.commit()

    def get(self, run_id: str) -> RunRecord | None:
        row = self._conn.execute(
            f"SELECT {_COLUMNS} FROM runs WHERE id = ?",
            (run_id,),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_record(row)

    def latest(self) -> RunRecord | None:
        recent = self.list_recent(limit=1)
        return recent[0] if recent else None

    def list_recent(self, limit: int = 20) -> Sequence[RunRecord]:
        rows = self._conn.execute(
            f"SELECT {_COLUMNS} FROM runs ORDER BY started_at DESC, rowid DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [self._row_to_record(r) for r in rows]

    def close(self) -> None:
        self._conn.close()

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _record_to_row(r: RunRecord) -> tuple[object, ...]:
        return (
            r.id,
            r.project_url,
            r.run_mode.value,
            r.max_candidates,
            r.processed,
            r.succeeded,
            r.failed,
            r.skipped,
            r.status.value,
            dt_to_iso(r.started_at),
            dt_to_iso(r.finished_at),
            r.error,
        )

    @staticmethod
    def _row_to_record(row: tuple[object, ...]) -> RunRecord:
        return RunRecord(
            id=str(row[0]),
            project_url=str(row[1]),
            run_mode=RunMode(row[2]),
            max_candidates=int(row[3]),
            processed=int(row[4]),
            succeeded=int(row[5]),
            failed=int(row[6]),
            skipped=int(row[7]),
            status=RunStatus(row[8]),
            started_at=iso_to_dt(row[9]),
            finished_at=iso_to_dt(row[10]),
            error=str(row[11]) if row[11] else None,
        )
