"""SQLite-backed persistence adapters for domain repository ports."""

from .sqlite_candidate_repository import SQLiteCandidateRepository
from .sqlite_run_repository import SQLiteRunRepository

__all__ = [
    "SQLiteRunRepository",
    "SQLiteCandidateRepository",
]
