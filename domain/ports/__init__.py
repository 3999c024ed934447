from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import Any, Protocol, Sequence, runtime_checkable

from domain.models import (
    AppConfig,
    CandidateInfo,
    CandidateRecord,
    CandidateStatus,
    GeneratedMessage,
    ListPage,
    OutreachMode,
    RunRecord,
    SenderProfile,
)


@runtime_checkable
class RunRepositoryPort(Protocol):
    """Store and query run records."""

    @abstractmethod
    def add(self, record: RunRecord) -> None:
        ...

    @abstractmethod
    def update(self, record: RunRecord) -> None:
        ...

    @abstractmethod
    def get(self, run_id: str) -> RunRecord | None:
        ...

    @abstractmethod
    def latest(self) -> RunRecord | None:
        ...

    @abstractmethod
    def list_recent(self, limit: int = 20) -> Sequence[RunRecord]:
        ...


@runtime_checkable
class CandidateRepositoryPort(Protocol):
    """Store and query candidate records."""

    @abstractmethod
    def add(self, record: CandidateRecord) -> None:
        ...

    @abstractmethod
    def update(self, record: CandidateRecord) -> None:
        ...

    @abstractmethod
    def get(self, candidate_id: str) -> CandidateRecord | None:
        ...

    @abstractmethod
    def list_pending(self) -> Sequence[CandidateRecord]:
        ...

    @abstractmethod
    def list_recent(self, limit: int = 100) -> Sequence[CandidateRecord]:
        ...

    @abstractmethod
    def list_by_status(
        self,
        status: CandidateStatus,
        limit: int = 10,
    ) -> Sequence[CandidateRecord]:
        ...

    @abstractmethod
    def count_by_status(self) -> dict[CandidateStatus, int]:
        ...


@runtime_checkable
class RecruiterUiPort(Protocol):
    """
    High-level operations on the recruiter pipeline UI.

    The concrete implementation wraps a single Playwright page. Element
    handles returned in ``ListPage.items`` are opaque to the domain and
    are only passed back into this port.
    """

    @property
    def is_connected(self) -> bool:
        ...

    async def ensure_session(self) -> None:
        ...

    async def ensure_authenticated(self, target_url: str) -> None:
        ...

    async def apply_uncontacted_filter(self) -> bool:
        ...

    async def load_candidates(self) -> ListPage:
        ...

    async def go_to_next_page(self) -> bool:
        ...

    async def extract_candidate(self, item: Any) -> CandidateInfo:
        ...

    async def open_composer(self, item: Any, expected_name: str | None) -> None:
        ...

    async def open_composer_for_profile(
        self,
        profile_url: str | None,
        expected_name: str | None,
    ) -> None:
        ...

    async def fill_subject(self, text: str) -> bool:
        ...

    async def fill_body(self, text: str) -> None:
        ...

    async def send(self) -> None:
        ...

    async def close_any_dialog(self) -> None:
        ...

    async def reset_to_list(self, project_url: str) -> ListPage:
        ...

    async def take_screenshot(self) -> bytes:
        ...

    async def close(self) -> None:
        ...


@runtime_checkable
class MessageGeneratorPort(Protocol):
    """Candidate attributes in, subject + body out."""

    async def generate(
        self,
        candidate: CandidateInfo,
        mode: OutreachMode,
    ) -> GeneratedMessage:
        ...


@runtime_checkable
class LLMClientPort(Protocol):
    """Thin abstraction over an LLM text completion API."""

    async def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        ...


@runtime_checkable
class EventSinkPort(Protocol):
    """Fire-and-forget progress events. ``publish`` must never block."""

    def publish(self, event: str, **data: Any) -> None:
        ...


@runtime_checkable
class ScreenshotStorePort(Protocol):
    """Stores diagnostic screenshots keyed by label and time."""

    def save_screenshot(
        self,
        label: str,
        image_bytes: bytes,
        taken_at: datetime,
    ) -> str:
        ...


@runtime_checkable
class ConfigProviderPort(Protocol):
    """Reads application configuration."""

    def get_config(self) -> AppConfig:
        ...

    def get_sender_profile(self) -> SenderProfile:
        ...

    def validate(self) -> list[str]:
        ...


@runtime_checkable
class ClockPort(Protocol):
    """Time source for deterministic and easily testable code."""

    def now(self) -> datetime:
        ...


@runtime_checkable
class IdGeneratorPort(Protocol):
    """Generation of stable identifiers for runs and records."""

    def new_run_id(self) -> str:
        ...

    def new_candidate_id(self) -> str:
        ...


@runtime_checkable
class LoggerPort(Protocol):
    """Structured, testable logging abstraction."""

    def info(self, message: str, **fields: Any) -> None:
        ...

    def warning(self, message: str, **fields: Any) -> None:
        ...

    def error(self, message: str, **fields: Any) -> None:
        ...


__all__ = [
    "RunRepositoryPort",
    "CandidateRepositoryPort",
    "RecruiterUiPort",
    "MessageGeneratorPort",
    "LLMClientPort",
    "EventSinkPort",
    "ScreenshotStorePort",
    "ConfigProviderPort",
    "ClockPort",
    "IdGeneratorPort",
    "LoggerPort",
]
