from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Sequence


class RunMode(str, Enum):
    """What happens to a candidate once its message has been generated."""

    DRY_RUN = "dry_run"
    MANUAL_REVIEW = "manual_review"
    AUTO_SEND = "auto_send"


class OutreachMode(str, Enum):
    """Prompt/output convention used by the text generator."""

    RECRUITER = "recruiter"
    SALES = "sales"


class CandidateStatus(str, Enum):
    """Lifecycle states for a single candidate record."""

    PENDING = "pending"
    DRY_RUN = "dry_run"
    PENDING_REVIEW = "pending_review"
    SENT = "sent"
    SKIPPED = "skipped"
    ERROR = "error"


class RunStatus(str, Enum):
    """Lifecycle states for a run. Terminal values are never revisited."""

    RUNNING = "running"
    COMPLETED = "completed"
    STOPPED = "stopped"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self is not RunStatus.RUNNING


class RunPhase(str, Enum):
    """Where the orchestrator currently is in its state machine."""

    IDLE = "idle"
    STARTING = "starting"
    AUTHENTICATING = "authenticating"
    FILTERING = "filtering"
    LOADING = "loading"
    PROCESSING = "processing"
    RATE_LIMITING = "rate_limiting"
    FINISHED = "finished"


@dataclass(frozen=True)
class CandidateInfo:
    """Candidate attributes read from one list item in the pipeline UI."""

    name: str = "Unknown"
    headline: str = ""
    profile_url: str = ""

    @property
    def first_name(self) -> str:
        parts = self.name.split()
        return parts[0] if parts else ""


@dataclass(frozen=True)
class CandidateRecord:
    """
    Persistent record of one candidate seen during a run.

    Created with ``status=pending`` at extraction time; the orchestrator
    moves it to exactly one terminal-for-this-run status.
    """

    id: str
    run_id: str
    name: str
    headline: str
    profile_url: str
    run_mode: RunMode
    status: CandidateStatus = CandidateStatus.PENDING
    subject: str | None = None
    message: str | None = None
    tuned_subject: str | None = None
    tuned_message: str | None = None
    error: str | None = None
    screenshot_path: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class RunRecord:
    """
    One invocation of the orchestrator.

    ``processed == succeeded + failed + skipped`` after every loop body.
    """

    id: str
    project_url: str
    run_mode: RunMode
    max_candidates: int
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    status: RunStatus = RunStatus.RUNNING
    started_at: datetime | None = None
    finished_at: datetime | None = None
    error: str | None = None


@dataclass(frozen=True)
class GeneratedMessage:
    """Raw generator output. ``subject`` may be empty."""

    subject: str
    body: str


@dataclass(frozen=True)
class TunedMessage:
    body: str
    subject: str | None = None


@dataclass(frozen=True)
class ListPage:
    """Element handles currently loaded in the candidate list."""

    items: Sequence[Any] = field(default_factory=tuple)
    indicator: str = "unknown"

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class ProgressEvent:
    """Timestamped event pushed to the progress broadcaster."""

    event: str
    timestamp: datetime
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    def to_dict(self) -> dict[str, Any]:
        return {"event": self.event, **self.data, "timestamp": self.timestamp.isoformat()}


@dataclass(frozen=True)
class SenderProfile:
    """Who the outreach is written on behalf of."""

    full_name: str = ""
    company: str = ""
    offer: str = ""


@dataclass(frozen=True)
class RunConfig:
    """Parameters for one orchestrator run."""

    project_url: str
    run_mode: RunMode = RunMode.DRY_RUN
    max_candidates: int = 20
    rate_limit_min: float = 20.0
    rate_limit_max: float = 60.0
    outreach_mode: OutreachMode = OutreachMode.RECRUITER


@dataclass(frozen=True)
class AppConfig:
    """Application-level configuration loaded from config.json."""

    openai_key: str
    project_url: str
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o"
    run_mode: RunMode = RunMode.DRY_RUN
    outreach_mode: OutreachMode = OutreachMode.RECRUITER
    max_candidates: int = 20
    rate_limit_min: float = 20.0
    rate_limit_max: float = 60.0
    user_data_dir: str = "./browser-data"
    screenshots_dir: str = "./screenshots"
    login_timeout_seconds: float = 300.0
    bot_token: str | None = None
    telegram_chat_id: str | None = None

    def to_run_config(self, **overrides: Any) -> RunConfig:
        values: dict[str, Any] = {
            "project_url": self.project_url,
            "run_mode": self.run_mode,
            "max_candidates": self.max_candidates,
            "rate_limit_min": self.rate_limit_min,
            "rate_limit_max": self.rate_limit_max,
            "outreach_mode": self.outreach_mode,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        values["run_mode"] = RunMode(values["run_mode"])
        values["outreach_mode"] = OutreachMode(values["outreach_mode"])
        return RunConfig(**values)


@dataclass(frozen=True)
class EngineStatus:
    """Snapshot returned by the control plane's ``status`` operation."""

    running: bool
    current_run: RunRecord | None
    browser_connected: bool
    pending_review: int
    phase: RunPhase = RunPhase.IDLE


@dataclass(frozen=True)
class RunHistory:
    candidates: Sequence[CandidateRecord]
    runs: Sequence[RunRecord]


__all__ = [
    "RunMode",
    "OutreachMode",
    "CandidateStatus",
    "RunStatus",
    "RunPhase",
    "CandidateInfo",
    "CandidateRecord",
    "RunRecord",
    "GeneratedMessage",
    "TunedMessage",
    "ListPage",
    "ProgressEvent",
    "SenderProfile",
    "RunConfig",
    "AppConfig",
    "EngineStatus",
    "RunHistory",
]
