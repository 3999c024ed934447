"""
Domain layer package.

This package contains pure business logic models and ports that are
independent of any specific infrastructure or frameworks.
"""

from .errors import (  # noqa: F401
    CandidateStateError,
    ComposeError,
    LoginTimeout,
    OutreachError,
    RunAlreadyInProgress,
    SelectorNotFound,
    SessionError,
    WrongCandidatePanel,
)
from .models import (  # noqa: F401
    AppConfig,
    CandidateInfo,
    CandidateRecord,
    CandidateStatus,
    EngineStatus,
    GeneratedMessage,
    ListPage,
    OutreachMode,
    ProgressEvent,
    RunConfig,
    RunHistory,
    RunMode,
    RunPhase,
    RunRecord,
    RunStatus,
    SenderProfile,
    TunedMessage,
)
from .ports import (  # noqa: F401
    CandidateRepositoryPort,
    ClockPort,
    ConfigProviderPort,
    EventSinkPort,
    IdGeneratorPort,
    LLMClientPort,
    LoggerPort,
    MessageGeneratorPort,
    RecruiterUiPort,
    RunRepositoryPort,
    ScreenshotStorePort,
)

__all__ = [
    # Errors
    "OutreachError",
    "SessionError",
    "LoginTimeout",
    "SelectorNotFound",
    "ComposeError",
    "WrongCandidatePanel",
    "CandidateStateError",
    "RunAlreadyInProgress",
    # Models
    "AppConfig",
    "CandidateInfo",
    "CandidateRecord",
    "CandidateStatus",
    "EngineStatus",
    "GeneratedMessage",
    "ListPage",
    "OutreachMode",
    "ProgressEvent",
    "RunConfig",
    "RunHistory",
    "RunMode",
    "RunPhase",
    "RunRecord",
    "RunStatus",
    "SenderProfile",
    "TunedMessage",
    # Ports
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
