"""
Domain services.

These services orchestrate higher-level workflows while depending only on
domain models and ports so that infrastructure and UI layers can remain thin.
"""

from .diagnostics import DiagnosticsRecorder  # noqa: F401
from .message_generator import MessageGenerator, parse_recruiter_response
from .message_tuner import MessageTuner
from .outreach_run import OutreachOrchestrator
from .rate_limiter import RateLimiter
from .review import ReviewService
from .run_modes import (
    AutoSendHandler,
    CandidateWork,
    DryRunHandler,
    ManualReviewHandler,
    ModeOutcome,
    build_mode_handler,
)

__all__ = [
    "DiagnosticsRecorder",
    "MessageGenerator",
    "parse_recruiter_response",
    "MessageTuner",
    "OutreachOrchestrator",
    "RateLimiter",
    "ReviewService",
    "CandidateWork",
    "ModeOutcome",
    "DryRunHandler",
    "ManualReviewHandler",
    "AutoSendHandler",
    "build_mode_handler",
]
