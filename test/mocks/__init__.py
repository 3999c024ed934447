"""
Reusable fakes and in-memory implementations for tests.
"""

from .engine import PROJECT_URL, Engine, build_engine, run_config
from .fake_config_provider import InMemoryConfigProvider
from .fake_dom import FakeElement, FakePage, playwright_error
from .fake_recruiter_ui import FakeRecruiterUi, candidate
from .fake_repositories import InMemoryCandidateRepository, InMemoryRunRepository
from .fake_runtime import (
    FixedClock,
    InMemoryEventSink,
    InMemoryLogger,
    InMemoryScreenshotStore,
    SequentialIdGenerator,
    no_sleep,
)
from .scripted_llm_client import DEFAULT_RESPONSE, ScriptedLLMClient

__all__ = [
    "Engine",
    "build_engine",
    "run_config",
    "PROJECT_URL",
    "FakeRecruiterUi",
    "candidate",
    "FakeElement",
    "FakePage",
    "playwright_error",
    "InMemoryConfigProvider",
    "InMemoryRunRepository",
    "InMemoryCandidateRepository",
    "FixedClock",
    "SequentialIdGenerator",
    "InMemoryLogger",
    "InMemoryEventSink",
    "InMemoryScreenshotStore",
    "no_sleep",
    "ScriptedLLMClient",
    "DEFAULT_RESPONSE",
]
