"""Infrastructure adapters – concrete implementations of domain ports."""

from .browser import PlaywrightRecruiterUi, PlaywrightSessionController
from .config import FileSystemConfigProvider
from .events import ConsoleEventSink, ProgressBroadcaster
from .llm import OpenAIChatClient
from .logs import FileSystemScreenshotStore
from .persistence import SQLiteCandidateRepository, SQLiteRunRepository
from .runtime import StructuredLogger, SystemClock, UuidIdGenerator

__all__ = [
    "PlaywrightSessionController",
    "PlaywrightRecruiterUi",
    "FileSystemConfigProvider",
    "ProgressBroadcaster",
    "ConsoleEventSink",
    "OpenAIChatClient",
    "FileSystemScreenshotStore",
    "SQLiteRunRepository",
    "SQLiteCandidateRepository",
    "SystemClock",
    "UuidIdGenerator",
    "StructuredLogger",
]
