from __future__ import annotations

import json
import sys
from typing import TextIO

from domain.models import ProgressEvent


class ConsoleEventSink:
    """Prints each progress event as a JSON line."""

    def __init__(self, *, stream: TextIO | None = None) -> None:
        self._stream = stream

    async def deliver(self, event: ProgressEvent) -> None:
        print(
            json.dumps(event.to_dict(), sort_keys=True, default=str),
            file=self._stream or sys.stdout,
            flush=True,
        )
