from __future__ import annotations

import asyncio
import random
from typing import Awaitable, Callable

from domain.ports import EventSinkPort, LoggerPort

Sleep = Callable[[float], Awaitable[None]]


class RateLimiter:
    """Randomised pause between candidates.

    The wait is deliberately not cut short by a stop request: a stop takes
    effect at the next loop boundary, after the full pause has elapsed.
    """

    def __init__(
        self,
        min_seconds: float,
        max_seconds: float,
        *,
        events: EventSinkPort,
        logger: LoggerPort,
        rng: random.Random | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if min_seconds < 0 or max_seconds < min_seconds:
            raise ValueError(
                f"Invalid rate limit window [{min_seconds}, {max_seconds}]",
            )
        self._min = min_seconds
        self._max = max_seconds
        self._events = events
        self._logger = logger
        self._rng = rng or random.Random()
        self._sleep = sleep

    async def wait(self) -> float:
        seconds = self._rng.uniform(self._min, self._max)
        self._logger.info("rate_limit_wait", seconds=round(seconds, 1))
        self._events.publish("waiting", seconds=round(seconds, 1))
        await self._sleep(seconds)
        return seconds
