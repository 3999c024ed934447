from __future__ import annotations

import asyncio
from collections import deque
from typing import Any, Protocol, runtime_checkable

from domain.models import ProgressEvent
from domain.ports import ClockPort, LoggerPort


@runtime_checkable
class ProgressSubscriber(Protocol):
    """Receives progress events, one at a time, from its own queue."""

    async def deliver(self, event: ProgressEvent) -> None:
        ...


class ProgressBroadcaster:
    """
    Fan-out of orchestrator progress events to any number of subscribers.

    ``publish`` never awaits: each subscriber has a bounded queue drained by
    its own task, and an event that does not fit is dropped for that
    subscriber only. A subscriber that raises keeps receiving later events.
    """

    def __init__(
        self,
        *,
        clock: ClockPort,
        logger: LoggerPort,
        max_queue: int = 100,
        history_size: int = 200,
    ) -> None:
        self._clock = clock
        self._logger = logger
        self._max_queue = max_queue
        self._history: deque[ProgressEvent] = deque(maxlen=history_size)
        self._queues: list[tuple[ProgressSubscriber, asyncio.Queue[ProgressEvent]]] = []
        self._tasks: list[asyncio.Task[None]] = []
        self._started = False

    def subscribe(self, subscriber: ProgressSubscriber) -> None:
        queue: asyncio.Queue[ProgressEvent] = asyncio.Queue(maxsize=self._max_queue)
        self._queues.append((subscriber, queue))
        if self._started:
            self._tasks.append(asyncio.create_task(self._drain(subscriber, queue)))

    def publish(self, event: str, **data: Any) -> None:
        progress = ProgressEvent(event=event, timestamp=self._clock.now(), data=data)
        self._history.append(progress)
        for subscriber, queue in self._queues:
            try:
                queue.put_nowait(progress)
            except asyncio.QueueFull:
                self._logger.warning(
                    "progress_event_dropped",
                    subscriber=type(subscriber).__name__,
                    event=event,
                )

    def recent(self, limit: int = 50) -> list[ProgressEvent]:
        if limit <= 0:
            return []
        return list(self._history)[-limit:]

    async def start(self) -> None:
        if self._started:
            return
        self._started = True
        for subscriber, queue in self._queues:
            self._tasks.append(asyncio.create_task(self._drain(subscriber, queue)))

    async def aclose(self, *, drain_timeout_seconds: float = 5.0) -> None:
        """Give subscribers a bounded chance to catch up, then stop their tasks."""
        if self._started:
            pending = [queue.join() for _, queue in self._queues]
            if pending:
                try:
                    await asyncio.wait_for(asyncio.gather(*pending), drain_timeout_seconds)
                except asyncio.TimeoutError:
                    self._logger.warning("progress_drain_timeout")
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        self._started = False

    async def _drain(
        self,
        subscriber: ProgressSubscriber,
        queue: asyncio.Queue[ProgressEvent],
    ) -> None:
        while True:
            event = await queue.get()
            try:
                await subscriber.deliver(event)
            except Exception as exc:
                self._logger.error(
                    "progress_delivery_failed",
                    subscriber=type(subscriber).__name__,
                    event=event.event,
                    error=str(exc),
                )
            finally:
                queue.task_done()
