"""Ordered fallback evaluation.

A strategy is a zero-argument coroutine factory returning a result or
``None``. Strategies are tried in order and the first non-``None`` result
wins; later strategies are never started.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Iterable, Optional, Tuple, TypeVar

T = TypeVar("T")

Strategy = Callable[[], Awaitable[Optional[T]]]


async def first_match(
    strategies: Iterable[Tuple[str, Strategy[T]]],
) -> Tuple[str, T] | None:
    """Return ``(name, result)`` for the first strategy that yields a result."""
    for name, strategy in strategies:
        result = await strategy()
        if result is not None:
            return name, result
    return None
