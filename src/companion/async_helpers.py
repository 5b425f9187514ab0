"""Small asyncio helpers shared by the controller and the startup code."""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Coroutine, TypeVar, Union

T = TypeVar("T")

CoroutineSource = Union[Coroutine[Any, Any, Any], Callable[[], Coroutine[Any, Any, Any]]]


def safely_schedule_coroutine(source: CoroutineSource, *, name: str | None = None) -> "asyncio.Task[Any]":
    """
    Start ``source`` as a task on the running loop.

    ``source`` may be a coroutine or a zero-argument factory; a factory is only
    called once a running loop is confirmed, so no coroutine is left unawaited
    when scheduling fails with ``RuntimeError``.
    """
    loop = asyncio.get_running_loop()
    return loop.create_task(_resolve_coroutine(source), name=name)


def _resolve_coroutine(source: CoroutineSource) -> Coroutine[Any, Any, Any]:
    if asyncio.iscoroutine(source):
        return source
    if not callable(source):
        raise TypeError(f"Expected a coroutine or a coroutine factory, got {type(source).__name__}")
    produced = source()
    if not asyncio.iscoroutine(produced):
        raise TypeError(f"Coroutine factory returned {type(produced).__name__}, not a coroutine")
    return produced


async def maybe_await(value: Union[T, Awaitable[T]]) -> T:
    """Await ``value`` if it is awaitable; user callbacks may be sync or async."""
    if inspect.isawaitable(value):
        return await value
    return value
