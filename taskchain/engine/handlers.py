"""Handler normalization.

A handler is anything that can be invoked as ``handler(context, argument)``:
plain functions, coroutine functions, or capability objects exposing a
``run(context, argument)`` method (sync or async). Registration normalizes all
of them into a single :class:`TaskHandler` so executors never branch on
representation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol, runtime_checkable


@runtime_checkable
class HandlerObject(Protocol):
    """Capability object form of a handler."""

    def run(self, context: Any, argument: Any) -> Any:
        ...


@dataclass(frozen=True)
class TaskHandler:
    """Uniformly invocable wrapper around a registered handler."""

    fn: Callable[[Any, Any], Any]
    name: str
    source: Any

    def __call__(self, context: Any, argument: Any) -> Any:
        return self.fn(context, argument)


def _describe(obj: Any) -> str:
    name = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None)
    if name:
        return str(name)
    return type(obj).__name__


def as_handler(obj: Any) -> TaskHandler:
    """Normalize obj into a TaskHandler.

    Raises:
        TypeError: When obj is neither callable nor exposes a callable run().
    """
    if isinstance(obj, TaskHandler):
        return obj

    if not isinstance(obj, type) and isinstance(obj, HandlerObject) and callable(obj.run):
        return TaskHandler(fn=obj.run, name=_describe(obj), source=obj)

    if callable(obj):
        return TaskHandler(fn=obj, name=_describe(obj), source=obj)

    raise TypeError(
        f"Handler must be callable or expose run(context, argument), got {type(obj).__name__}"
    )
