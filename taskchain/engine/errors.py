"""Task engine errors.

Every error raised by the engine itself derives from TaskError. Exceptions
raised by handlers are never wrapped: they reach the caller unchanged.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Tuple


class TaskError(RuntimeError):
    """Base class for task engine failures."""


class UnknownTaskError(TaskError):
    """Requested bare task name was never registered."""

    def __init__(self, task: str):
        self.task = task
        super().__init__(f"Task name {task} not defined!")


class TaskNotAllowedError(TaskError):
    """Registration attempted for a name outside the allow-list."""

    def __init__(self, task: str, known: Iterable[str]):
        self.task = task
        self.known: Tuple[str, ...] = tuple(known)
        super().__init__(
            f"Task name {task} not defined!\nAllowed tasks are: {', '.join(self.known)}"
        )


class NoTasksSpecifiedError(TaskError):
    """Neither explicit task names nor an allow-list are available."""

    def __init__(self, message: str = "Set allowed tasks or pass task names explicitly"):
        super().__init__(message)


class InvalidPipeValueError(TaskError):
    """A pipe phase produced a falsy value."""

    def __init__(self, phase: str, value: Any):
        self.phase = phase
        self.value = value
        super().__init__(
            f"Pipe error in phase {phase}: returned data ({value!r}) is not a valid pipe data object"
        )


class HandlerTimeoutError(TaskError, TimeoutError):
    """A handler invocation exceeded its allotted time."""

    def __init__(self, timeout: float, phase: Optional[str] = None):
        self.timeout = timeout
        self.phase = phase
        where = f" in phase {phase}" if phase else ""
        super().__init__(f"Handler{where} timed out after {timeout}s")


class TaskModuleError(TaskError):
    """A task module could not be loaded or does not expose register()."""

    def __init__(self, module_path: str, reason: str):
        self.module_path = module_path
        self.reason = reason
        super().__init__(f"Failed to load task module {module_path}: {reason}")
