"""
Task Registry
=============
Owns the mapping from task name to its ordered handler list and enforces the
optional allow-list of bare task names.

Handler lists are append-only: registration order is execution order.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

from loguru import logger

from taskchain.engine.errors import TaskNotAllowedError
from taskchain.engine.handlers import TaskHandler, as_handler


PRE_PREFIX = "pre-"
POST_PREFIX = "post-"


def pre_phase(task: str) -> str:
    return PRE_PREFIX + task


def post_phase(task: str) -> str:
    return POST_PREFIX + task


def bare_task_name(name: str) -> Optional[str]:
    """Return the bare task for a pre-/post- phase name, or None."""
    for prefix in (PRE_PREFIX, POST_PREFIX):
        if name.startswith(prefix) and len(name) > len(prefix):
            return name[len(prefix):]
    return None


class TaskRegistry:
    """
    Registry of task and phase handler lists.

    Provides:
    - Append-only handler registration
    - Allow-list definition with optional pre-/post- phase lists
    - Lookup of handler lists and known names

    The registry is not synchronized; finish registration before running.
    """

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._tasks: Dict[str, List[TaskHandler]] = {}
        self._allowed: Optional[Tuple[str, ...]] = None

    @property
    def allowed_tasks(self) -> Optional[Tuple[str, ...]]:
        """The active allow-list, or None when registration is unrestricted."""
        return self._allowed

    def define_allowed_tasks(
        self,
        names: Iterable[str],
        register_pre: bool = False,
        register_post: bool = False,
    ) -> None:
        """
        Establish the allow-list as exactly ``names``.

        Creates an empty handler list for each name (and its pre-/post- phases
        when requested) unless one already exists. Calling this again replaces
        the allow-list; handlers registered earlier are kept.
        """
        if isinstance(names, str):
            names = [names]

        allowed: List[str] = []
        for task in names:
            task = _validate_name(task)
            if register_pre:
                self._tasks.setdefault(pre_phase(task), [])
            self._tasks.setdefault(task, [])
            if register_post:
                self._tasks.setdefault(post_phase(task), [])
            if task not in allowed:
                allowed.append(task)

        if self._allowed is not None and self.debug:
            logger.debug(f"Replacing allowed tasks {list(self._allowed)} with {allowed}")
        self._allowed = tuple(allowed)

    def register_handler(self, name: str, handler: Any) -> None:
        """
        Append a handler to the list for ``name``.

        Raises:
            TaskNotAllowedError: An allow-list is active and ``name`` is not
                known and is not a pre-/post- phase of an allowed task.
            TypeError: ``handler`` is not invocable.
        """
        name = _validate_name(name)
        normalized = as_handler(handler)

        if self.debug:
            logger.debug(f"Register new task {name}")

        if name not in self._tasks:
            if self._allowed is not None and not self._is_allowed_phase(name):
                raise TaskNotAllowedError(name, self._tasks.keys())
            self._tasks[name] = []

        self._tasks[name].append(normalized)

    def handlers_for(self, name: str) -> Tuple[TaskHandler, ...]:
        """Ordered handlers for ``name``; empty when unregistered."""
        return tuple(self._tasks.get(name, ()))

    def is_known(self, name: str) -> bool:
        """True when ``name`` has a (possibly empty) handler list."""
        return name in self._tasks

    def task_names(self) -> List[str]:
        """All known task and phase names in creation order."""
        return list(self._tasks.keys())

    def _is_allowed_phase(self, name: str) -> bool:
        bare = bare_task_name(name)
        return bare is not None and self._allowed is not None and bare in self._allowed

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def __repr__(self) -> str:
        return f"TaskRegistry(tasks={self.task_names()!r}, allowed={self._allowed!r})"


def _validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"Task name must be a non-empty string, got {name!r}")
    return name
