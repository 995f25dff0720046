"""Phase resolution for a bare task name."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from taskchain.engine.errors import NoTasksSpecifiedError, UnknownTaskError
from taskchain.engine.handlers import TaskHandler
from taskchain.engine.registry import TaskRegistry, post_phase, pre_phase


@dataclass(frozen=True)
class Phase:
    """One non-empty handler list of a task (pre-, main or post-)."""

    name: str
    handlers: Tuple[TaskHandler, ...]

    def __len__(self) -> int:
        return len(self.handlers)


def phase_names(task: str) -> Tuple[str, str, str]:
    return (pre_phase(task), task, post_phase(task))


def select_tasks(
    registry: TaskRegistry,
    tasks: Optional[Union[str, Sequence[str]]],
) -> List[str]:
    """Normalize the requested task names.

    None or an empty string falls back to the registry's allow-list; any
    other single string is a one-element sequence.

    Raises:
        NoTasksSpecifiedError: No names were given and no allow-list exists.
        TypeError: A requested name is not a string.
    """
    if tasks is None or tasks == "":
        if registry.allowed_tasks is None:
            raise NoTasksSpecifiedError()
        return list(registry.allowed_tasks)

    if isinstance(tasks, str):
        return [tasks]

    names = list(tasks)
    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"Task names must be strings, got {type(name).__name__}")
    return names


def resolve_phases(registry: TaskRegistry, task: str) -> List[Phase]:
    """Return the non-empty phases of ``task`` in pre -> main -> post order.

    Raises:
        UnknownTaskError: ``task`` itself was never registered. An empty list
            created through the allow-list still counts as registered.
    """
    if not registry.is_known(task):
        raise UnknownTaskError(task)

    phases: List[Phase] = []
    for name in phase_names(task):
        handlers = registry.handlers_for(name)
        if handlers:
            phases.append(Phase(name=name, handlers=handlers))
    return phases
