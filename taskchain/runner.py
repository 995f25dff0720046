"""
Task Runner
===========
Public entry point of the task engine.

Key responsibilities:
- Own the task registry and expose registration
- Load task modules from a configured directory
- Run tasks in series (discrete results) or as a pipe (threaded value)
- Apply the configured default timeout

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Union

from loguru import logger

from taskchain.config import RUNNER, TIMEOUTS
from taskchain.engine.pipe import PipeRequest, run_pipe
from taskchain.engine.registry import TaskRegistry
from taskchain.engine.series import SeriesReport, run_series
from taskchain.loader import load_task_modules

TaskNames = Union[str, Sequence[str]]

_UNSET: Any = object()


def _default_tasks_dir() -> Optional[Path]:
    return Path(RUNNER.TASKS_DIR) if RUNNER.TASKS_DIR else None


@dataclass
class TaskRunnerConfig:
    """Configuration for the task runner."""
    # Directory of task modules loaded at construction (None = load nothing)
    tasks_dir: Optional[Path] = field(default_factory=_default_tasks_dir)

    # Verbose phase/registration logging
    debug: bool = RUNNER.DEBUG

    # Per-handler timeout in seconds when a call passes none (0/None = no timeout)
    default_timeout: Optional[float] = TIMEOUTS.DEFAULT_HANDLER or None


class TaskRunner:
    """
    Registers task handlers and executes them phase by phase.

    Usage:
        runner = TaskRunner()
        runner.define_allowed_tasks(["build"], register_pre=True, register_post=True)
        runner.register_handler("build", compile_sources)

        # Series: one result per handler, grouped by phase
        report = await runner.run("build", ctx, args)

        # Pipe: one value threaded through every handler
        value = await runner.pipe("build", initial_value={"files": []}, context=ctx)
    """

    def __init__(
        self,
        config: Optional[TaskRunnerConfig] = None,
        registry: Optional[TaskRegistry] = None,
    ):
        """
        Initialize the runner.

        Args:
            config: Runner configuration
            registry: Existing registry to share (a new one is created otherwise)
        """
        self.config = config or TaskRunnerConfig()
        self.debug = bool(self.config.debug)
        self.registry = registry or TaskRegistry(debug=self.debug)

        if self.config.tasks_dir:
            self.register_tasks_dir(self.config.tasks_dir)

    @property
    def allowed_tasks(self) -> Optional[tuple]:
        return self.registry.allowed_tasks

    def register_handler(self, name: str, handler: Any) -> None:
        """Append ``handler`` to the task or phase ``name``."""
        self.registry.register_handler(name, handler)

    def define_allowed_tasks(
        self,
        names: Iterable[str],
        register_pre: bool = False,
        register_post: bool = False,
    ) -> None:
        """Restrict registration to ``names`` (plus their pre-/post- phases)."""
        self.registry.define_allowed_tasks(names, register_pre, register_post)

    def register_tasks_dir(self, tasks_dir: Union[str, Path]) -> List[str]:
        """Load every task module found under ``tasks_dir``."""
        return load_task_modules(tasks_dir, self.registry, debug=self.debug)

    def _timeout(self, timeout: Optional[float]) -> Optional[float]:
        return self.config.default_timeout if timeout is None else timeout

    async def run(
        self,
        tasks: Optional[TaskNames] = None,
        context: Any = None,
        args: Any = None,
        timeout: Optional[float] = None,
    ) -> SeriesReport:
        """
        Run tasks in series.

        Args:
            tasks: Task name or names; None runs every allowed task.
            context: First argument of every handler.
            args: Second argument of every handler.
            timeout: Per-handler timeout in seconds.

        Returns:
            SeriesReport with one entry per non-empty phase.
        """
        return await run_series(
            self.registry,
            tasks,
            context,
            args,
            self._timeout(timeout),
            debug=self.debug,
        )

    async def pipe(
        self,
        tasks: Optional[TaskNames] = None,
        *,
        initial_value: Any = _UNSET,
        context: Any = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Pipe ``initial_value`` through the handlers of ``tasks``.

        Args:
            tasks: Task name or names; None pipes through every allowed task.
            initial_value: Value handed to the first handler (required).
            context: First argument of every handler.
            timeout: Per-handler timeout in seconds.

        Returns:
            The final pipe value.
        """
        if initial_value is _UNSET:
            raise TypeError("pipe() requires an initial_value")

        request = PipeRequest(
            initial_value=initial_value,
            tasks=tasks,
            context=context,
            timeout=timeout,
        )
        return await self.pipe_request(request)

    async def pipe_request(self, request: PipeRequest) -> Any:
        """Execute a prebuilt PipeRequest."""
        if request.timeout is None and self.config.default_timeout:
            request = replace(request, timeout=self.config.default_timeout)
        return await run_pipe(self.registry, request, debug=self.debug)

    def summary(self) -> str:
        """Human-readable overview of registered tasks."""
        lines = ["# Task Registry Summary", ""]
        allowed = self.registry.allowed_tasks
        lines.append(f"Allowed tasks: {', '.join(allowed) if allowed is not None else '(unrestricted)'}")
        lines.append("")
        lines.append("| Task | Handlers |")
        lines.append("|------|----------|")
        for name in self.registry.task_names():
            handlers = self.registry.handlers_for(name)
            listed = ", ".join(h.name for h in handlers) if handlers else "-"
            lines.append(f"| {name} | {listed} |")
        return "\n".join(lines)


def create_runner(
    tasks_dir: Optional[Union[str, Path]] = None,
    debug: Optional[bool] = None,
    default_timeout: Optional[float] = None,
) -> TaskRunner:
    """Convenience constructor mirroring TaskRunnerConfig fields."""
    config = TaskRunnerConfig()
    if tasks_dir is not None:
        config.tasks_dir = Path(tasks_dir)
    if debug is not None:
        config.debug = debug
    if default_timeout is not None:
        config.default_timeout = default_timeout

    if config.debug:
        logger.debug(f"Creating TaskRunner with tasks_dir={config.tasks_dir}")
    return TaskRunner(config=config)
