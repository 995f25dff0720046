"""
Pipe Executor
=============
Threads a single value through every handler of every non-empty phase of the
requested tasks. Handlers inside a phase are chained: handler i+1 receives the
value returned by handler i.

After each phase the value must be truthy. A falsy value is treated as a
broken data contract and aborts the pipe before any further phase runs.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

from loguru import logger

from taskchain.engine.errors import InvalidPipeValueError
from taskchain.engine.guard import invoke_handler
from taskchain.engine.outcome import PhaseOutcome
from taskchain.engine.phases import Phase, resolve_phases, select_tasks
from taskchain.engine.registry import TaskRegistry
from taskchain.tracing import safe_set_span_attributes, task_span


@dataclass(frozen=True)
class PipeRequest:
    """Explicit arguments of a pipe call."""

    initial_value: Any
    tasks: Optional[Union[str, Sequence[str]]] = None
    context: Any = None
    timeout: Optional[float] = None


async def run_pipe_phase(
    phase: Phase,
    context: Any,
    value: Any,
    timeout: Optional[float] = None,
    *,
    debug: bool = False,
) -> PhaseOutcome:
    """Chain ``value`` through the handlers of ``phase``.

    The outcome is a failure when a handler fails or when the phase leaves a
    falsy value behind.
    """
    if debug:
        logger.debug(f"Run {phase.name} tasks. Num items {len(phase)}")

    handlers_run = 0
    with task_span("taskchain.phase", {"taskchain.phase": phase.name, "taskchain.mode": "pipe"}) as span:
        for handler in phase.handlers:
            try:
                value = await invoke_handler(handler, context, value, timeout, phase=phase.name)
            except Exception as e:
                safe_set_span_attributes(span, {"taskchain.success": False, "taskchain.error": type(e).__name__})
                return PhaseOutcome.failed(phase.name, e, handlers_run)
            handlers_run += 1

        if not value:
            logger.error(f"Pipe phase {phase.name} returned invalid pipe data: {value!r}")
            safe_set_span_attributes(span, {"taskchain.success": False, "taskchain.error": "InvalidPipeValueError"})
            return PhaseOutcome.failed(phase.name, InvalidPipeValueError(phase.name, value), handlers_run)

        safe_set_span_attributes(span, {"taskchain.success": True, "taskchain.handlers_run": handlers_run})

    return PhaseOutcome.ok(phase.name, value, handlers_run)


async def run_pipe(
    registry: TaskRegistry,
    request: PipeRequest,
    *,
    debug: bool = False,
) -> Any:
    """
    Pipe ``request.initial_value`` through the requested tasks.

    Returns:
        The value returned by the last handler of the last non-empty phase, or
        the initial value when no phase has handlers.

    Raises:
        NoTasksSpecifiedError, UnknownTaskError, InvalidPipeValueError,
        HandlerTimeoutError, or the failing handler's own exception.
    """
    names = select_tasks(registry, request.tasks)
    value = request.initial_value

    with task_span("taskchain.pipe", {"taskchain.tasks": names}):
        for task in names:
            for phase in resolve_phases(registry, task):
                outcome = await run_pipe_phase(phase, request.context, value, request.timeout, debug=debug)
                value = outcome.unwrap()

    return value
