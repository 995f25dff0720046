"""
Series Executor
===============
Runs requested tasks phase by phase. Handlers inside a phase are invoked
independently, one at a time, each receiving the same (context, args); their
results are collected into a labeled report.

The first failure of any handler aborts the whole run. Results gathered before
the failure are discarded.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union
from uuid import uuid4

from loguru import logger

from taskchain.engine.guard import invoke_handler
from taskchain.engine.outcome import PhaseOutcome
from taskchain.engine.phases import Phase, resolve_phases, select_tasks
from taskchain.engine.registry import TaskRegistry
from taskchain.tracing import safe_set_span_attributes, task_span
from taskchain.utils.schema_validation import validate_run_report


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class PhaseReport:
    """Results of one executed phase, in handler invocation order."""

    phase: str
    results: List[Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"phase": self.phase, "results": list(self.results)}


@dataclass
class SeriesReport:
    """Ordered phase reports produced by a series run."""

    tasks: List[str] = field(default_factory=list)
    entries: List[PhaseReport] = field(default_factory=list)
    run_id: str = field(default_factory=lambda: uuid4().hex)
    created_at: str = field(default_factory=_utc_now_iso)

    def __iter__(self) -> Iterator[PhaseReport]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> PhaseReport:
        return self.entries[index]

    @property
    def phases(self) -> List[str]:
        return [entry.phase for entry in self.entries]

    def results_for(self, phase: str) -> Optional[List[Any]]:
        for entry in self.entries:
            if entry.phase == phase:
                return entry.results
        return None

    def to_list(self) -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in self.entries]

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "schema_version": "1.0",
            "run_id": self.run_id,
            "created_at": self.created_at,
            "tasks": list(self.tasks),
            "phases": self.to_list(),
        }
        validate_run_report(payload)
        return payload


async def run_series_phase(
    phase: Phase,
    context: Any,
    args: Any,
    timeout: Optional[float] = None,
    *,
    debug: bool = False,
) -> PhaseOutcome:
    """Invoke every handler of ``phase`` independently, in order."""
    if debug:
        logger.debug(f"Run {phase.name} tasks. Num items {len(phase)}")

    results: List[Any] = []
    with task_span("taskchain.phase", {"taskchain.phase": phase.name, "taskchain.mode": "series"}) as span:
        for handler in phase.handlers:
            try:
                result = await invoke_handler(handler, context, args, timeout, phase=phase.name)
            except Exception as e:
                safe_set_span_attributes(span, {"taskchain.success": False, "taskchain.error": type(e).__name__})
                return PhaseOutcome.failed(phase.name, e, len(results))
            results.append(result)
        safe_set_span_attributes(span, {"taskchain.success": True, "taskchain.handlers_run": len(results)})

    return PhaseOutcome.ok(phase.name, results, len(results))


async def run_series(
    registry: TaskRegistry,
    tasks: Optional[Union[str, Sequence[str]]] = None,
    context: Any = None,
    args: Any = None,
    timeout: Optional[float] = None,
    *,
    debug: bool = False,
) -> SeriesReport:
    """
    Run ``tasks`` in series and collect a labeled report.

    Args:
        registry: Registry holding the handler lists.
        tasks: Task name or names; None runs the allow-list.
        context: Passed to every handler as its first argument.
        args: Passed to every handler as its second argument.
        timeout: Per-handler timeout in seconds (None/0 = no timeout).
        debug: Emit debug logging for each phase.

    Returns:
        SeriesReport with one entry per non-empty phase, in execution order.

    Raises:
        NoTasksSpecifiedError, UnknownTaskError, HandlerTimeoutError, or the
        first handler's own exception.
    """
    names = select_tasks(registry, tasks)
    report = SeriesReport(tasks=list(names))

    with task_span("taskchain.run", {"taskchain.tasks": names, "taskchain.run_id": report.run_id}):
        for task in names:
            for phase in resolve_phases(registry, task):
                outcome = await run_series_phase(phase, context, args, timeout, debug=debug)
                if not outcome.success:
                    if debug:
                        logger.debug(
                            f"Run aborted in {outcome.phase}; discarding {len(report)} completed phase report(s)"
                        )
                    outcome.unwrap()
                report.entries.append(PhaseReport(phase=phase.name, results=outcome.value))

    return report
