"""Task execution engine.

Registry, phase resolution, guarded invocation, and the series and pipe
executors.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from .errors import (
    TaskError,
    UnknownTaskError,
    TaskNotAllowedError,
    NoTasksSpecifiedError,
    InvalidPipeValueError,
    HandlerTimeoutError,
    TaskModuleError,
)
from .handlers import TaskHandler, as_handler
from .registry import TaskRegistry, bare_task_name, pre_phase, post_phase
from .phases import Phase, phase_names, resolve_phases, select_tasks
from .guard import invoke_handler
from .outcome import PhaseOutcome
from .series import PhaseReport, SeriesReport, run_series
from .pipe import PipeRequest, run_pipe

__all__ = [
    "TaskError",
    "UnknownTaskError",
    "TaskNotAllowedError",
    "NoTasksSpecifiedError",
    "InvalidPipeValueError",
    "HandlerTimeoutError",
    "TaskModuleError",
    "TaskHandler",
    "as_handler",
    "TaskRegistry",
    "bare_task_name",
    "pre_phase",
    "post_phase",
    "Phase",
    "phase_names",
    "resolve_phases",
    "select_tasks",
    "invoke_handler",
    "PhaseOutcome",
    "PhaseReport",
    "SeriesReport",
    "run_series",
    "PipeRequest",
    "run_pipe",
]
