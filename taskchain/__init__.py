"""
taskchain
=========
Sequential task orchestration: named tasks with pre-/post- phases, executed
in series (collecting per-handler results) or as a pipe (threading one value
through every handler).

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from .engine import (
    TaskError,
    UnknownTaskError,
    TaskNotAllowedError,
    NoTasksSpecifiedError,
    InvalidPipeValueError,
    HandlerTimeoutError,
    TaskModuleError,
    TaskRegistry,
    PhaseReport,
    SeriesReport,
    PipeRequest,
)
from .runner import TaskRunner, TaskRunnerConfig, create_runner

__all__ = [
    "TaskRunner",
    "TaskRunnerConfig",
    "create_runner",
    "TaskRegistry",
    "PhaseReport",
    "SeriesReport",
    "PipeRequest",
    "TaskError",
    "UnknownTaskError",
    "TaskNotAllowedError",
    "NoTasksSpecifiedError",
    "InvalidPipeValueError",
    "HandlerTimeoutError",
    "TaskModuleError",
]
