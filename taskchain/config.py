"""
Centralized Configuration
=========================
Centralized configuration values and constants for the task runner.

This module provides:
- Timeout configuration for handler invocations
- Runner defaults (debug flag, tasks directory)
- Loader limits
- Tracing settings

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

import os
from dataclasses import dataclass
from typing import Optional


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class TimeoutConfig:
    """Centralized timeout configuration in seconds."""

    # Per-handler timeout applied when a call does not pass one (0 = no timeout)
    DEFAULT_HANDLER: float = float(os.getenv("TASKCHAIN_DEFAULT_TIMEOUT", "0"))

    # Largest timeout a caller may request (TASKCHAIN_MAX_TIMEOUT)
    MAX_HANDLER: float = float(os.getenv("TASKCHAIN_MAX_TIMEOUT", "3600"))


@dataclass(frozen=True)
class RunnerDefaults:
    """Defaults used when a TaskRunner is built without explicit config."""

    DEBUG: bool = _env_flag("TASKCHAIN_DEBUG")
    TASKS_DIR: Optional[str] = os.getenv("TASKCHAIN_TASKS_DIR") or None


@dataclass(frozen=True)
class LoaderConfig:
    """Task module discovery limits."""

    MAX_MODULES: int = int(os.getenv("TASKCHAIN_MAX_TASK_MODULES", "2000"))
    MANIFEST_FILENAME: str = "manifest.json"


@dataclass(frozen=True)
class TracingConfig:
    """Tracing configuration."""

    SERVICE_NAME: str = "taskchain"
    OTLP_ENDPOINT: str = os.getenv("OTLP_ENDPOINT", "http://localhost:4318/v1/traces")
    ENABLED: bool = os.getenv("ENABLE_TRACING", "false").lower() == "true"


# Global singleton instances
TIMEOUTS = TimeoutConfig()
RUNNER = RunnerDefaults()
LOADER = LoaderConfig()
TRACING = TracingConfig()

