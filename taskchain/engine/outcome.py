"""Tagged result of one phase-execution step.

Executors run each phase into a PhaseOutcome and decide at the call boundary
whether to continue or raise. Errors are carried as the original exception
object so handler failures surface unmodified.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class PhaseOutcome:
    """Result of running a single phase."""

    phase: str
    success: bool
    value: Any = None
    error: Optional[BaseException] = None
    handlers_run: int = 0

    @classmethod
    def ok(cls, phase: str, value: Any, handlers_run: int) -> "PhaseOutcome":
        return cls(phase=phase, success=True, value=value, handlers_run=handlers_run)

    @classmethod
    def failed(cls, phase: str, error: BaseException, handlers_run: int) -> "PhaseOutcome":
        return cls(phase=phase, success=False, error=error, handlers_run=handlers_run)

    def unwrap(self) -> Any:
        """Return the value, or raise the carried error unchanged."""
        if self.success:
            return self.value
        assert self.error is not None
        raise self.error

    def to_dict(self) -> dict:
        return {
            "phase": self.phase,
            "success": self.success,
            "handlers_run": self.handlers_run,
            "error": None if self.error is None else f"{type(self.error).__name__}: {self.error}",
        }
