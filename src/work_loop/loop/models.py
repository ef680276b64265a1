"""Data contracts for one loop run."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum


class ExitReason(str, Enum):
    """Closed classification of why a run ended."""

    ALL_TASKS_COMPLETED = "all_tasks_completed"
    QUEUE_NOT_EMPTY = "queue_not_empty"
    NO_TASK_FILES = "no_task_files"
    MAX_ITERATIONS_REACHED = "max_iterations_reached"
    USER_INTERRUPTED = "user_interrupted"
    CONFIG_ERROR = "config_error"
    EXECUTION_ERROR = "execution_error"


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    CONFIG_ERROR = 1
    EXECUTION_ERROR = 2
    INTERRUPTED = 130


class StatusLevel(str, Enum):
    """Severity of a status line sent to the reporting sink."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"


_EXIT_CODES: dict[ExitReason, ExitCode] = {
    ExitReason.ALL_TASKS_COMPLETED: ExitCode.SUCCESS,
    ExitReason.QUEUE_NOT_EMPTY: ExitCode.SUCCESS,
    ExitReason.NO_TASK_FILES: ExitCode.CONFIG_ERROR,
    ExitReason.CONFIG_ERROR: ExitCode.CONFIG_ERROR,
    ExitReason.USER_INTERRUPTED: ExitCode.INTERRUPTED,
    # Budget exhaustion is reported as an execution error even when every pass succeeded.
    ExitReason.MAX_ITERATIONS_REACHED: ExitCode.EXECUTION_ERROR,
    ExitReason.EXECUTION_ERROR: ExitCode.EXECUTION_ERROR,
}

_unmapped = set(ExitReason) - set(_EXIT_CODES)
if _unmapped:  # pragma: no cover
    raise RuntimeError(f"Exit reasons without exit code: {sorted(r.value for r in _unmapped)}")


def exit_code_for(reason: ExitReason) -> int:
    """Map a terminal exit reason to the process exit code."""

    return int(_EXIT_CODES[reason])


@dataclass(slots=True, frozen=True)
class QueueStatus:
    """One reading of the external task queue.

    ``count=-1`` with ``available=False`` means the queue could not be inspected.
    """

    count: int
    available: bool
    error: str | None = None

    @classmethod
    def unavailable(cls, error: str) -> QueueStatus:
        return cls(count=-1, available=False, error=error)

    @property
    def has_items(self) -> bool:
        return self.available and self.count > 0


@dataclass(slots=True, frozen=True)
class TaskInfo:
    """Classified response of the task-description command."""

    available: bool
    all_completed: bool
    output: str
    no_task_files: bool = False
    number: str | None = None


@dataclass(slots=True, frozen=True)
class ExecutionResult:
    """Outcome of one external command (task execution or commit)."""

    success: bool
    exit_code: int
    duration_ms: int
    output: str | None = None
    error: str | None = None


@dataclass(slots=True)
class IterationState:
    """Everything observed during one pass; mutated only while the pass runs."""

    current: int
    total: int
    start_time: datetime
    duration_ms: int = 0
    success: bool = False
    task_number: str | None = None
    queue_status: QueueStatus | None = None
    task_info: TaskInfo | None = None
    execution_result: ExecutionResult | None = None
    commit_result: ExecutionResult | None = None


@dataclass(slots=True, frozen=True)
class LoopResult:
    """Final summary of a run."""

    exit_code: int
    completed_iterations: int
    total_duration_ms: int
    exit_reason: ExitReason
    iterations: tuple[IterationState, ...]
