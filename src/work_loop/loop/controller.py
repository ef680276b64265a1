"""Iteration controller: the bounded queue-check, task, execute, commit loop."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from work_loop.backend.base import Committer, QueueStatusSource, TaskInfoSource, TaskRunner
from work_loop.config import LoopSettings
from work_loop.loop.models import (
    ExitReason,
    IterationState,
    LoopResult,
    StatusLevel,
    exit_code_for,
)
from work_loop.loop.reporting import ReportingSink
from work_loop.loop.timer import Timer

logger = logging.getLogger(__name__)

TOTAL_TIMER = "total"


class LoopController:
    """Run at most ``settings.max_iterations`` passes and classify the outcome.

    Passes are strictly sequential and every collaborator call blocks until the
    external command finishes. ``stop_requested`` is polled only between passes;
    a pass that is already running always completes.
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        settings: LoopSettings,
        queue: QueueStatusSource,
        task_info: TaskInfoSource,
        task_runner: TaskRunner,
        committer: Committer,
        reporter: ReportingSink,
        timer: Timer | None = None,
        stop_requested: Callable[[], bool] | None = None,
    ) -> None:
        if settings.max_iterations <= 0:
            raise ValueError("max_iterations must be a positive integer.")
        self.settings = settings
        self.queue = queue
        self.task_info = task_info
        self.task_runner = task_runner
        self.committer = committer
        self.reporter = reporter
        self.timer = timer or Timer()
        self.stop_requested = stop_requested

    def execute(self) -> LoopResult:
        """Run the loop and return the final summary."""

        self.timer.start(TOTAL_TIMER)
        iterations: list[IterationState] = []
        exit_reason = ExitReason.MAX_ITERATIONS_REACHED
        total = self.settings.max_iterations

        try:
            for current in range(1, total + 1):
                if self._interrupted():
                    exit_reason = ExitReason.USER_INTERRUPTED
                    break

                self.reporter.iteration_header(current, total)
                iteration = self._execute_iteration(current)
                iterations.append(iteration)
                self.reporter.iteration_summary(iteration)

                halt_reason = halting_reason(iteration)
                if halt_reason is not None:
                    exit_reason = halt_reason
                    break
        except Exception as error:
            logger.exception("Loop aborted during iteration %d", len(iterations) + 1)
            exit_reason = ExitReason.EXECUTION_ERROR
            self.reporter.status(StatusLevel.ERROR, f"Unexpected error: {error}")

        if exit_reason is ExitReason.USER_INTERRUPTED:
            self.reporter.status(StatusLevel.WARNING, "Stop requested - not starting another pass")

        return LoopResult(
            exit_code=exit_code_for(exit_reason),
            completed_iterations=sum(1 for iteration in iterations if iteration.success),
            total_duration_ms=self.timer.end(TOTAL_TIMER),
            exit_reason=exit_reason,
            iterations=tuple(iterations),
        )

    def _execute_iteration(self, current: int) -> IterationState:
        timer_id = f"iteration-{current}"
        self.timer.start(timer_id)
        iteration = IterationState(
            current=current,
            total=self.settings.max_iterations,
            start_time=datetime.now(tz=UTC),
        )

        self._run_pass(iteration)

        iteration.duration_ms = self.timer.end(timer_id)
        logger.info(
            "Iteration %d/%d finished: success=%s task=%s duration_ms=%d",
            iteration.current,
            iteration.total,
            iteration.success,
            iteration.task_number or "-",
            iteration.duration_ms,
        )
        return iteration

    def _run_pass(self, iteration: IterationState) -> None:  # noqa: PLR0911
        reporter = self.reporter

        reporter.section("TFQ Queue Status Check")
        reporter.status(StatusLevel.RUNNING, "Checking TFQ queue...")
        queue_status = self.queue.check()
        iteration.queue_status = queue_status
        if not queue_status.available:
            reporter.status(
                StatusLevel.WARNING,
                "Could not check TFQ status (command may not be available)",
            )
            if queue_status.error:
                logger.warning("Queue status unavailable: %s", queue_status.error)
        elif queue_status.count > 0:
            reporter.status(
                StatusLevel.ERROR,
                f"TFQ queue has {queue_status.count} items - HALTING",
            )
            return
        else:
            reporter.status(StatusLevel.SUCCESS, f"TFQ queue is empty ({queue_status.count} items)")

        reporter.section("Task Availability Check")
        reporter.status(StatusLevel.RUNNING, "Checking for available tasks...")
        task_info = self.task_info.next_task(self.settings)
        iteration.task_info = task_info
        if task_info.all_completed:
            reporter.status(StatusLevel.COMPLETE, "All tasks completed!")
            return
        if task_info.no_task_files:
            reporter.status(StatusLevel.ERROR, "No task files found")
            return
        if task_info.number:
            reporter.status(StatusLevel.SUCCESS, f"Found task number: {task_info.number}")
            iteration.task_number = task_info.number
        else:
            reporter.status(StatusLevel.WARNING, "Could not extract task number from output")
        reporter.status(StatusLevel.SUCCESS, "Tasks available - proceeding to execution")

        reporter.section("Task Execution")
        reporter.status(StatusLevel.RUNNING, "Executing work-next-task command...")
        execution_result = self.task_runner.run(self.settings)
        iteration.execution_result = execution_result
        if not execution_result.success:
            reporter.status(
                StatusLevel.FAILED,
                f"Task execution failed (exit code: {execution_result.exit_code})",
            )
            reporter.status(StatusLevel.WARNING, "Continuing to next iteration...")
            return
        reporter.status(StatusLevel.SUCCESS, "work-next-task completed successfully")

        iteration.success = True
        if self.settings.auto_commit:
            self._commit_if_queue_empty(iteration)

    def _commit_if_queue_empty(self, iteration: IterationState) -> None:
        reporter = self.reporter

        reporter.section("Post-Execution TFQ Check")
        reporter.status(StatusLevel.RUNNING, "Checking TFQ queue status after execution...")
        post_status = self.queue.check()
        if not post_status.available:
            reporter.status(StatusLevel.WARNING, "Could not check TFQ status after execution")
            return
        if post_status.count > 0:
            reporter.status(
                StatusLevel.ERROR,
                f"TFQ queue now has {post_status.count} items - skipping commit",
            )
            return
        reporter.status(StatusLevel.SUCCESS, f"TFQ queue still empty ({post_status.count} items)")

        reporter.section("Auto-Commit & Push")
        reporter.status(StatusLevel.RUNNING, "TFQ queue empty - committing and pushing changes...")
        if iteration.task_number:
            reporter.status(
                StatusLevel.INFO,
                f"Committing with task number: {iteration.task_number}",
            )
        else:
            reporter.status(StatusLevel.INFO, "Committing without specific task number")

        commit_result = self.committer.commit(
            iteration.task_number,
            skip_permissions=self.settings.skip_permissions,
        )
        iteration.commit_result = commit_result
        if commit_result.success:
            reporter.status(StatusLevel.SUCCESS, "Successfully committed and pushed changes")
        else:
            reporter.status(
                StatusLevel.WARNING,
                f"Commit/push failed (exit code: {commit_result.exit_code})",
            )

    def _interrupted(self) -> bool:
        return self.stop_requested is not None and self.stop_requested()


def halting_reason(iteration: IterationState) -> ExitReason | None:
    """Exit reason implied by one finished pass, or ``None`` to keep looping.

    Priority: queue not empty, then all tasks completed, then no task files.
    """

    if iteration.queue_status is not None and iteration.queue_status.has_items:
        return ExitReason.QUEUE_NOT_EMPTY
    if iteration.task_info is not None and iteration.task_info.all_completed:
        return ExitReason.ALL_TASKS_COMPLETED
    if iteration.task_info is not None and iteration.task_info.no_task_files:
        return ExitReason.NO_TASK_FILES
    return None
