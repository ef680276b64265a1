"""Controller for the ``work-loop`` CLI command."""

from __future__ import annotations

import logging
import signal
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from work_loop.backend import (
    CommitPusher,
    SubprocessCommandRunner,
    TaskExecutor,
    TfqQueueInspector,
)
from work_loop.config import ConfigError, LoopSettings
from work_loop.loop.controller import LoopController
from work_loop.loop.models import ExitCode
from work_loop.loop.reporting import StatusReporter
from work_loop.loop.timer import Timer

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WorkLoopCommand:
    """CLI input for one loop run."""

    task_number: str | None
    tasks_directory: str | None
    project_directory: str | None
    max_iterations: int | str | None
    timeout_ms: int | str | None
    auto_commit: bool
    verbose: bool
    skip_permissions: bool


class WorkLoopCliController:
    """Resolve settings, wire collaborators and run the loop."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(highlight=False)
        self._stop_requested = False
        self._stop_signal_name: str | None = None

    def run(self, command: WorkLoopCommand) -> int:
        """Run the loop and return the process exit code."""

        self._stop_requested = False
        self._stop_signal_name = None
        try:
            settings = LoopSettings.from_env(
                task_number=command.task_number,
                tasks_directory=command.tasks_directory,
                project_directory=command.project_directory,
                max_iterations=command.max_iterations,
                timeout_ms=command.timeout_ms,
                auto_commit=command.auto_commit,
                verbose=command.verbose,
                skip_permissions=command.skip_permissions,
            )
        except ConfigError as error:
            self.console.print(f"[red]❌ Configuration Error:[/] {escape(str(error))}")
            return int(ExitCode.CONFIG_ERROR)

        reporter = StatusReporter(self.console)
        loop = build_loop_controller(
            settings,
            reporter=reporter,
            stop_requested=lambda: self._stop_requested,
        )
        reporter.startup_summary(settings)

        try:
            with self._signal_handlers():
                result = loop.execute()
        except KeyboardInterrupt:
            self.console.print("\n[yellow]⏹  Process interrupted by user[/]")
            return int(ExitCode.INTERRUPTED)

        if self._stop_signal_name is not None:
            logger.info("Loop stopped after %s", self._stop_signal_name)
        reporter.final_summary(result)
        return result.exit_code

    @contextmanager
    def _signal_handlers(self) -> Iterator[None]:
        if not hasattr(signal, "SIGTERM"):
            yield
            return

        def _handler(signum: int, _: object | None) -> None:
            try:
                name = signal.Signals(signum).name
            except ValueError:
                name = str(signum)
            if self._stop_requested:
                raise KeyboardInterrupt
            self._stop_requested = True
            self._stop_signal_name = name
            self.console.print(
                f"\n[yellow]⏹  {name} received - finishing the current pass "
                "(send again to abort)[/]",
            )

        try:
            original_sigint = signal.signal(signal.SIGINT, _handler)
            original_sigterm = signal.signal(signal.SIGTERM, _handler)
        except ValueError:
            # Signal handlers can only be installed in the main thread.
            yield
            return

        try:
            yield
        finally:
            signal.signal(signal.SIGINT, original_sigint)
            signal.signal(signal.SIGTERM, original_sigterm)


def build_loop_controller(
    settings: LoopSettings,
    *,
    reporter: StatusReporter,
    stop_requested: Callable[[], bool] | None = None,
) -> LoopController:
    """Wire the subprocess-backed collaborators for ``settings``."""

    runner = SubprocessCommandRunner(timeout_ms=settings.timeout_ms)
    task_executor = TaskExecutor(runner, claude_executable=settings.claude_executable)
    return LoopController(
        settings=settings,
        queue=TfqQueueInspector(
            runner,
            executable=settings.tfq_executable,
            cwd=Path(settings.project_directory) if settings.project_directory else None,
        ),
        task_info=task_executor,
        task_runner=task_executor,
        committer=CommitPusher(runner, claude_executable=settings.claude_executable),
        reporter=reporter,
        timer=Timer(),
        stop_requested=stop_requested,
    )
