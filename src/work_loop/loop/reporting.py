"""Reporting sink for loop progress and its rich console implementation."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from work_loop.config import LoopSettings
from work_loop.loop.models import ExitReason, IterationState, LoopResult, StatusLevel
from work_loop.loop.timer import format_duration

PANEL_WIDTH = 62

_STATUS_STYLES: dict[StatusLevel, tuple[str, str]] = {
    StatusLevel.SUCCESS: ("✓", "green"),
    StatusLevel.ERROR: ("✗", "red"),
    StatusLevel.WARNING: ("⚠", "yellow"),
    StatusLevel.INFO: ("ℹ", "blue"),
    StatusLevel.RUNNING: ("⏳", "yellow"),
    StatusLevel.COMPLETE: ("✅", "green"),
    StatusLevel.FAILED: ("❌", "red"),
}

_EXIT_REASON_LINES: dict[ExitReason, tuple[StatusLevel, str]] = {
    ExitReason.ALL_TASKS_COMPLETED: (StatusLevel.SUCCESS, "All tasks successfully completed"),
    ExitReason.QUEUE_NOT_EMPTY: (StatusLevel.WARNING, "Stopped due to TFQ queue items"),
    ExitReason.NO_TASK_FILES: (StatusLevel.ERROR, "No task files available"),
    ExitReason.MAX_ITERATIONS_REACHED: (StatusLevel.WARNING, "Reached maximum iteration limit"),
    ExitReason.USER_INTERRUPTED: (StatusLevel.WARNING, "Process interrupted by user"),
    ExitReason.CONFIG_ERROR: (StatusLevel.ERROR, "Configuration error"),
    ExitReason.EXECUTION_ERROR: (StatusLevel.ERROR, "Execution error occurred"),
}


class ReportingSink(Protocol):
    """Fire-and-forget progress events emitted by the loop controller."""

    def iteration_header(self, current: int, total: int) -> None: ...

    def section(self, title: str) -> None: ...

    def status(self, level: StatusLevel, message: str) -> None: ...

    def iteration_summary(self, iteration: IterationState) -> None: ...


class StatusReporter:
    """Render loop events to a terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(highlight=False)

    def header(self, title: str, *, style: str = "cyan") -> None:
        self.console.print(
            Panel(
                Text(title, style="bold", justify="center"),
                border_style=style,
                width=PANEL_WIDTH,
            ),
        )

    def startup_summary(self, settings: LoopSettings) -> None:
        self.header("TASK AUTOMATION LOOP")
        self.console.print("\n[bold]Configuration:[/]")
        self._line(StatusLevel.INFO, f"Max iterations: [magenta]{settings.max_iterations}[/]")
        self._line(
            StatusLevel.INFO,
            f"Command timeout: [magenta]{format_duration(settings.timeout_ms)}[/]",
        )
        if settings.task_number:
            self._line(StatusLevel.INFO, f"Target task: [magenta]{escape(settings.task_number)}[/]")
        if settings.tasks_directory:
            self._line(
                StatusLevel.INFO,
                f"Tasks directory: [magenta]{escape(settings.tasks_directory)}[/]",
            )
        if settings.project_directory:
            self._line(
                StatusLevel.INFO,
                f"Project directory: [magenta]{escape(settings.project_directory)}[/]",
            )
        if not settings.auto_commit:
            self._line(StatusLevel.WARNING, "Auto-commit disabled")

        self.console.print("\n[bold]Process Flow:[/]")
        self._line(StatusLevel.INFO, "Check TFQ queue status")
        self._line(StatusLevel.INFO, "Verify task availability")
        self._line(StatusLevel.INFO, "Execute work-next-task")
        self._line(StatusLevel.INFO, "Auto-commit on success (if TFQ empty)")
        self._separator()

    def iteration_header(self, current: int, total: int) -> None:
        self.console.print()
        self.header(f"ITERATION {current}/{total}", style="magenta")

    def section(self, title: str) -> None:
        self.console.print(f"\n[bold blue]▶ {escape(title)}[/]")

    def status(self, level: StatusLevel, message: str) -> None:
        self._line(level, escape(message))

    def iteration_summary(self, iteration: IterationState) -> None:
        self._separator()
        self._line(
            StatusLevel.SUCCESS,
            f"Iteration [magenta]{iteration.current}[/] completed in "
            f"[magenta]{format_duration(iteration.duration_ms)}[/]",
        )

    def final_summary(self, result: LoopResult) -> None:
        self.console.print()
        self.header("LOOP COMPLETED")

        self.console.print("\n[bold]Summary:[/]")
        self._line(
            StatusLevel.INFO,
            f"Completed iterations: [magenta]{result.completed_iterations}[/]",
        )
        self._line(
            StatusLevel.INFO,
            f"Total runtime: [magenta]{format_duration(result.total_duration_ms)}[/]",
        )
        if result.completed_iterations > 0:
            average_ms = result.total_duration_ms // result.completed_iterations
            self._line(
                StatusLevel.INFO,
                f"Average per iteration: [magenta]{format_duration(average_ms)}[/]",
            )

        self.console.print("\n[bold]Status:[/]")
        level, message = _EXIT_REASON_LINES[result.exit_reason]
        self._line(level, message)
        if result.exit_reason is ExitReason.MAX_ITERATIONS_REACHED:
            self._line(StatusLevel.INFO, "Some tasks may remain unfinished")

        self.console.print("\n[bold]Next Steps:[/]")
        self._line(
            StatusLevel.INFO,
            "Check task status manually with: [magenta]/show-next-task[/]",
        )
        self._line(StatusLevel.INFO, "Check TFQ queue with: [magenta]tfq list[/]")
        self._separator()
        self.console.print(
            f"[dim]Run completed at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}[/]",
        )

    def _line(self, level: StatusLevel, markup: str) -> None:
        icon, color = _STATUS_STYLES[StatusLevel(level)]
        self.console.print(f"  [{color}]{icon}[/] {markup}")

    def _separator(self) -> None:
        self.console.print(Rule(style="dim"))
