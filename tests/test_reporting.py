from __future__ import annotations

import io
from datetime import UTC, datetime

import allure
from rich.console import Console

from work_loop.config import LoopSettings
from work_loop.loop.models import ExitReason, IterationState, LoopResult, StatusLevel
from work_loop.loop.reporting import StatusReporter

pytestmark = [
    allure.epic("Work Loop"),
    allure.feature("Reporting"),
]


def _reporter() -> tuple[StatusReporter, io.StringIO]:
    buffer = io.StringIO()
    console = Console(file=buffer, width=100, color_system=None, highlight=False)
    return StatusReporter(console), buffer


def test_status_lines_carry_level_icons() -> None:
    reporter, buffer = _reporter()

    reporter.status(StatusLevel.SUCCESS, "queue empty")
    reporter.status(StatusLevel.ERROR, "queue has items")
    reporter.status(StatusLevel.WARNING, "tfq missing")
    reporter.status(StatusLevel.RUNNING, "checking")

    lines = buffer.getvalue().splitlines()
    assert lines == [
        "  ✓ queue empty",
        "  ✗ queue has items",
        "  ⚠ tfq missing",
        "  ⏳ checking",
    ]


def test_status_message_is_not_parsed_as_markup() -> None:
    reporter, buffer = _reporter()

    reporter.status(StatusLevel.ERROR, "Unexpected error: [bold]not markup[/bold]")

    assert "[bold]not markup[/bold]" in buffer.getvalue()


def test_iteration_header_and_summary() -> None:
    reporter, buffer = _reporter()
    iteration = IterationState(
        current=2,
        total=5,
        start_time=datetime.now(tz=UTC),
        duration_ms=65_000,
    )

    reporter.iteration_header(2, 5)
    reporter.section("Task Execution")
    reporter.iteration_summary(iteration)

    output = buffer.getvalue()
    assert "ITERATION 2/5" in output
    assert "▶ Task Execution" in output
    assert "Iteration 2 completed in 1m 5s" in output


def test_startup_summary_lists_configuration() -> None:
    reporter, buffer = _reporter()

    reporter.startup_summary(
        LoopSettings(
            task_number="3",
            tasks_directory="./my-tasks",
            max_iterations=4,
            auto_commit=False,
        ),
    )

    output = buffer.getvalue()
    assert "TASK AUTOMATION LOOP" in output
    assert "Max iterations: 4" in output
    assert "Target task: 3" in output
    assert "Tasks directory: ./my-tasks" in output
    assert "Auto-commit disabled" in output


def test_final_summary_reports_average_and_exit_reason() -> None:
    reporter, buffer = _reporter()

    reporter.final_summary(
        LoopResult(
            exit_code=2,
            completed_iterations=2,
            total_duration_ms=10_000,
            exit_reason=ExitReason.MAX_ITERATIONS_REACHED,
            iterations=(),
        ),
    )

    output = buffer.getvalue()
    assert "LOOP COMPLETED" in output
    assert "Completed iterations: 2" in output
    assert "Total runtime: 10s" in output
    assert "Average per iteration: 5s" in output
    assert "Reached maximum iteration limit" in output
    assert "Some tasks may remain unfinished" in output


def test_final_summary_without_completed_iterations_skips_average() -> None:
    reporter, buffer = _reporter()

    reporter.final_summary(
        LoopResult(
            exit_code=0,
            completed_iterations=0,
            total_duration_ms=500,
            exit_reason=ExitReason.QUEUE_NOT_EMPTY,
            iterations=(),
        ),
    )

    output = buffer.getvalue()
    assert "Average per iteration" not in output
    assert "Stopped due to TFQ queue items" in output
