"""Task Info and Task Execution collaborators backed by agent slash commands."""

from __future__ import annotations

import logging
import re
import shlex

from work_loop.backend.base import CommandInvocation, CommandRunner
from work_loop.config import LoopSettings
from work_loop.loop.models import ExecutionResult, TaskInfo

logger = logging.getLogger(__name__)

SHOW_NEXT_TASK = "/show-next-task"
WORK_NEXT_TASK = "/work-next-task"

ALL_TASKS_COMPLETED_SENTINEL = "All tasks completed!"
NO_TASK_FILE_SENTINEL = "No task file found"

_NEXT_TASK_PATTERN = re.compile(r"##\s*Next Task:\s*(\d+)", re.IGNORECASE)
_TASK_PATTERN = re.compile(r"Task\s+(\d+)", re.IGNORECASE)


class TaskExecutor:
    """Ask the agent for the next task and have it work on it."""

    def __init__(self, runner: CommandRunner, *, claude_executable: str = "claude") -> None:
        self.runner = runner
        self.claude_executable = claude_executable

    def next_task(self, settings: LoopSettings) -> TaskInfo:
        result = self.runner.run(
            agent_invocation(
                executable=self.claude_executable,
                slash_command=SHOW_NEXT_TASK,
                arguments=show_task_arguments(settings),
                skip_permissions=settings.skip_permissions,
            ),
        )
        if not result.success:
            logger.warning(
                "%s exited with code %d; classifying its output anyway",
                SHOW_NEXT_TASK,
                result.exit_code,
            )
        return classify_task_output(result.output or "")

    def run(self, settings: LoopSettings) -> ExecutionResult:
        return self.runner.run(
            agent_invocation(
                executable=self.claude_executable,
                slash_command=WORK_NEXT_TASK,
                arguments=work_task_arguments(settings),
                skip_permissions=settings.skip_permissions,
            ),
        )


def classify_task_output(output: str) -> TaskInfo:
    """Turn a ``/show-next-task`` response into exactly one task condition."""

    if ALL_TASKS_COMPLETED_SENTINEL in output:
        return TaskInfo(available=False, all_completed=True, output=output)
    if NO_TASK_FILE_SENTINEL in output:
        return TaskInfo(available=False, all_completed=False, output=output, no_task_files=True)
    return TaskInfo(
        available=True,
        all_completed=False,
        output=output,
        number=extract_task_number(output),
    )


def extract_task_number(output: str) -> str | None:
    """Find the task identifier in ``## Next Task: N`` or, failing that, ``Task N``."""

    match = _NEXT_TASK_PATTERN.search(output) or _TASK_PATTERN.search(output)
    return match.group(1) if match else None


def show_task_arguments(settings: LoopSettings) -> list[str]:
    arguments: list[str] = []
    if settings.task_number:
        arguments.append(settings.task_number)
    if settings.tasks_directory:
        arguments.append(settings.tasks_directory)
    return arguments


def work_task_arguments(settings: LoopSettings) -> list[str]:
    """Positional arguments; empty placeholders keep later arguments in position."""

    arguments: list[str] = []
    if settings.task_number:
        arguments.append(settings.task_number)
    elif settings.tasks_directory or settings.project_directory:
        arguments.append("")

    if settings.tasks_directory:
        arguments.append(settings.tasks_directory)
    elif settings.project_directory:
        arguments.append("")

    if settings.project_directory:
        arguments.append(settings.project_directory)
    return arguments


def agent_invocation(
    *,
    executable: str,
    slash_command: str,
    arguments: list[str],
    skip_permissions: bool,
) -> CommandInvocation:
    """Build ``claude [--dangerously-skip-permissions] -p "<slash command> args..."``."""

    args: list[str] = []
    if skip_permissions:
        args.append("--dangerously-skip-permissions")
    args.extend(["-p", render_slash_command(slash_command, arguments)])
    return CommandInvocation(command=executable, args=tuple(args))


def render_slash_command(slash_command: str, arguments: list[str]) -> str:
    parts = [slash_command]
    parts.extend('""' if argument == "" else shlex.quote(argument) for argument in arguments)
    return " ".join(parts)
