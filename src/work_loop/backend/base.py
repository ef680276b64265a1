"""Collaborator interfaces consumed by the loop controller."""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from work_loop.config import LoopSettings
from work_loop.loop.models import ExecutionResult, QueueStatus, TaskInfo


@dataclass(slots=True, frozen=True)
class CommandInvocation:
    """External command as an argv vector.

    Every argument token is handed to the process layer verbatim; there is no
    shell in between and nothing is quoted by hand.
    """

    command: str
    args: tuple[str, ...] = ()
    cwd: Path | None = None

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.args]

    def display(self) -> str:
        return shlex.join(self.argv)


class CommandRunner(Protocol):
    """Runs one invocation to completion."""

    def run(self, invocation: CommandInvocation) -> ExecutionResult:
        """Run the command; failures and timeouts come back as results."""


class QueueStatusSource(Protocol):
    """Reports the size of the external task queue."""

    def check(self) -> QueueStatus:
        """Return a fresh reading. Must not raise."""


class TaskInfoSource(Protocol):
    """Describes the next task, if any."""

    def next_task(self, settings: LoopSettings) -> TaskInfo:
        """Classify the next-task response."""


class TaskRunner(Protocol):
    """Performs one task."""

    def run(self, settings: LoopSettings) -> ExecutionResult:
        """Run the next task to completion."""


class Committer(Protocol):
    """Commits and pushes working-tree changes."""

    def commit(
        self,
        task_number: str | None = None,
        *,
        skip_permissions: bool = True,
    ) -> ExecutionResult:
        """Commit and push, tagging the commit with ``task_number`` when given."""
