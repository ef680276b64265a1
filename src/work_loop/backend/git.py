"""Commit collaborator: the agent's ``/commit-push`` command."""

from __future__ import annotations

from work_loop.backend.base import CommandRunner
from work_loop.backend.tasks import agent_invocation
from work_loop.loop.models import ExecutionResult

COMMIT_PUSH = "/commit-push"


class CommitPusher:
    """Commit and push the working tree through the agent."""

    def __init__(self, runner: CommandRunner, *, claude_executable: str = "claude") -> None:
        self.runner = runner
        self.claude_executable = claude_executable

    def commit(
        self,
        task_number: str | None = None,
        *,
        skip_permissions: bool = True,
    ) -> ExecutionResult:
        return self.runner.run(
            agent_invocation(
                executable=self.claude_executable,
                slash_command=COMMIT_PUSH,
                arguments=[task_number] if task_number else [],
                skip_permissions=skip_permissions,
            ),
        )
