"""Collaborators that shell out to the queue tool and the coding agent."""

from work_loop.backend.base import (
    CommandInvocation,
    CommandRunner,
    Committer,
    QueueStatusSource,
    TaskInfoSource,
    TaskRunner,
)
from work_loop.backend.command_runner import SubprocessCommandRunner
from work_loop.backend.git import CommitPusher
from work_loop.backend.queue import TfqQueueInspector
from work_loop.backend.tasks import TaskExecutor

__all__ = [
    "CommandInvocation",
    "CommandRunner",
    "CommitPusher",
    "Committer",
    "QueueStatusSource",
    "SubprocessCommandRunner",
    "TaskExecutor",
    "TaskInfoSource",
    "TaskRunner",
    "TfqQueueInspector",
]
