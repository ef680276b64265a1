"""Queue Status collaborator backed by the ``tfq`` CLI."""

from __future__ import annotations

import re
from pathlib import Path

from work_loop.backend.base import CommandInvocation, CommandRunner
from work_loop.loop.models import QueueStatus

_LEADING_COUNT = re.compile(r"^\s*(\d+)")


class TfqQueueInspector:
    """Read the pending-item count with ``tfq count``."""

    def __init__(
        self,
        runner: CommandRunner,
        *,
        executable: str = "tfq",
        cwd: Path | None = None,
    ) -> None:
        self.runner = runner
        self.executable = executable
        self.cwd = cwd

    def check(self) -> QueueStatus:
        try:
            result = self.runner.run(
                CommandInvocation(command=self.executable, args=("count",), cwd=self.cwd),
            )
        except Exception as error:  # noqa: BLE001
            return QueueStatus.unavailable(str(error))

        if not result.success:
            detail = (result.error or "").strip() or f"exit code {result.exit_code}"
            return QueueStatus.unavailable(f"TFQ command failed: {detail}")

        raw = (result.output or "").strip()
        if not raw:
            return QueueStatus(count=0, available=True)
        match = _LEADING_COUNT.match(raw)
        if match is None:
            return QueueStatus.unavailable(f"Invalid TFQ count output: {raw!r}")
        return QueueStatus(count=int(match.group(1)), available=True)

    def is_empty(self) -> bool:
        status = self.check()
        return status.available and status.count == 0

    def has_items(self) -> bool:
        return self.check().has_items
