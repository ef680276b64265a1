"""Subprocess runner for external CLI commands."""

from __future__ import annotations

import logging
import subprocess
import time

from work_loop.backend.base import CommandInvocation
from work_loop.loop.models import ExecutionResult

logger = logging.getLogger(__name__)

TIMEOUT_EXIT_CODE = 124
NOT_FOUND_EXIT_CODE = 127


class SubprocessCommandRunner:
    """Run invocations with captured output and a hard timeout."""

    def __init__(self, timeout_ms: int) -> None:
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be a positive integer.")
        self.timeout_ms = timeout_ms

    def run(self, invocation: CommandInvocation) -> ExecutionResult:
        logger.debug("Running: %s (cwd=%s)", invocation.display(), invocation.cwd or ".")
        start_monotonic = time.monotonic()
        try:
            completed = subprocess.run(  # noqa: S603
                invocation.argv,
                cwd=invocation.cwd,
                check=False,
                capture_output=True,
                text=True,
                stdin=subprocess.DEVNULL,
                timeout=self.timeout_ms / 1000,
            )
        except subprocess.TimeoutExpired as error:
            logger.warning("Command timed out after %sms: %s", self.timeout_ms, invocation.command)
            return ExecutionResult(
                success=False,
                exit_code=TIMEOUT_EXIT_CODE,
                duration_ms=_elapsed_ms(start_monotonic),
                output=_decode(error.stdout),
                error=f"Command timed out after {self.timeout_ms}ms",
            )
        except FileNotFoundError:
            return ExecutionResult(
                success=False,
                exit_code=NOT_FOUND_EXIT_CODE,
                duration_ms=_elapsed_ms(start_monotonic),
                output="",
                error=f"Command not found: {invocation.command}",
            )
        except OSError as error:
            return ExecutionResult(
                success=False,
                exit_code=-1,
                duration_ms=_elapsed_ms(start_monotonic),
                output="",
                error=f"Command failed to start: {error}",
            )

        duration_ms = _elapsed_ms(start_monotonic)
        logger.debug(
            "Finished %s: exit_code=%d duration_ms=%d",
            invocation.command,
            completed.returncode,
            duration_ms,
        )
        return ExecutionResult(
            success=completed.returncode == 0,
            exit_code=completed.returncode,
            duration_ms=duration_ms,
            output=completed.stdout,
            error=completed.stderr,
        )


def _elapsed_ms(start_monotonic: float) -> int:
    return int((time.monotonic() - start_monotonic) * 1000)


def _decode(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
