"""Runtime configuration for the work loop."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_MAX_ITERATIONS = 20
DEFAULT_TIMEOUT_MS = 120_000


class ConfigError(ValueError):
    """Configuration is invalid; the loop must not start."""


@dataclass(slots=True)
class LoopSettings:
    """Resolved, validated settings for one run."""

    task_number: str | None = None
    tasks_directory: str | None = None
    project_directory: str | None = None
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    auto_commit: bool = True
    verbose: bool = False
    skip_permissions: bool = True
    claude_executable: str = "claude"
    tfq_executable: str = "tfq"

    @classmethod
    def from_env(  # noqa: PLR0913
        cls,
        *,
        task_number: str | None = None,
        tasks_directory: str | None = None,
        project_directory: str | None = None,
        max_iterations: int | str | None = None,
        timeout_ms: int | str | None = None,
        auto_commit: bool = True,
        verbose: bool = False,
        skip_permissions: bool = True,
    ) -> LoopSettings:
        """Build settings from CLI values, then apply ``WORK_LOOP_*`` overrides.

        Environment variables win over command-line values. Empty variables are
        treated as unset. Integer options may arrive as raw command-line strings
        and are parsed here so that bad values surface as ``ConfigError``.
        """

        settings = cls(
            task_number=task_number or None,
            tasks_directory=_env_str("WORK_LOOP_TASKS_DIR") or tasks_directory or None,
            project_directory=_env_str("WORK_LOOP_PROJECT_DIR") or project_directory or None,
            max_iterations=_first_int(
                _env_int("WORK_LOOP_MAX_ITERATIONS"),
                _cli_int("--iterations", max_iterations),
                DEFAULT_MAX_ITERATIONS,
            ),
            timeout_ms=_first_int(
                _env_int("WORK_LOOP_TIMEOUT_MS"),
                _cli_int("--timeout", timeout_ms),
                DEFAULT_TIMEOUT_MS,
            ),
            auto_commit=_env_bool("WORK_LOOP_AUTO_COMMIT", default=auto_commit),
            verbose=verbose,
            skip_permissions=skip_permissions,
            claude_executable=_env_str("WORK_LOOP_CLAUDE_COMMAND") or "claude",
            tfq_executable=_env_str("WORK_LOOP_TFQ_COMMAND") or "tfq",
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        """Raise ``ConfigError`` unless iteration count and timeout are positive."""

        if self.max_iterations <= 0:
            raise ConfigError("max_iterations must be a positive integer.")
        if self.timeout_ms <= 0:
            raise ConfigError("timeout_ms must be a positive integer.")


def _env_str(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def _env_int(name: str) -> int | None:
    value = _env_str(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as error:
        raise ConfigError(f"Invalid integer value for {name}: {value!r}") from error


def _cli_int(option: str, value: int | str | None) -> int | None:
    if value is None or isinstance(value, int):
        return value
    if value.strip() == "":
        return None
    try:
        return int(value.strip())
    except ValueError as error:
        raise ConfigError(f"Invalid integer value for {option}: {value!r}") from error


def _first_int(*values: int | None) -> int:
    for value in values:
        if value is not None:
            return value
    raise ConfigError("No integer value provided.")


def _env_bool(name: str, default: bool) -> bool:
    value = _env_str(name)
    if value is None:
        return default
    normalized = value.lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ConfigError(f"Invalid boolean value for {name}: {value!r}")
