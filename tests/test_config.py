from __future__ import annotations

import allure
import pytest

from work_loop.config import ConfigError, LoopSettings

pytestmark = [
    allure.epic("Work Loop"),
    allure.feature("Configuration"),
]


def test_defaults() -> None:
    settings = LoopSettings.from_env()

    assert settings.max_iterations == 20
    assert settings.timeout_ms == 120_000
    assert settings.auto_commit is True
    assert settings.skip_permissions is True
    assert settings.verbose is False
    assert settings.task_number is None
    assert settings.claude_executable == "claude"
    assert settings.tfq_executable == "tfq"


def test_cli_values_are_used_without_env() -> None:
    settings = LoopSettings.from_env(
        task_number="7",
        tasks_directory="./tasks",
        project_directory="./project",
        max_iterations=3,
        timeout_ms=5000,
        auto_commit=False,
        skip_permissions=False,
    )

    assert settings.task_number == "7"
    assert settings.tasks_directory == "./tasks"
    assert settings.project_directory == "./project"
    assert settings.max_iterations == 3
    assert settings.timeout_ms == 5000
    assert settings.auto_commit is False
    assert settings.skip_permissions is False


def test_empty_task_number_means_none() -> None:
    assert LoopSettings.from_env(task_number="").task_number is None


def test_env_overrides_cli_values(monkeypatch) -> None:
    monkeypatch.setenv("WORK_LOOP_MAX_ITERATIONS", "9")
    monkeypatch.setenv("WORK_LOOP_TIMEOUT_MS", "2500")
    monkeypatch.setenv("WORK_LOOP_TASKS_DIR", "/env/tasks")
    monkeypatch.setenv("WORK_LOOP_PROJECT_DIR", "/env/project")
    monkeypatch.setenv("WORK_LOOP_AUTO_COMMIT", "false")
    monkeypatch.setenv("WORK_LOOP_CLAUDE_COMMAND", "/opt/bin/claude")
    monkeypatch.setenv("WORK_LOOP_TFQ_COMMAND", "/opt/bin/tfq")

    settings = LoopSettings.from_env(
        tasks_directory="./tasks",
        project_directory="./project",
        max_iterations=3,
        timeout_ms=5000,
        auto_commit=True,
    )

    assert settings.max_iterations == 9
    assert settings.timeout_ms == 2500
    assert settings.tasks_directory == "/env/tasks"
    assert settings.project_directory == "/env/project"
    assert settings.auto_commit is False
    assert settings.claude_executable == "/opt/bin/claude"
    assert settings.tfq_executable == "/opt/bin/tfq"


def test_empty_env_values_are_ignored(monkeypatch) -> None:
    monkeypatch.setenv("WORK_LOOP_MAX_ITERATIONS", "")
    monkeypatch.setenv("WORK_LOOP_TASKS_DIR", "  ")

    settings = LoopSettings.from_env(max_iterations=4, tasks_directory="./tasks")

    assert settings.max_iterations == 4
    assert settings.tasks_directory == "./tasks"


@pytest.mark.parametrize("value", ["1", "true", "YES", "on"])
def test_auto_commit_env_truthy(monkeypatch, value: str) -> None:
    monkeypatch.setenv("WORK_LOOP_AUTO_COMMIT", value)
    assert LoopSettings.from_env(auto_commit=False).auto_commit is True


def test_auto_commit_env_rejects_garbage(monkeypatch) -> None:
    monkeypatch.setenv("WORK_LOOP_AUTO_COMMIT", "maybe")
    with pytest.raises(ConfigError, match="Invalid boolean value for WORK_LOOP_AUTO_COMMIT"):
        LoopSettings.from_env()


def test_non_integer_env_is_config_error(monkeypatch) -> None:
    monkeypatch.setenv("WORK_LOOP_TIMEOUT_MS", "soon")
    with pytest.raises(ConfigError, match="WORK_LOOP_TIMEOUT_MS"):
        LoopSettings.from_env()


@pytest.mark.parametrize("max_iterations", [0, -1])
def test_rejects_non_positive_iterations(max_iterations: int) -> None:
    with pytest.raises(ConfigError, match="max_iterations must be a positive integer"):
        LoopSettings.from_env(max_iterations=max_iterations)


def test_rejects_zero_iterations_from_env(monkeypatch) -> None:
    monkeypatch.setenv("WORK_LOOP_MAX_ITERATIONS", "0")
    with pytest.raises(ConfigError, match="max_iterations"):
        LoopSettings.from_env(max_iterations=5)


def test_rejects_non_positive_timeout() -> None:
    with pytest.raises(ConfigError, match="timeout_ms must be a positive integer"):
        LoopSettings.from_env(timeout_ms=0)


def test_config_error_is_value_error() -> None:
    assert issubclass(ConfigError, ValueError)


def test_cli_integer_strings_are_parsed() -> None:
    settings = LoopSettings.from_env(max_iterations="7", timeout_ms=" 5000 ")

    assert settings.max_iterations == 7
    assert settings.timeout_ms == 5000


@pytest.mark.parametrize(
    ("kwargs", "option"),
    [({"max_iterations": "abc"}, "--iterations"), ({"timeout_ms": "x"}, "--timeout")],
)
def test_non_integer_cli_value_is_config_error(kwargs: dict[str, str], option: str) -> None:
    with pytest.raises(ConfigError, match=f"Invalid integer value for {option}"):
        LoopSettings.from_env(**kwargs)
