"""CLI entrypoint for work-loop."""

import logging

import rich_click as click
from rich.logging import RichHandler

from work_loop import __version__
from work_loop.config import DEFAULT_MAX_ITERATIONS, DEFAULT_TIMEOUT_MS
from work_loop.controllers import WorkLoopCliController, WorkLoopCommand

click.rich_click.USE_MARKDOWN = True
WORK_LOOP_CONTROLLER = WorkLoopCliController()

EPILOG = """
**Examples**

- `work-loop` next task from /tasks, TFQ in current dir
- `work-loop 5` task 5 from /tasks, TFQ in current dir
- `work-loop "" -d ./my-tasks` next task from ./my-tasks
- `work-loop 3 -d ./my-tasks -p ./project` task 3 from ./my-tasks, TFQ in ./project

**Environment variables** (override command-line values)

- `WORK_LOOP_MAX_ITERATIONS` maximum number of iterations
- `WORK_LOOP_TASKS_DIR` default tasks directory
- `WORK_LOOP_PROJECT_DIR` default project directory
- `WORK_LOOP_AUTO_COMMIT` enable auto-commit (true/false)
- `WORK_LOOP_TIMEOUT_MS` command timeout in milliseconds
- `WORK_LOOP_CLAUDE_COMMAND` / `WORK_LOOP_TFQ_COMMAND` executables to invoke
"""


@click.command(epilog=EPILOG)
@click.version_option(version=__version__, prog_name="work-loop")
@click.argument("task_number", required=False, default=None)
@click.option("-d", "--tasks-dir", "tasks_dir", default=None, help="Tasks directory path.")
@click.option("-p", "--project-dir", "project_dir", default=None, help="Project directory path.")
@click.option(
    "-i",
    "--iterations",
    default=None,
    help=f"Maximum iterations.  [default: {DEFAULT_MAX_ITERATIONS}]",
)
@click.option(
    "--timeout",
    "timeout_ms",
    default=None,
    help=f"Command timeout in milliseconds.  [default: {DEFAULT_TIMEOUT_MS}]",
)
@click.option(
    "--auto-commit/--no-auto-commit",
    default=True,
    show_default=True,
    help="Commit and push after each successful task when the TFQ queue is empty.",
)
@click.option("--verbose", is_flag=True, default=False, help="Enable verbose logging.")
@click.option(
    "--skip-permissions/--no-skip-permissions",
    default=True,
    show_default=True,
    help="Pass --dangerously-skip-permissions to the agent.",
)
def work_loop(  # noqa: PLR0913
    task_number: str | None,
    tasks_dir: str | None,
    project_dir: str | None,
    iterations: str | None,
    timeout_ms: str | None,
    auto_commit: bool,
    verbose: bool,
    skip_permissions: bool,
) -> None:
    """Automated task execution loop with TFQ integration."""

    _configure_logging(verbose=verbose)
    exit_code = WORK_LOOP_CONTROLLER.run(
        WorkLoopCommand(
            task_number=task_number,
            tasks_directory=tasks_dir,
            project_directory=project_dir,
            max_iterations=iterations,
            timeout_ms=timeout_ms,
            auto_commit=auto_commit,
            verbose=verbose,
            skip_permissions=skip_permissions,
        ),
    )
    raise SystemExit(exit_code)


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, rich_tracebacks=True)],
        force=True,
    )


if __name__ == "__main__":  # pragma: no cover
    work_loop()
