"""命令行入口。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence

import typer
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.prompt import Prompt

from png_optimise.core.config import BATCH_OPTIONS, SINGLE_FILE_OPTIONS, MetadataPolicy, OptimizationOptions
from png_optimise.core.exceptions import (
    BatchAbortedError,
    DiscoveryError,
    EngineError,
    FileIOError,
    IntegrationUnavailableError,
    InvalidConfigurationError,
    NoRepositoryError,
    UserCancelledError,
    VcsCommandError,
)
from png_optimise.core.models import BatchResult
from png_optimise.core.progress import ProgressUpdate
from png_optimise.core.report import write_csv_report
from png_optimise.core.savings import batch_summary_string, savings_string
from png_optimise.processing.engine import create_engine
from png_optimise.processing.pipeline import BatchOptimizer, ChangeSet, Folder, Selection
from png_optimise.utils.logging import setup_logging
from png_optimise.vcs.git import GitIntegration

app = typer.Typer(help="Lossless PNG optimisation for files, folders and git changes.")

LOGGER = logging.getLogger(__name__)

SELECTION_ERRORS = (
    DiscoveryError,
    IntegrationUnavailableError,
    NoRepositoryError,
    VcsCommandError,
    InvalidConfigurationError,
)


def prompt_pick_one(choices: Sequence[str]) -> Optional[str]:
    """交互式选择仓库；Ctrl-C 或 EOF 视为取消。"""

    typer.echo("Multiple repositories found:")
    for idx, choice in enumerate(choices, start=1):
        typer.echo(f"  {idx}. {choice}")
    try:
        answer = Prompt.ask("Repository", choices=[str(i) for i in range(1, len(choices) + 1)])
    except (KeyboardInterrupt, EOFError):
        return None
    return choices[int(answer) - 1]


def _build_options(
    defaults: OptimizationOptions, level: Optional[int], strip: Optional[MetadataPolicy], verify: bool
) -> OptimizationOptions:
    try:
        return OptimizationOptions(
            compression_level=defaults.compression_level if level is None else level,
            metadata_policy=strip or defaults.metadata_policy,
            verify=verify,
        )
    except InvalidConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _build_progress_callback(progress: Progress):
    task_id: Optional[int] = None

    def callback(update: ProgressUpdate) -> None:
        nonlocal task_id
        if update.total == 0:
            return
        if task_id is None:
            task_id = progress.add_task("Optimising PNGs", total=update.total)
        progress.update(task_id, completed=update.completed, description=update.message or "Optimising PNGs")

    return callback


def _run_batch(selection: Selection, options: OptimizationOptions, delay: float, report: Optional[Path]) -> None:
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
    )
    optimizer = BatchOptimizer(create_engine(), progress_callback=_build_progress_callback(progress))

    try:
        with progress:
            result: BatchResult = optimizer.run(selection, options, delay=delay)
            for task in progress.tasks:
                progress.update(task.id, completed=task.total)
    except UserCancelledError:
        LOGGER.debug("用户取消了仓库选择")
        return
    except SELECTION_ERRORS as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    except BatchAbortedError as exc:
        typer.echo(batch_summary_string(exc.summary))
        typer.echo(f"{exc}: {exc.__cause__}", err=True)
        raise typer.Exit(code=1) from exc

    if report is not None:
        typer.echo(f"Report: {write_csv_report(result.outcomes, report)}")
    typer.echo(batch_summary_string(result.summary))


@app.command("file")
def optimise_file_cli(
    path: Path = typer.Argument(..., help="PNG file to optimise in place"),
    level: Optional[int] = typer.Option(None, "--level", "-l", help="Compression effort 0-6 (default 2)"),
    strip: Optional[MetadataPolicy] = typer.Option(None, "--strip", help="Metadata policy"),
    verify: bool = typer.Option(False, "--verify", help="Check decoded pixels before writing"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Optimise a single PNG file."""

    setup_logging(verbose)
    options = _build_options(SINGLE_FILE_OPTIONS, level, strip, verify)
    path = path.expanduser().resolve()

    typer.echo(f"Called: {path}")
    optimizer = BatchOptimizer(create_engine())
    try:
        outcome = optimizer.optimise_file(path, options)
    except (FileIOError, EngineError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(f"Optimised: {path}")
    typer.echo(savings_string(outcome.input_size, outcome.output_size))


@app.command("folder")
def optimise_folder_cli(
    path: Path = typer.Argument(..., help="Folder to search recursively for PNG files"),
    level: Optional[int] = typer.Option(None, "--level", "-l", help="Compression effort 0-6 (default 1)"),
    strip: Optional[MetadataPolicy] = typer.Option(None, "--strip", help="Metadata policy"),
    verify: bool = typer.Option(False, "--verify", help="Check decoded pixels before writing"),
    report: Optional[Path] = typer.Option(None, "--report", help="Write a CSV report to this path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Optimise every PNG under a folder."""

    setup_logging(verbose)
    options = _build_options(BATCH_OPTIONS, level, strip, verify)
    path = path.expanduser().resolve()
    typer.echo(f"Called: {path}")
    _run_batch(Folder(path), options, 0.0, report)


@app.command("changes")
def optimise_changes_cli(
    repo: Optional[Path] = typer.Option(None, "--repo", help="Repository to use instead of discovering one"),
    workspace: List[Path] = typer.Option([], "--workspace", "-w", help="Folder(s) to search for repositories"),
    delay: float = typer.Option(0.0, "--delay", help="Seconds to wait between files"),
    level: Optional[int] = typer.Option(None, "--level", "-l", help="Compression effort 0-6 (default 1)"),
    strip: Optional[MetadataPolicy] = typer.Option(None, "--strip", help="Metadata policy"),
    verify: bool = typer.Option(False, "--verify", help="Check decoded pixels before writing"),
    report: Optional[Path] = typer.Option(None, "--report", help="Write a CSV report to this path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Optimise PNG files modified in a git repository."""

    setup_logging(verbose)
    options = _build_options(BATCH_OPTIONS, level, strip, verify)
    roots = [p.expanduser().resolve() for p in workspace] or [Path.cwd()]
    selection = ChangeSet(
        integration=GitIntegration(roots),
        pick_one=prompt_pick_one,
        explicit_target=repo.expanduser().resolve() if repo else None,
    )
    _run_batch(selection, options, delay, report)


if __name__ == "__main__":
    app()
