"""Store-level commands: init, stats, export, import."""

from pathlib import Path

import typer

from tasktree.codecs import FILE_EXTENSIONS, format_from_filename
from tasktree.models import ExportFormat, ExportOptions
from tasktree.services.config_service import get_config_service
from tasktree.services.context_manager import get_task_repository, get_transfer_service
from tasktree.services.sample_data import SAMPLE_TASKS
from tasktree.services.stats import compute_stats
from tasktree.utils.exit_codes import ERROR_GENERAL, ERROR_INVALID_ARGS
from tasktree.utils.ui.formatters import (
    format_info,
    format_output,
    format_stats,
    format_success,
    format_warning,
)

from .decorators import AppError, command_wrapper


@command_wrapper
async def init_store(
    sample: bool = typer.Option(False, "--sample", help="Seed an empty store with sample tasks"),
) -> None:
    """Prepare the storage backend of the active context."""
    repository = get_task_repository()
    async with repository:
        seeded = await repository.ensure_initialized(SAMPLE_TASKS if sample else None)

    context = get_config_service().get_current_context()
    format_success(f"Storage ready for context '{context.name}' ({context.type})")
    if sample and seeded:
        format_info(f"Seeded {seeded} sample tasks")
    elif sample:
        format_info("Store already has tasks, nothing seeded")


@command_wrapper
async def show_stats(
    output: str = typer.Option("pretty", "--output", "-o", help="pretty, json or yaml"),
) -> None:
    """Show task counts by status and deadline."""
    transfer = get_transfer_service()
    async with transfer.tasks.repository:
        stats = compute_stats(await transfer.tasks.list_all())

    if output in ("json", "yaml"):
        format_output(stats.model_dump(), output)
    else:
        format_stats(stats)


@command_wrapper
async def export_tasks(
    fmt: ExportFormat = typer.Argument(..., metavar="FORMAT", help="json, csv or markdown"),
    output_file: Path | None = typer.Option(
        None, "--output", "-o", help="Write to this file instead of stdout"
    ),
    no_completed: bool = typer.Option(False, "--no-completed", help="Leave out done tasks"),
    no_description: bool = typer.Option(False, "--no-description", help="Blank descriptions"),
    no_labels: bool = typer.Option(False, "--no-labels", help="Blank labels"),
) -> None:
    """Export every task as JSON, CSV or Markdown."""
    defaults = get_config_service().config.export
    options = ExportOptions(
        include_completed=defaults.include_completed and not no_completed,
        include_description=defaults.include_description and not no_description,
        include_labels=defaults.include_labels and not no_labels,
    )

    transfer = get_transfer_service()
    async with transfer.tasks.repository:
        text = await transfer.export_as(fmt, options)

    if output_file is None:
        typer.echo(text, nl=not text.endswith("\n"))
        return

    if not output_file.suffix:
        output_file = output_file.with_suffix(FILE_EXTENSIONS[fmt])
    output_file.write_text(text, encoding="utf-8")
    format_success(f"Tasks exported to: {output_file}")


@command_wrapper
async def import_tasks(
    input_file: Path = typer.Argument(..., help="File to import"),
    fmt: ExportFormat | None = typer.Option(
        None, "--format", "-f", help="json, csv or markdown (default: from extension)"
    ),
) -> None:
    """Import tasks from a JSON, CSV or Markdown file."""
    try:
        text = input_file.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise AppError(f"File not found: {input_file}", ERROR_INVALID_ARGS) from None
    except (OSError, UnicodeDecodeError) as e:
        raise AppError(f"Cannot read {input_file}: {e}", ERROR_INVALID_ARGS) from e

    fmt = fmt or format_from_filename(input_file)

    transfer = get_transfer_service()
    async with transfer.tasks.repository:
        result = await transfer.import_from(fmt, text)

    for error in result.errors:
        format_warning(error)

    if not result.success:
        raise typer.Exit(code=ERROR_GENERAL)

    format_success(f"Imported {result.imported_count} task(s)")
    if result.has_errors:
        format_info(f"{len(result.errors)} record(s) skipped")
