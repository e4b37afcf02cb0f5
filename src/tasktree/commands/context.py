"""Context management commands.

A context selects the storage backend: ``memory``, ``local`` (SQLite file)
or ``remote`` (PostgREST endpoint).
"""

import json
from pathlib import Path

import pydantic
import typer
from rich.table import Table

from tasktree.models import Context
from tasktree.services.config_service import get_config_service
from tasktree.utils.exit_codes import ERROR_INVALID_ARGS
from tasktree.utils.ui.console import get_console

from .decorators import AppError, command_wrapper

app = typer.Typer(
    help="Manage storage contexts (memory/local/remote)",
    no_args_is_help=False,
)
console = get_console()


def _describe(ctx: Context) -> None:
    console.print(f"\n[bold]Context:[/bold] {ctx.name} ([cyan]{ctx.type}[/cyan])")
    if ctx.source:
        console.print(f"[bold]Source:[/bold] {ctx.source}")
    if ctx.description:
        console.print(f"[bold]Description:[/bold] {ctx.description}")
    if ctx.type == "local" and not Path(ctx.source).expanduser().exists():
        console.print("[yellow]Database file not yet created[/yellow]")
    console.print()


@app.callback(invoke_without_command=True)
def context_callback(ctx: typer.Context):
    """Show the active context.

    Use subcommands to list, switch, add or remove contexts.
    """
    if ctx.invoked_subcommand is not None:
        return
    try:
        current = get_config_service().get_current_context()
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    _describe(current)


@app.command("list", help="List all configured contexts")
@command_wrapper
def list_contexts(
    output: str = typer.Option("table", "--output", "-o", help="table or json"),
):
    service = get_config_service()
    contexts = service.list_contexts()
    current_name = service.config.current_context_name

    if output == "json":
        rows = [
            {
                "name": ctx.name,
                "type": ctx.type,
                "source": ctx.source,
                "current": ctx.name == current_name,
                "description": ctx.description,
            }
            for ctx in contexts
        ]
        console.print_json(json.dumps(rows))
        return

    if not contexts:
        console.print("[yellow]No contexts configured[/yellow]")
        return

    table = Table(title="tasktree contexts")
    table.add_column("ACTIVE", style="green")
    table.add_column("NAME", style="cyan")
    table.add_column("TYPE", style="yellow")
    table.add_column("SOURCE")
    for ctx in contexts:
        table.add_row("*" if ctx.name == current_name else "", ctx.name, ctx.type, ctx.source)
    console.print(table)


@app.command("use", help="Switch to another context")
@command_wrapper
def use_context(name: str = typer.Argument(..., help="Context name")):
    service = get_config_service()
    try:
        ctx = service.use_context(name)
    except ValueError as e:
        raise AppError(str(e), ERROR_INVALID_ARGS) from e

    console.print(f"[green]✓[/green] Switched to context '{ctx.name}' ([cyan]{ctx.type}[/cyan])")


@app.command("add", help="Add a context")
@command_wrapper
def add_context(
    name: str = typer.Argument(..., help="Context name"),
    ctx_type: str = typer.Option("local", "--type", help="memory, local or remote"),
    source: str | None = typer.Option(
        None, "--source", help="Database path or API URL (optional for local)"
    ),
    api_key: str | None = typer.Option(None, "--api-key", help="API key for remote contexts"),
    description: str = typer.Option("", "--description", help="Context description"),
):
    service = get_config_service()

    if ctx_type == "local" and not source:
        source = str(service.data_dir / f"{name}.db")
        console.print(f"[dim]Using default database path: {source}[/dim]")

    try:
        ctx = Context(
            name=name,
            type=ctx_type,
            source=source or "",
            api_key=api_key,
            description=description,
        )
        service.add_context(ctx)
    except pydantic.ValidationError as e:
        problems = "; ".join(err["msg"] for err in e.errors())
        raise AppError(f"Invalid context: {problems}", ERROR_INVALID_ARGS) from e
    except ValueError as e:
        raise AppError(str(e), ERROR_INVALID_ARGS) from e

    console.print(f"[green]✓[/green] Added context '{ctx.name}' ([cyan]{ctx.type}[/cyan])")


@app.command("remove", help="Remove a context")
@command_wrapper
def remove_context(
    name: str = typer.Argument(..., help="Context name"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
):
    if not force and not typer.confirm(f"Remove context '{name}'?"):
        console.print("Cancelled")
        raise typer.Exit(0)

    try:
        get_config_service().remove_context(name)
    except ValueError as e:
        raise AppError(str(e), ERROR_INVALID_ARGS) from e

    console.print(f"[green]✓[/green] Removed context '{name}'")
