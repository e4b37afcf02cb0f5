"""Main entry point for the tasktree CLI."""

import typer

from tasktree import __version__
from tasktree.commands import context, data, tasks
from tasktree.utils.typer_helpers import SuggestingGroup
from tasktree.utils.ui.console import get_console

app = typer.Typer(
    name="tasktree",
    cls=SuggestingGroup,
    help="Hierarchical task manager with local, in-memory and remote storage",
    no_args_is_help=True,
)

console = get_console(highlight=False)

# Task commands
app.command("add")(tasks.add_task)
app.command("show")(tasks.show_task)
app.command("edit")(tasks.edit_task)
app.command("delete")(tasks.delete_task)
app.command("list")(tasks.list_tasks)

# Store commands
app.command("init")(data.init_store)
app.command("stats")(data.show_stats)
app.command("export")(data.export_tasks)
app.command("import")(data.import_tasks)

app.add_typer(context.app, name="context", help="Storage context management")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"tasktree {__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
