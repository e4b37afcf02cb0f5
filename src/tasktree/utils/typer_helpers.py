"""Typer helper utilities."""

from difflib import get_close_matches

import typer
from typer.core import TyperGroup

from tasktree.utils.ui.console import get_console


def suggest_commands(attempted: str, names: list[str], limit: int = 3) -> list[str]:
    """Closest command names to a mistyped one, best match first."""
    return get_close_matches(attempted, names, n=limit, cutoff=0.6)


class SuggestingGroup(TyperGroup):
    """Typer group that answers an unknown command with close matches.

    ``tasktree lst`` prints ``Did you mean this? list`` and exits 2 instead
    of Click's bare "No such command" usage error. Hidden commands are never
    suggested.
    """

    def visible_commands(self) -> list[str]:
        return [name for name, cmd in self.commands.items() if not getattr(cmd, "hidden", False)]

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except Exception as e:
            if not args:
                raise
            attempted = args[0]
            suggestions = suggest_commands(attempted, self.visible_commands())
            if not suggestions:
                raise

            console = get_console()
            console.print(f'[red]Error:[/red] unknown command "{attempted}" for "{ctx.info_name}"')
            console.print()
            heading = "Did you mean this?" if len(suggestions) == 1 else "Did you mean one of these?"
            console.print(f"[yellow]{heading}[/yellow]")
            for suggestion in suggestions:
                console.print(f"        {suggestion}")
            raise typer.Exit(2) from e
