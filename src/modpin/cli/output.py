"""Rich output formatting helpers for the modpin CLI.

Provides consistent terminal output for resolution plans, lockfile diffs,
profiles, installations, and errors. Version conflicts get a panel listing
every requirement that constrained the mod, so the user can see which
profile entry or pinned mod to change.
"""

from __future__ import annotations

import json
import sys
from typing import Any, NoReturn

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from modpin.core.lockfile import LockFile
from modpin.exceptions import ModpinError, ResolutionError, VersionConflict

# Exit codes
EXIT_OK = 0
EXIT_RESOLUTION = 1
EXIT_USAGE = 2

console = Console()
err_console = Console(stderr=True)


def exit_code_for(exc: ModpinError) -> int:
    """Resolution failures exit 1; store, lockfile and installation errors 2."""
    return EXIT_RESOLUTION if isinstance(exc, ResolutionError) else EXIT_USAGE


def fail(exc: ModpinError, output_format: str = "text") -> NoReturn:
    """Report *exc* and exit with its exit code."""
    if output_format == "json":
        click.echo(json.dumps(exc.to_dict(), indent=2))
    elif isinstance(exc, VersionConflict):
        print_conflict(exc)
    else:
        err_console.print(Text.assemble((f"Error ({exc.kind}): ", "bold red"), exc.message))
    sys.exit(exit_code_for(exc))


def print_conflict(exc: VersionConflict) -> None:
    """Print a version conflict with every contributing requirement."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Required by", style="bold")
    table.add_column("Constraint")
    for constraint, origin in exc.requirements:
        table.add_row(origin, constraint)

    available = ", ".join(exc.available) if exc.available else "none"
    err_console.print(
        Panel(
            Text.assemble(
                ("No version of ", ""), (exc.mod_reference, "bold"),
                (" satisfies ", ""), (exc.constraint, "yellow"),
                ("\nCompatible versions: ", "dim"), (available, "dim"),
            ),
            title="[bold red]Version conflict[/bold red]",
        )
    )
    err_console.print(table)


def print_resolution_summary(lockfile: LockFile, game_version: int) -> None:
    """Print the resolved mods of a plan."""
    console.print(
        Panel(
            f"[bold green]Resolution successful[/bold green] "
            f"(game version {game_version})",
            title="Dependency Resolution",
        )
    )
    if not lockfile:
        console.print("[dim]No mods to resolve.[/dim]")
        return

    table = Table(show_header=True)
    table.add_column("Mod", style="bold")
    table.add_column("Version")
    table.add_column("Source", style="dim")
    for ref, mod in lockfile.items():
        table.add_row(ref, str(mod.version), "local" if mod.is_local else "registry")
    console.print(table)


_DIFF_STYLES = {"added": "green", "removed": "red", "changed": "yellow"}


def print_diff(diff: dict[str, Any]) -> None:
    """Print a lockfile diff as ``+``/``-``/``~`` lines."""
    if not any(diff.values()):
        console.print("[dim]Lockfile unchanged.[/dim]")
        return
    for ref in diff["added"]:
        console.print(f"  [{_DIFF_STYLES['added']}]+ {ref}[/]")
    for ref in diff["removed"]:
        console.print(f"  [{_DIFF_STYLES['removed']}]- {ref}[/]")
    for change in diff["changed"]:
        if change["field"] == "version":
            detail = f"{change['old']} -> {change['new']}"
        else:
            detail = f"{change['field']} changed"
        console.print(f"  [{_DIFF_STYLES['changed']}]~ {change['name']}[/] {detail}")


def plan_to_dict(lockfile: LockFile, diff: dict[str, Any], game_version: int) -> dict[str, Any]:
    return {
        "game_version": game_version,
        "lockfile": lockfile.to_dict(),
        "diff": diff,
    }
