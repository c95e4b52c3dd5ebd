"""Render reconciliation outcomes for humans and map them to exit codes."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from .models import ReconcileOutcome


def _plural(count: int, singular: str = "", plural: str = "s") -> str:
    return singular if count == 1 else plural


def render_outcome(outcome: ReconcileOutcome, console: Console) -> None:
    """Print a reconciliation outcome.

    Args:
        outcome: Result of ``reconcile``.
        console: Rich console to print to.
    """
    found = outcome.total_found
    console.print(f"  [dim]// {found} secret{_plural(found)} found in the vault.[/]")

    skipped = outcome.skipped_count
    if skipped:
        console.print(
            f"  [bold yellow][WARNING][/] {skipped} secret"
            f"{_plural(skipped, ' is', 's are')} already overridden in the local "
            "vault and will be skipped."
        )
        console.print("  [yellow]Use the --force flag to override these.[/]")

    for message in outcome.failed.values():
        console.print(f"  [bold red][ERROR][/] {escape(message)}")

    for name in outcome.copied:
        note = outcome.notes.get(name) or f'Secret "{name}" copied to the local vault.'
        console.print(f"  [cyan][NOTE][/] {escape(note)}")

    console.print(
        f"\n  [green]{outcome.copied_count} copied[/], "
        f"[yellow]{skipped} skipped[/], "
        f"[red]{outcome.failed_count} failed[/]"
    )


def exit_code(outcome: ReconcileOutcome, strict: bool = False) -> int:
    """Process exit code for an outcome.

    Read failures only fail the process when ``strict`` is set.
    """
    if outcome.had_errors and strict:
        return 1
    return 0
