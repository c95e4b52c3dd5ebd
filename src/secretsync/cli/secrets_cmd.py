"""Secrets commands: decrypt-to-local, set, list, remove, generate-keys."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from rich.markup import escape
from rich.table import Table

from ..audit import audit_event
from ..errors import SecretSyncError, SecretWriteError
from ..models import ReconcileOutcome, Readable
from ..reconcile import reconcile
from ..reporter import exit_code, render_outcome
from ._common import (
    HOME_DEFAULT,
    console,
    err_console,
    fail,
    fail_on,
    load_vaults,
    resolve_home,
)


def _read_value(name: str) -> bytes:
    stdin = click.get_text_stream("stdin")
    if stdin.isatty():
        value = click.prompt(f'Value of "{name}"', hide_input=True)
    else:
        value = stdin.read()
        if value.endswith("\n"):
            value = value[:-1]
    return value.encode("utf-8")


def _audit_outcome(
    home_path: Path, outcome: ReconcileOutcome, force: bool, aborted: bool = False
) -> None:
    detail = (
        f"{outcome.copied_count} copied, {outcome.skipped_count} skipped, "
        f"{outcome.failed_count} failed"
    )
    if aborted:
        detail += " (aborted on write failure)"
    audit_event(
        home_path,
        "SECRETS_DECRYPT_TO_LOCAL",
        detail,
        metadata={
            "force": force,
            "aborted": aborted,
            "copied": outcome.copied,
            "skipped": outcome.skipped,
            "failed": sorted(outcome.failed),
        },
    )


def register_secrets_commands(main: click.Group) -> None:
    """Register the secrets command group."""

    @main.group()
    def secrets():
        """Manage the encrypted vault and the local vault."""

    @secrets.command("decrypt-to-local")
    @click.option("--home", default=HOME_DEFAULT, type=click.Path())
    @click.option(
        "--force", "-f", is_flag=True,
        help="Override secrets that already exist in the local vault.",
    )
    @click.option(
        "--exit", "exit_on_error", is_flag=True,
        help="Return a non-zero exit code if any secret cannot be read.",
    )
    @click.option("--json-out", is_flag=True, help="Output as machine-readable JSON.")
    def decrypt_to_local(home: str, force: bool, exit_on_error: bool, json_out: bool):
        """Decrypt all secrets and store them in the local vault.

        Secrets already present in the local vault are skipped unless
        --force is given.
        """
        home_path = resolve_home(home)
        config, vault, local_vault = load_vaults(home_path)

        try:
            outcome = reconcile(vault, local_vault, force=force)
        except SecretWriteError as exc:
            if exc.outcome is not None:
                if config.audit:
                    _audit_outcome(home_path, exc.outcome, force, aborted=True)
                for name in exc.outcome.copied:
                    err_console.print(
                        f'  [cyan][NOTE][/] Secret "{escape(name)}" was written before the failure.'
                    )
            fail_on(exc)
        except SecretSyncError as exc:
            fail_on(exc)

        if config.audit:
            _audit_outcome(home_path, outcome, force)

        if json_out:
            click.echo(json.dumps(outcome.to_dict(), indent=2))
        else:
            err_console.print()
            render_outcome(outcome, err_console)
            err_console.print()

        code = exit_code(outcome, strict=exit_on_error)
        if code:
            sys.exit(code)

    @secrets.command("set")
    @click.argument("name")
    @click.argument("value", required=False)
    @click.option("--home", default=HOME_DEFAULT, type=click.Path())
    @click.option("--local", "-l", is_flag=True, help="Write to the local vault instead.")
    def secrets_set(name: str, value, home: str, local: bool):
        """Seal a secret into the vault.

        Without VALUE the secret is read from stdin (or prompted for).
        """
        home_path = resolve_home(home)
        config, vault, local_vault = load_vaults(home_path)

        store = local_vault if local else vault
        if store is None:
            fail("The local vault is disabled.")

        data = value.encode("utf-8") if value is not None else _read_value(name)
        try:
            receipt = store.seal(name, data)
        except SecretSyncError as exc:
            fail_on(exc)

        if config.audit:
            audit_event(
                home_path, "SECRETS_SET", f"Secret {name} sealed",
                metadata={"local": local, "created": receipt.created},
            )
        console.print(f"  [green][OK][/] {escape(receipt.message or name)}")

    @secrets.command("list")
    @click.option("--home", default=HOME_DEFAULT, type=click.Path())
    @click.option("--reveal", "-r", is_flag=True, help="Display decrypted values.")
    def secrets_list(home: str, reveal: bool):
        """List vault secrets and their local overrides."""
        home_path = resolve_home(home)
        _, vault, local_vault = load_vaults(home_path)

        try:
            listing = vault.list_secrets(include_unreadable=True)
            local = local_vault.list_secrets() if local_vault is not None else None
        except SecretSyncError as exc:
            fail_on(exc)

        if not listing.secrets:
            console.print("\n  [dim]No secrets found in the vault.[/]\n")
            return

        table = Table(title="Secrets", show_lines=False)
        table.add_column("Secret", style="cyan")
        table.add_column("Value")
        if local is not None:
            table.add_column("Local Value")

        def _show(entry) -> str:
            if entry is None:
                return ""
            if not isinstance(entry, Readable):
                return "[red]unreadable[/]"
            if not reveal:
                return "[dim]******[/]"
            return escape(entry.value.decode("utf-8", errors="replace"))

        for name, entry in listing.secrets.items():
            row = [name, _show(entry)]
            if local is not None:
                row.append(_show(local.secrets.get(name)))
            table.add_row(*row)

        console.print()
        console.print(table)
        if listing.message:
            console.print(f"  [yellow]{escape(listing.message)}[/]")
        if not reveal:
            console.print("  [dim]Use --reveal to display values.[/]")
        console.print()

    @secrets.command("remove")
    @click.argument("name")
    @click.option("--home", default=HOME_DEFAULT, type=click.Path())
    @click.option("--local", "-l", is_flag=True, help="Remove from the local vault instead.")
    def secrets_remove(name: str, home: str, local: bool):
        """Remove a secret from the vault."""
        home_path = resolve_home(home)
        config, vault, local_vault = load_vaults(home_path)

        store = local_vault if local else vault
        if store is None:
            fail("The local vault is disabled.")

        try:
            removed = store.remove(name)
        except SecretSyncError as exc:
            fail_on(exc)

        if not removed:
            fail(f'Secret "{name}" not found.')

        if config.audit:
            audit_event(home_path, "SECRETS_REMOVE", f"Secret {name} removed",
                        metadata={"local": local})
        console.print(f'  [green][OK][/] Secret "{escape(name)}" removed.')

    @secrets.command("generate-keys")
    @click.option("--home", default=HOME_DEFAULT, type=click.Path())
    @click.option(
        "--override", is_flag=True,
        help="Replace an existing key. Secrets sealed with it become unreadable.",
    )
    def generate_keys(home: str, override: bool):
        """Create the key used to seal and reveal vault secrets."""
        home_path = resolve_home(home)
        config, vault, _ = load_vaults(home_path)

        if not vault.generate_keys(override=override):
            console.print(
                f"  [yellow]A key already exists in {escape(str(vault.directory))}.[/] "
                "Use --override to replace it."
            )
            return

        if config.audit:
            audit_event(home_path, "SECRETS_GENERATE_KEYS", f"Key written to {vault.key_file}")
        console.print(f"  [green][OK][/] Key written to {escape(str(vault.key_file))}")
        console.print("  [dim]Do not commit the key file.[/]")
