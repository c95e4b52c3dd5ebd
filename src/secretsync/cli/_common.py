"""Shared utilities for CLI command modules.

Provides the Rich consoles, logging setup and vault loading used by
every command.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .. import SECRETSYNC_HOME
from ..config import load_config, open_local_vault, open_vault
from ..errors import SecretSyncError
from ..models import SecretsConfig
from ..stores.dotenv_vault import DotenvVault
from ..stores.encrypted import EncryptedVault

console = Console()
err_console = Console(stderr=True)

HOME_DEFAULT = SECRETSYNC_HOME


def configure_logging(verbose: bool) -> None:
    """Attach a Rich handler to the ``secretsync`` logger once."""
    root = logging.getLogger("secretsync")
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        root.addHandler(RichHandler(console=err_console, show_path=False))
    root.setLevel(logging.INFO if verbose else logging.WARNING)


def resolve_home(home: str) -> Path:
    return Path(home).expanduser()


def load_vaults(
    home_path: Path,
) -> tuple[SecretsConfig, EncryptedVault, Optional[DotenvVault]]:
    """Load config and build both vaults for a command."""
    config = load_config(home_path)
    return config, open_vault(home_path, config), open_local_vault(home_path, config)


def fail(message: str, code: int = 1) -> NoReturn:
    """Print an error and exit."""
    err_console.print(f"[bold red][ERROR][/] {escape(message)}")
    sys.exit(code)


def fail_on(exc: SecretSyncError) -> NoReturn:
    fail(str(exc))
