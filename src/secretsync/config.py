"""
Configuration loading and vault construction.

    <home>/config.yaml  ->  SecretsConfig  ->  (EncryptedVault, DotenvVault | None)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from .errors import ConfigError
from .models import SecretsConfig
from .stores.dotenv_vault import DotenvVault
from .stores.encrypted import EncryptedVault

logger = logging.getLogger("secretsync.config")

CONFIG_FILE_NAME = "config.yaml"


def load_config(home: Path, strict: bool = False) -> SecretsConfig:
    """Load configuration from ``<home>/config.yaml``.

    A missing file yields defaults. A malformed file logs a warning and
    yields defaults, unless ``strict`` is set.

    Args:
        home: secretsync home directory.
        strict: Raise instead of falling back to defaults.

    Returns:
        SecretsConfig: Parsed or default configuration.

    Raises:
        ConfigError: If ``strict`` and the file cannot be parsed.
    """
    config_file = home / CONFIG_FILE_NAME
    if not config_file.exists():
        return SecretsConfig()

    try:
        data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
        return SecretsConfig(**data)
    except (yaml.YAMLError, ValueError, TypeError) as exc:
        if strict:
            raise ConfigError(f"Failed to load {config_file}: {exc}") from exc
        logger.warning("Failed to load config %s: %s", config_file, exc)
    return SecretsConfig()


def save_config(home: Path, config: SecretsConfig) -> Path:
    """Persist configuration to ``<home>/config.yaml``.

    Returns:
        Path: The written config file.
    """
    home.mkdir(parents=True, exist_ok=True)
    config_file = home / CONFIG_FILE_NAME
    data = config.model_dump(mode="json")
    config_file.write_text(yaml.dump(data, default_flow_style=False), encoding="utf-8")
    return config_file


def _resolve(home: Path, path: Path) -> Path:
    path = path.expanduser()
    return path if path.is_absolute() else home / path


def open_vault(home: Path, config: SecretsConfig) -> EncryptedVault:
    """Build the encrypted vault described by ``config``.

    The decryption key is taken from the configured environment variable
    when set, otherwise from the vault's key file.
    """
    decryption_key = None
    if config.decryption_key_env:
        decryption_key = os.environ.get(config.decryption_key_env) or None
    return EncryptedVault(_resolve(home, config.vault_dir), decryption_key=decryption_key)


def open_local_vault(home: Path, config: SecretsConfig) -> Optional[DotenvVault]:
    """Build the local vault, or None when it is disabled."""
    if config.local_vault is None:
        return None
    return DotenvVault(_resolve(home, config.local_vault))
