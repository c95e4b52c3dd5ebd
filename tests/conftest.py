"""Shared test fixtures for secretsync."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml


@pytest.fixture
def tmp_home(tmp_path: Path) -> Path:
    """Provide a temporary secretsync home directory."""
    home = tmp_path / ".secretsync"
    home.mkdir()
    return home


@pytest.fixture
def keyed_vault(tmp_home: Path):
    """An encrypted vault under the home directory with a fresh key."""
    from secretsync.stores import EncryptedVault

    vault = EncryptedVault(tmp_home / "vault")
    vault.generate_keys()
    return vault


@pytest.fixture
def local_vault(tmp_home: Path):
    """The default local vault under the home directory."""
    from secretsync.stores import DotenvVault

    return DotenvVault(tmp_home / ".env.local")


@pytest.fixture
def disabled_local_home(tmp_home: Path) -> Path:
    """A home whose config disables the local vault."""
    (tmp_home / "config.yaml").write_text(
        yaml.dump({"local_vault": None}, default_flow_style=False)
    )
    return tmp_home
