"""
The local vault -- plaintext overrides in a dotenv file.

Meant for a single machine and never committed. Values are stored as
UTF-8 text; everything the file holds is readable by definition.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dotenv import dotenv_values, set_key, unset_key

from ..errors import SecretStoreUnavailableError, SecretWriteError
from ..models import Readable, SealReceipt, SecretListing
from .base import validate_name

logger = logging.getLogger("secretsync.stores.dotenv")


class DotenvVault:
    """Secret store backed by a ``.env``-style file.

    Args:
        path: Location of the dotenv file. Created on first write.
    """

    def __init__(self, path: Path) -> None:
        self.path = path.expanduser()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            values = dotenv_values(self.path, interpolate=False, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SecretStoreUnavailableError(
                f'Cannot read the local vault "{self.path}": {exc}'
            ) from exc
        return {key: value or "" for key, value in values.items()}

    def list_secrets(self, include_unreadable: bool = False) -> SecretListing:
        secrets = {
            key: Readable(value.encode("utf-8"))
            for key, value in self._read().items()
        }
        return SecretListing(secrets=secrets)

    def seal(self, name: str, value: bytes) -> SealReceipt:
        """Write ``name`` to the dotenv file, replacing any existing line.

        Raises:
            InvalidSecretNameError: If ``name`` is not a plain identifier.
            SecretWriteError: If the value is not UTF-8 or the file
                cannot be written.
        """
        validate_name(name)
        try:
            text = value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SecretWriteError(
                f'Cannot store "{name}" in "{self.path}": value is not UTF-8 text.'
            ) from exc

        created = name not in self._read()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch(exist_ok=True)
            set_key(self.path, name, text, quote_mode="always", encoding="utf-8")
        except OSError as exc:
            raise SecretWriteError(f'Cannot store "{name}" in "{self.path}": {exc}') from exc

        logger.info("Stored secret %s in %s", name, self.path)
        verb = "added to" if created else "overridden in"
        return SealReceipt(
            name=name,
            message=f'Secret "{name}" {verb} "{self.path}".',
            created=created,
        )

    def remove(self, name: str) -> bool:
        """Delete ``name`` from the dotenv file.

        Returns:
            True if the secret existed.
        """
        validate_name(name)
        if name not in self._read():
            return False
        try:
            unset_key(self.path, name, encoding="utf-8")
        except OSError as exc:
            raise SecretWriteError(f'Cannot remove "{name}" from "{self.path}": {exc}') from exc
        logger.info("Removed secret %s from %s", name, self.path)
        return True
