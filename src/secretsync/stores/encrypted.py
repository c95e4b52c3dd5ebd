"""
The encrypted vault -- secrets at rest, safe to commit.

Each secret is a Fernet token (AES-128-CBC + HMAC-SHA256) in its own
file. An index keeps the insertion order of names. The key lives next
to the secrets unless it is supplied from the environment.

Storage layout:
    <vault_dir>/
    ├── vault.key        # Fernet key (keep out of version control)
    ├── list.yaml        # Ordered list of secret names
    └── <NAME>.enc       # Fernet token per secret
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from cryptography.fernet import Fernet, InvalidToken

from ..errors import SecretStoreUnavailableError, SecretWriteError
from ..models import Readable, SealReceipt, SecretEntry, SecretListing, Unreadable
from .base import validate_name

logger = logging.getLogger("secretsync.stores.encrypted")

KEY_FILE_NAME = "vault.key"
INDEX_FILE_NAME = "list.yaml"
MISSING_KEY_MESSAGE = "Secrets cannot be revealed as the decryption key is missing."


class EncryptedVault:
    """Fernet-encrypted, directory-backed secret store.

    Args:
        directory: Vault directory. Created on first write.
        decryption_key: Fernet key overriding the key file, e.g. from an
            environment variable on a deployment host.
    """

    def __init__(
        self,
        directory: Path,
        decryption_key: Optional[Union[str, bytes]] = None,
    ) -> None:
        self.directory = directory.expanduser()
        if isinstance(decryption_key, str):
            decryption_key = decryption_key.encode()
        self._decryption_key = decryption_key or None

    @property
    def key_file(self) -> Path:
        return self.directory / KEY_FILE_NAME

    @property
    def index_file(self) -> Path:
        return self.directory / INDEX_FILE_NAME

    @property
    def has_key(self) -> bool:
        """Whether a key is available for sealing and revealing."""
        return self._load_key() is not None

    def _secret_path(self, name: str) -> Path:
        return self.directory / f"{name}.enc"

    def _load_key(self) -> Optional[bytes]:
        if self._decryption_key:
            return self._decryption_key
        if self.key_file.exists():
            return self.key_file.read_bytes().strip() or None
        return None

    def _fernet(self, key: bytes) -> Fernet:
        try:
            return Fernet(key)
        except ValueError as exc:
            raise SecretStoreUnavailableError(
                f'The vault key for "{self.directory}" is malformed: {exc}'
            ) from exc

    def _read_index(self) -> list[str]:
        if not self.index_file.exists():
            return []
        try:
            data = yaml.safe_load(self.index_file.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise SecretStoreUnavailableError(
                f'Cannot read the vault index "{self.index_file}": {exc}'
            ) from exc
        if data is None:
            return []
        if not isinstance(data, list) or not all(isinstance(n, str) for n in data):
            raise SecretStoreUnavailableError(
                f'The vault index "{self.index_file}" is not a list of names.'
            )
        return data

    def _write_index(self, names: list[str]) -> None:
        self.index_file.write_text(
            yaml.dump(names, default_flow_style=False), encoding="utf-8"
        )

    def list_secrets(self, include_unreadable: bool = False) -> SecretListing:
        """Decrypt and return every secret in the vault.

        A missing vault directory is an empty vault. A missing key makes
        every secret unreadable rather than failing the call.

        Args:
            include_unreadable: Report secrets that fail to decrypt as
                ``Unreadable`` entries instead of omitting them.

        Returns:
            SecretListing in index order.

        Raises:
            SecretStoreUnavailableError: If the index or key is corrupt.
        """
        if not self.directory.exists():
            return SecretListing()

        names = self._read_index()
        key = self._load_key()

        if key is None:
            logger.warning("No decryption key for %s", self.directory)
            secrets: dict[str, SecretEntry] = {}
            if include_unreadable:
                secrets = {name: Unreadable(MISSING_KEY_MESSAGE) for name in names}
            return SecretListing(secrets=secrets, message=MISSING_KEY_MESSAGE)

        fernet = self._fernet(key)
        secrets = {}
        unreadable = 0
        for name in names:
            entry = self._decrypt_one(fernet, name)
            if isinstance(entry, Unreadable):
                unreadable += 1
                logger.debug("Secret %s unreadable: %s", name, entry.message)
                if not include_unreadable:
                    continue
            secrets[name] = entry

        message = None
        if unreadable:
            message = (
                f"{unreadable} secret{'s' if unreadable != 1 else ''} "
                f'could not be read from "{self.directory}".'
            )
        return SecretListing(secrets=secrets, message=message)

    def _decrypt_one(self, fernet: Fernet, name: str) -> SecretEntry:
        path = self._secret_path(name)
        try:
            token = path.read_bytes()
        except FileNotFoundError:
            return Unreadable(f'Secret "{name}" not found in "{self.directory}".')
        except OSError as exc:
            return Unreadable(f'Secret "{name}" could not be read: {exc}')

        try:
            return Readable(fernet.decrypt(token))
        except InvalidToken:
            return Unreadable(
                f'Secret "{name}" could not be decrypted with the current key.'
            )

    def seal(self, name: str, value: bytes) -> SealReceipt:
        """Encrypt ``value`` and store it under ``name``.

        Raises:
            InvalidSecretNameError: If ``name`` is not a plain identifier.
            SecretWriteError: If no key is available or the write fails.
        """
        validate_name(name)
        key = self._load_key()
        if key is None:
            raise SecretWriteError(
                f'Cannot seal "{name}": the encryption key is missing. '
                "Run generate-keys first."
            )

        fernet = self._fernet(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            names = self._read_index()
            self._secret_path(name).write_bytes(fernet.encrypt(value))
            created = name not in names
            if created:
                names.append(name)
                self._write_index(names)
        except OSError as exc:
            raise SecretWriteError(f'Cannot seal "{name}": {exc}') from exc

        logger.info("Sealed secret %s into %s", name, self.directory)
        return SealReceipt(
            name=name,
            message=f'Secret "{name}" encrypted in "{self.directory}"; you can commit it.',
            created=created,
        )

    def remove(self, name: str) -> bool:
        """Delete ``name`` from the vault.

        Returns:
            True if the secret existed.
        """
        validate_name(name)
        names = self._read_index()
        path = self._secret_path(name)
        if name not in names and not path.exists():
            return False

        try:
            path.unlink(missing_ok=True)
            if name in names:
                names.remove(name)
                self._write_index(names)
        except OSError as exc:
            raise SecretWriteError(f'Cannot remove "{name}": {exc}') from exc

        logger.info("Removed secret %s from %s", name, self.directory)
        return True

    def generate_keys(self, override: bool = False) -> bool:
        """Create the vault key file.

        Args:
            override: Replace an existing key. Secrets sealed with the old
                key become unreadable.

        Returns:
            True if a key was written, False if one already existed.
        """
        if self.key_file.exists() and not override:
            return False

        self.directory.mkdir(parents=True, exist_ok=True)
        self.key_file.write_bytes(Fernet.generate_key())
        os.chmod(self.key_file, 0o600)
        logger.info("Generated vault key at %s", self.key_file)
        return True
