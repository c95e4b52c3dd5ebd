"""
The secret store capability.

Any object with ``list_secrets`` and ``seal`` qualifies as a store; no
base class is required. Diagnostics come back in the return values
rather than through a "last message" slot on the store.
"""

from __future__ import annotations

import re
from typing import Protocol, runtime_checkable

from ..errors import InvalidSecretNameError
from ..models import SealReceipt, SecretListing

SECRET_NAME_PATTERN = re.compile(r"\w+")


@runtime_checkable
class SecretStore(Protocol):
    """A key/value secret store that can be listed and written."""

    def list_secrets(self, include_unreadable: bool = False) -> SecretListing:
        """Enumerate every secret in the store.

        Args:
            include_unreadable: Include secrets that failed to decrypt
                as ``Unreadable`` entries instead of omitting them.

        Returns:
            SecretListing of name to entry.

        Raises:
            SecretStoreUnavailableError: If the store cannot be read at all.
        """
        ...

    def seal(self, name: str, value: bytes) -> SealReceipt:
        """Encrypt and persist ``value`` under ``name``, overwriting any entry.

        Raises:
            SecretWriteError: If the secret cannot be persisted.
        """
        ...


def validate_name(name: str) -> str:
    """Reject secret names that are not plain identifiers.

    Args:
        name: Candidate secret name.

    Returns:
        The name, unchanged.

    Raises:
        InvalidSecretNameError: If the name contains anything but
            letters, digits and underscores.
    """
    if not SECRET_NAME_PATTERN.fullmatch(name):
        raise InvalidSecretNameError(
            f'Invalid secret name "{name}": only "word" characters are allowed.'
        )
    return name
