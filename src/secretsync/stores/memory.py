"""In-process secret store."""

from __future__ import annotations

from typing import Optional, Union

from ..models import Readable, SealReceipt, SecretEntry, SecretListing, Unreadable


class MemoryVault:
    """Dict-backed secret store.

    Seed values may be raw bytes, ``Readable`` or ``Unreadable``; the
    latter stand in for secrets that fail to decrypt.

    Args:
        secrets: Initial contents, in insertion order.
        name: Label used in diagnostics.
    """

    def __init__(
        self,
        secrets: Optional[dict[str, Union[bytes, SecretEntry]]] = None,
        name: str = "memory",
    ) -> None:
        self.name = name
        self._secrets: dict[str, SecretEntry] = {}
        for key, value in (secrets or {}).items():
            self._secrets[key] = (
                Readable(value) if isinstance(value, bytes) else value
            )

    def list_secrets(self, include_unreadable: bool = False) -> SecretListing:
        entries = {
            key: entry
            for key, entry in self._secrets.items()
            if include_unreadable or isinstance(entry, Readable)
        }
        return SecretListing(secrets=entries)

    def seal(self, name: str, value: bytes) -> SealReceipt:
        created = name not in self._secrets
        self._secrets[name] = Readable(value)
        verb = "added to" if created else "overridden in"
        return SealReceipt(
            name=name,
            message=f'Secret "{name}" {verb} the {self.name} vault.',
            created=created,
        )

    def reveal(self, name: str) -> Optional[bytes]:
        """Return the raw value of ``name``, or None if absent or unreadable."""
        entry = self._secrets.get(name)
        if isinstance(entry, Readable):
            return entry.value
        return None

    def mark_unreadable(self, name: str, message: Optional[str] = None) -> None:
        """Replace ``name`` with an unreadable entry."""
        self._secrets[name] = Unreadable(message)
