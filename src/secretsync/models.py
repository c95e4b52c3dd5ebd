"""
Data models for secret stores and reconciliation results.

Secret entries are a tagged result: a name maps either to a
``Readable`` value or to an ``Unreadable`` marker carrying the reason.
An empty byte string is a perfectly good secret; only ``Unreadable``
means "could not be read".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel


@dataclass(frozen=True)
class Readable:
    """A secret whose value was decrypted successfully."""

    value: bytes


@dataclass(frozen=True)
class Unreadable:
    """A secret that exists but could not be decrypted.

    Attributes:
        message: Diagnostic explaining the failure, if the store had one.
    """

    message: Optional[str] = None


SecretEntry = Union[Readable, Unreadable]


@dataclass
class SecretListing:
    """Result of enumerating a store.

    Attributes:
        secrets: Secret name to entry, in store insertion order.
        message: Store-level diagnostic produced by the listing call.
    """

    secrets: dict[str, SecretEntry] = field(default_factory=dict)
    message: Optional[str] = None

    def __len__(self) -> int:
        return len(self.secrets)

    def names(self) -> list[str]:
        """Names of every listed secret."""
        return list(self.secrets)


@dataclass(frozen=True)
class SealReceipt:
    """Result of writing one secret.

    Attributes:
        name: Secret name that was written.
        message: Advisory, human-readable note about the write.
        created: False when an existing secret was overwritten.
    """

    name: str
    message: Optional[str] = None
    created: bool = True


@dataclass
class ReconcileOutcome:
    """Report of one vault-to-local-vault reconciliation.

    Every candidate (source secret not skipped) lands in exactly one of
    ``failed`` or ``copied``. ``skipped`` never overlaps either.

    Attributes:
        total_found: Number of secrets enumerated from the source.
        skipped: Names already present in the destination and left alone.
        failed: Name to diagnostic for secrets that could not be read.
        copied: Names sealed into the destination.
        notes: Advisory seal messages keyed by copied name.
    """

    total_found: int = 0
    skipped: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    copied: list[str] = field(default_factory=list)
    notes: dict[str, str] = field(default_factory=dict)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def copied_count(self) -> int:
        return len(self.copied)

    @property
    def had_errors(self) -> bool:
        """Whether any source secret failed to be read."""
        return bool(self.failed)

    def to_dict(self) -> dict:
        """Serialize to a JSON-friendly dict.

        Returns:
            dict: Counts plus the skipped, failed and copied details.
        """
        return {
            "total_found": self.total_found,
            "skipped": list(self.skipped),
            "failed": dict(self.failed),
            "copied": list(self.copied),
            "notes": dict(self.notes),
            "had_errors": self.had_errors,
        }


class SecretsConfig(BaseModel):
    """Vault locations and behaviour, loaded from ``config.yaml``.

    Relative paths are resolved against the secretsync home directory.
    A ``local_vault`` of ``None`` disables the local vault entirely.
    """

    vault_dir: Path = Path("vault")
    decryption_key_env: Optional[str] = "SECRETSYNC_DECRYPTION_KEY"
    local_vault: Optional[Path] = Path(".env.local")
    audit: bool = True
