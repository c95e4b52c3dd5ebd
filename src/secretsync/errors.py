"""
Exception taxonomy for vault reconciliation.

Per-secret read failures are never raised; they travel in-band as
``Unreadable`` entries. Everything here aborts the operation.
"""

from __future__ import annotations


class SecretSyncError(Exception):
    """Base class for every error raised by secretsync."""


class LocalVaultDisabledError(SecretSyncError):
    """Raised when reconciliation targets a disabled (absent) local vault."""

    def __init__(self, message: str = "The local vault is disabled.") -> None:
        super().__init__(message)


class SecretStoreUnavailableError(SecretSyncError):
    """Raised when a store cannot be enumerated at all."""


class SecretWriteError(SecretSyncError):
    """Raised when a secret cannot be sealed into a store.

    When raised out of a reconciliation, ``outcome`` holds what was
    already copied before the failure.
    """

    def __init__(self, message: str, outcome=None) -> None:
        super().__init__(message)
        self.outcome = outcome


class InvalidSecretNameError(SecretSyncError, ValueError):
    """Raised when a secret name is not a plain identifier."""


class ConfigError(SecretSyncError):
    """Raised when the configuration file cannot be loaded in strict mode."""
