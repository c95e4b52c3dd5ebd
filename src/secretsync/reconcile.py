"""
Reconciler -- copy vault secrets into the local vault.

    source.list(include unreadable)  ->  drop names the destination already has
                                     ->  record unreadable, seal the rest

One pass, no retries. Read failures are collected into the outcome;
anything else (listing or sealing blowing up) aborts the run.
"""

from __future__ import annotations

import logging
from typing import Optional

from .errors import LocalVaultDisabledError, SecretWriteError
from .models import ReconcileOutcome, Unreadable
from .stores.base import SecretStore

logger = logging.getLogger("secretsync.reconcile")


def unreadable_message(name: str) -> str:
    """Fallback diagnostic for a secret that could not be read."""
    return f'Secret "{name}" has been skipped as there was an error reading it.'


def reconcile(
    source: SecretStore,
    destination: Optional[SecretStore],
    force: bool = False,
) -> ReconcileOutcome:
    """Copy every readable secret from ``source`` into ``destination``.

    Without ``force``, secrets whose name already exists in the
    destination are skipped regardless of their value. Secrets the
    source cannot decrypt are reported in ``failed`` and never written.

    Args:
        source: Store to read from (the vault).
        destination: Store to write to (the local vault), or None when
            the local vault is disabled.
        force: Overwrite secrets that already exist in the destination.

    Returns:
        ReconcileOutcome with skipped, failed and copied names.

    Raises:
        LocalVaultDisabledError: If ``destination`` is None. The source
            is not read in that case.
        SecretStoreUnavailableError: If either store cannot be listed.
        SecretWriteError: If sealing a secret fails; remaining secrets
            are not written. Its ``outcome`` holds the partial result.
    """
    if destination is None:
        raise LocalVaultDisabledError()

    listing = source.list_secrets(include_unreadable=True)
    candidates = dict(listing.secrets)
    outcome = ReconcileOutcome(total_found=len(candidates))
    logger.info("%d secret(s) found in the vault", outcome.total_found)

    if not force:
        existing = destination.list_secrets(include_unreadable=False)
        for name in existing.secrets:
            if name in candidates and not isinstance(candidates[name], Unreadable):
                del candidates[name]
                outcome.skipped.append(name)
        if outcome.skipped:
            logger.info(
                "%d secret(s) already present in the local vault, skipping",
                outcome.skipped_count,
            )

    for name, entry in candidates.items():
        if isinstance(entry, Unreadable):
            message = entry.message or listing.message or unreadable_message(name)
            outcome.failed[name] = message
            logger.warning("Could not read secret %s: %s", name, message)
            continue

        try:
            receipt = destination.seal(name, entry.value)
        except SecretWriteError as exc:
            exc.outcome = outcome
            raise
        outcome.copied.append(name)
        if receipt.message:
            outcome.notes[name] = receipt.message
        logger.debug("Copied secret %s to the local vault", name)

    return outcome
