"""
Audit trail for vault operations.

JSONL, one event per line, append-only. Events carry secret names and
counts. Values never reach the log.
"""

from __future__ import annotations

import json
import socket
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

AUDIT_LOG_NAME = "audit.log"


class AuditEntry(BaseModel):
    """A single structured audit log entry."""

    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    event_type: str
    detail: str
    host: str = Field(default_factory=socket.gethostname)
    metadata: Optional[dict] = None


def audit_event(
    home: Path,
    event_type: str,
    detail: str,
    metadata: Optional[dict] = None,
) -> AuditEntry:
    """Append a structured event to the audit log.

    Args:
        home: secretsync home directory.
        event_type: Event category (SECRETS_DECRYPT_TO_LOCAL, SECRETS_SET, ...).
        detail: Human-readable event description.
        metadata: Optional dict of extra structured data.

    Returns:
        AuditEntry: The entry that was written.
    """
    home.mkdir(parents=True, exist_ok=True)
    entry = AuditEntry(event_type=event_type, detail=detail, metadata=metadata)

    with (home / AUDIT_LOG_NAME).open("a", encoding="utf-8") as f:
        f.write(entry.model_dump_json() + "\n")

    return entry


def read_audit_log(home: Path, limit: int = 0) -> list[AuditEntry]:
    """Read audit entries, oldest first.

    Args:
        home: secretsync home directory.
        limit: Return only the last ``limit`` entries when positive.

    Returns:
        list[AuditEntry]: Parsed entries. Malformed lines are skipped.
    """
    audit_log = home / AUDIT_LOG_NAME
    if not audit_log.exists():
        return []

    entries = []
    for line in audit_log.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            entries.append(AuditEntry(**json.loads(line)))
        except (json.JSONDecodeError, ValueError):
            continue

    if limit > 0:
        return entries[-limit:]
    return entries
