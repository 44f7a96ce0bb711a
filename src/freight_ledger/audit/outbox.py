"""
Durable audit outbox.

Audit entries the primary sink could not accept are appended to a JSON-lines
file and replayed later with ``drain``. Entries are only removed from the
file once the sink has accepted them.
"""

import os
import threading
from pathlib import Path
from typing import Optional

import structlog

from freight_ledger.audit.sinks import AuditSink
from freight_ledger.data.models.audit import AuditEntry


class AuditOutbox:
    """Append-only JSON-lines queue of undelivered audit entries."""

    def __init__(self, path: Path, logger: Optional[structlog.BoundLogger] = None) -> None:
        """
        Initialize the outbox.

        Args:
            path: JSON-lines file; parent directories are created on first write
            logger: Optional structured logger
        """
        self.path = Path(path)
        self.logger = logger or structlog.get_logger(component="audit_outbox")
        self._lock = threading.Lock()

    def append(self, entry: AuditEntry) -> None:
        """Queue an entry. Raises OSError if the file cannot be written."""
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(entry.model_dump_json() + "\n")
                f.flush()
                os.fsync(f.fileno())
        self.logger.info("audit_entry_queued", entry_id=entry.id, path=str(self.path))

    def pending(self) -> list[AuditEntry]:
        """Return queued entries in the order they were queued."""
        with self._lock:
            return self._read()

    def _read(self) -> list[AuditEntry]:
        if not self.path.exists():
            return []
        with open(self.path, "r", encoding="utf-8") as f:
            return [AuditEntry.model_validate_json(line) for line in f if line.strip()]

    def _rewrite(self, entries: list[AuditEntry]) -> None:
        if not entries:
            self.path.unlink(missing_ok=True)
            return
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            for entry in entries:
                f.write(entry.model_dump_json() + "\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, self.path)

    def drain(self, sink: AuditSink) -> int:
        """
        Replay queued entries into the sink.

        Entries that still fail stay queued in their original order.

        Args:
            sink: Primary audit sink

        Returns:
            Number of entries delivered
        """
        with self._lock:
            entries = self._read()
            remaining: list[AuditEntry] = []
            delivered = 0
            for entry in entries:
                try:
                    sink.write(entry)
                    delivered += 1
                except Exception as e:
                    remaining.append(entry)
                    self.logger.warning("audit_replay_failed", entry_id=entry.id, error=str(e))
            self._rewrite(remaining)

        self.logger.info("audit_outbox_drained", delivered=delivered, remaining=len(remaining))
        return delivered
