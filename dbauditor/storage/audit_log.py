# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Append-only audit log of analyzer runs.

One entry per run: a ``[timestamp] KIND: summary`` header, optional
indented detail lines (one per finding), and a fixed separator line.
Entries are never edited or removed; ``read_all`` returns them all.

Writing is best effort. An unavailable sink is reported on the diagnostic
logger and otherwise ignored, so a run's findings never depend on the log.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Union

from dbauditor.core.exceptions import LogReadError, LogWriteError
from dbauditor.core.models import AuditLogEntry, Finding
from dbauditor.core.models._shared import now_iso

logger = logging.getLogger(__name__)

ENTRY_SEPARATOR = "-------------------------------------------"

REFERENTIAL_INTEGRITY = "REFERENTIAL_INTEGRITY"
CONSTRAINT_ANOMALIES = "CONSTRAINT_ANOMALIES"
DATA_ANOMALIES = "DATA_ANOMALIES"
ERROR = "ERROR"


class AuditRecorder:
    """Audit log stored in a single UTF-8 text file.

    Parameters
    ----------
    path : str or Path
        Log file location. Parent directories are created on first write.
    include_details : bool, optional
        Write one detail line per finding. Default is True.
    """

    _lock = threading.Lock()

    def __init__(self, path: Union[str, Path] = "audit.log", include_details: bool = True) -> None:
        self.path = Path(path)
        self.include_details = include_details

    def record(
        self,
        kind: str,
        summary: str,
        details: Optional[Iterable[Finding]] = None,
    ) -> Optional[AuditLogEntry]:
        """Append an entry; returns it, or None when the sink was unavailable."""
        detail_lines = ()
        if details and self.include_details:
            detail_lines = tuple(finding.detail_line() for finding in details)
        entry = AuditLogEntry(
            timestamp=now_iso(), kind=kind, summary_line=summary, detail_lines=detail_lines
        )
        try:
            self._append(entry.render() + "\n" + ENTRY_SEPARATOR + "\n")
        except LogWriteError as exc:
            logger.warning("Audit entry %s not recorded: %s", kind, exc.message)
            return None
        return entry

    def read_all(self) -> List[AuditLogEntry]:
        """Every entry in write order; a log that does not exist yet is empty.

        Raises:
            LogReadError: The file exists but cannot be read or decoded.
        """
        return [AuditLogEntry.parse(block) for block in self.read_blocks()]

    def read_blocks(self) -> List[str]:
        """Every entry as trimmed text, in write order."""
        if not self.path.exists():
            return []
        try:
            content = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise LogReadError(str(self.path), str(exc)) from exc
        return [block.strip() for block in content.split(ENTRY_SEPARATOR) if block.strip()]

    def _append(self, text: str) -> None:
        try:
            with self._lock:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8") as handle:
                    handle.write(text)
        except OSError as exc:
            raise LogWriteError(str(self.path), str(exc)) from exc


__all__ = [
    "AuditRecorder",
    "CONSTRAINT_ANOMALIES",
    "DATA_ANOMALIES",
    "ENTRY_SEPARATOR",
    "ERROR",
    "REFERENTIAL_INTEGRITY",
]
