# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Base class for the anomaly analyzers.

Each analyzer is a small pipeline over one live connection: fetch
candidates from the catalog, keep the ones its rule flags, and map them
to findings. ``Analyzer.run`` wraps that pipeline with logging and the
audit log entry every run leaves behind.

Examples
--------
Implement a custom analyzer:

    >>> class EmptyTables(Analyzer):
    ...     name = 'empty-tables'
    ...     kind = 'EMPTY_TABLES'
    ...     def collect(self, connection):
    ...         return []

Notes
-----
Analyzers never call each other and keep no state between runs; catalog
snapshots are re-read on every call to ``run``.
"""
from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Generic, List, Optional, TypeVar

from sqlalchemy.engine import Connection

from dbauditor.core.exceptions import DbAuditorError
from dbauditor.core.models import Finding
from dbauditor.infra.db.catalogs import Catalog
from dbauditor.storage.audit_log import ERROR, AuditRecorder

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Finding)


class Analyzer(ABC, Generic[F]):
    """Base class for all analyzers.

    Parameters
    ----------
    catalog : Catalog
        Backend used for every catalog and data query.
    recorder : AuditRecorder, optional
        Audit log receiving one entry per run. Runs are not recorded when None.

    Attributes
    ----------
    name : str
        Registry and CLI identifier (e.g. 'referential-integrity').
    kind : str
        Audit log tag (e.g. 'REFERENTIAL_INTEGRITY').
    noun : str
        What the summary line counts ('potential issues', 'anomalies').
    """

    name: str = ""
    kind: str = ""
    noun: str = "anomalies"

    def __init__(self, catalog: Catalog, recorder: Optional[AuditRecorder] = None) -> None:
        self.catalog = catalog
        self.recorder = recorder

    def run(self, connection: Connection) -> List[F]:
        """Run the analyzer against an open connection.

        Parameters
        ----------
        connection : sqlalchemy.engine.Connection
            Live connection to the audited database. The caller owns it.

        Returns
        -------
        List[Finding]
            Findings of this run; the caller owns the list.

        Raises
        ------
        DbAuditorError
            Any catalog or connection failure. The run is aborted and an
            ERROR entry is recorded first; no partial list is returned.
        """
        logger.info("Running %s on schema %s", self.name, self.catalog.schema)
        started = time.monotonic()
        try:
            findings = self.collect(connection)
        except DbAuditorError as exc:
            logger.error("%s aborted: %s", self.name, exc.message)
            self._record(ERROR, exc.message)
            raise

        self._record(self.kind, self.summary(findings), findings)
        logger.info(
            "%s finished in %.2fs with %d finding(s)",
            self.name,
            time.monotonic() - started,
            len(findings),
        )
        return findings

    @abstractmethod
    def collect(self, connection: Connection) -> List[F]:
        """Produce the findings for one run."""
        raise NotImplementedError

    def summary(self, findings: List[F]) -> str:
        return f"Check completed. Found {len(findings)} {self.noun}"

    def _record(self, kind: str, summary: str, findings: Optional[List[F]] = None) -> None:
        if self.recorder is not None:
            self.recorder.record(kind, summary, findings)
