# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Data anomaly analyzer.

Walks every base table, one at a time, and checks the data against what
the catalog promises:

- NOT NULL columns that nevertheless hold NULLs (catalog/data drift after
  out-of-band loads or migrations) -> ``NullViolation`` with the row count.
- Unique-indexed columns that hold repeated values -> ``DuplicateViolation``
  with the number of distinct duplicated values.

Each table costs one catalog query per check plus one full scan per
flagged column. No sampling is applied.
"""
from __future__ import annotations

import logging
from typing import Iterable, List

from sqlalchemy.engine import Connection

from dbauditor.core.models import (
    ColumnDescriptor,
    DataAnomaly,
    DuplicateViolation,
    NullViolation,
)
from dbauditor.storage.audit_log import DATA_ANOMALIES

from .base import Analyzer

logger = logging.getLogger(__name__)


def non_nullable(columns: Iterable[ColumnDescriptor]) -> List[ColumnDescriptor]:
    return [column for column in columns if not column.nullable]


class DataAnomalyAnalyzer(Analyzer[DataAnomaly]):
    name = "data-anomalies"
    kind = DATA_ANOMALIES

    def collect(self, connection: Connection) -> List[DataAnomaly]:
        findings: List[DataAnomaly] = []
        for table in self.catalog.list_tables(connection):
            findings.extend(self.check_nulls(connection, table))
            findings.extend(self.check_duplicates(connection, table))
        return findings

    def check_nulls(self, connection: Connection, table: str) -> List[NullViolation]:
        findings = []
        for column in non_nullable(self.catalog.list_columns(connection, table)):
            count = self.catalog.count_nulls(connection, table, column.column)
            if count > 0:
                logger.debug("%s.%s holds %d NULL row(s)", table, column.column, count)
                findings.append(NullViolation(table=table, column=column.column, count=count))
        return findings

    def check_duplicates(self, connection: Connection, table: str) -> List[DuplicateViolation]:
        findings = []
        for unique in self.catalog.list_unique_index_columns(connection, table):
            groups = self.catalog.count_duplicate_groups(connection, table, unique.column)
            if groups > 0:
                logger.debug("%s.%s has %d duplicated value(s)", table, unique.column, groups)
                findings.append(DuplicateViolation(table=table, column=unique.column, count=groups))
        return findings
