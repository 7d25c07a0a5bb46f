# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Referential integrity analyzer.

Reports columns whose names suggest a reference to another table but
which no enforced foreign key covers. The naming rule is a heuristic:
false positives are expected, the point is to put candidates in front of
a human.

A column name is a candidate when it
- ends with ``_id`` or ``Id`` (case-sensitive),
- ends with ``ModelID``, ``CategoryID`` or ``DescriptionID``, or
- is exactly ``rowguid``.
"""
from __future__ import annotations

from typing import Iterable, List, Set, Tuple

from sqlalchemy.engine import Connection

from dbauditor.core.models import ColumnDescriptor, ForeignKeyConstraint, MissingForeignKey
from dbauditor.storage.audit_log import REFERENTIAL_INTEGRITY

from .base import Analyzer

FK_NAME_SUFFIXES = ("_id", "Id", "ModelID", "CategoryID", "DescriptionID")
FK_EXACT_NAMES = frozenset({"rowguid"})


def looks_like_foreign_key(column_name: str) -> bool:
    return column_name in FK_EXACT_NAMES or column_name.endswith(FK_NAME_SUFFIXES)


def select_candidates(columns: Iterable[ColumnDescriptor]) -> List[ColumnDescriptor]:
    return [column for column in columns if looks_like_foreign_key(column.column)]


def enforced_pairs(foreign_keys: Iterable[ForeignKeyConstraint]) -> Set[Tuple[str, str]]:
    return {(fk.table, fk.column) for fk in foreign_keys}


def to_findings(
    candidates: Iterable[ColumnDescriptor], enforced: Set[Tuple[str, str]]
) -> List[MissingForeignKey]:
    """Map unconstrained candidates to findings sorted by (table, column)."""
    findings = [
        MissingForeignKey(table=column.table, column=column.column, data_type=column.data_type)
        for column in candidates
        if (column.table, column.column) not in enforced
    ]
    return sorted(findings, key=lambda finding: (finding.table, finding.column))


class ReferentialIntegrityAnalyzer(Analyzer[MissingForeignKey]):
    name = "referential-integrity"
    kind = REFERENTIAL_INTEGRITY
    noun = "potential issues"

    def collect(self, connection: Connection) -> List[MissingForeignKey]:
        candidates = select_candidates(self.catalog.list_columns(connection))
        enforced = enforced_pairs(self.catalog.list_foreign_keys(connection))
        return to_findings(candidates, enforced)
