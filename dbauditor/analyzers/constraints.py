# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Constraint action analyzer.

Flags foreign keys whose delete or update action is NO ACTION. Each
constraint yields zero, one or two findings, in catalog order.
"""
from __future__ import annotations

from typing import Iterable, List

from sqlalchemy.engine import Connection

from dbauditor.core.models import ForeignKeyConstraint, PermissiveAction, ReferentialAction
from dbauditor.core.models.findings import DELETE_ACTION_MESSAGE, UPDATE_ACTION_MESSAGE
from dbauditor.storage.audit_log import CONSTRAINT_ANOMALIES

from .base import Analyzer


def distinct_constraints(foreign_keys: Iterable[ForeignKeyConstraint]) -> List[ForeignKeyConstraint]:
    """Collapse the per-column rows of composite keys, keeping catalog order."""
    seen = set()
    constraints = []
    for fk in foreign_keys:
        key = (fk.table, fk.name)
        if key in seen:
            continue
        seen.add(key)
        constraints.append(fk)
    return constraints


def classify(constraint: ForeignKeyConstraint) -> List[PermissiveAction]:
    findings = []
    if constraint.on_delete is ReferentialAction.NO_ACTION:
        findings.append(
            PermissiveAction(
                table=constraint.table,
                constraint_name=constraint.name,
                action="delete",
                message=DELETE_ACTION_MESSAGE,
            )
        )
    if constraint.on_update is ReferentialAction.NO_ACTION:
        findings.append(
            PermissiveAction(
                table=constraint.table,
                constraint_name=constraint.name,
                action="update",
                message=UPDATE_ACTION_MESSAGE,
            )
        )
    return findings


class ConstraintActionAnalyzer(Analyzer[PermissiveAction]):
    name = "constraint-anomalies"
    kind = CONSTRAINT_ANOMALIES

    def collect(self, connection: Connection) -> List[PermissiveAction]:
        findings: List[PermissiveAction] = []
        for constraint in distinct_constraints(self.catalog.list_foreign_keys(connection)):
            findings.extend(classify(constraint))
        return findings
