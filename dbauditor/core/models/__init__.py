# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Pydantic models for catalog snapshots, findings and audit log entries.

See Also
--------
dbauditor.infra.db.catalogs : Produces the catalog models
dbauditor.analyzers : Produces the findings
"""
from __future__ import annotations

from .catalog import (
    ColumnDescriptor,
    ForeignKeyConstraint,
    ReferentialAction,
    UniqueIndexColumn,
)
from .findings import (
    AuditLogEntry,
    DataAnomaly,
    DuplicateViolation,
    Finding,
    MissingForeignKey,
    NullViolation,
    PermissiveAction,
)

__all__ = [
    "AuditLogEntry",
    "ColumnDescriptor",
    "DataAnomaly",
    "DuplicateViolation",
    "Finding",
    "ForeignKeyConstraint",
    "MissingForeignKey",
    "NullViolation",
    "PermissiveAction",
    "ReferentialAction",
    "UniqueIndexColumn",
]
