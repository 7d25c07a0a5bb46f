# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Finding and audit log entry models.

A finding always names its table together with a column or a constraint,
so it can be acted on without going back to the database. Findings
serialize with camelCase keys (``dataType``, ``constraintName``) and keep
the ``type`` tags consumers of the JSON payloads already rely on.

Classes
-------
Finding : Base class for every finding variant
MissingForeignKey : Column named like a foreign key with no constraint
PermissiveAction : Foreign key left on NO ACTION for delete or update
NullViolation : NULL values in a NOT NULL column
DuplicateViolation : Duplicated values in a unique-indexed column
AuditLogEntry : One parsed entry of the audit log

Examples
--------
>>> finding = NullViolation(table="Orders", column="CustomerId", count=3)
>>> finding.to_dict()
{'table': 'Orders', 'type': 'NULL_VALUES', 'column': 'CustomerId', 'count': 3}
>>> finding.detail_line()
'Table: Orders, Column: CustomerId, Type: NULL_VALUES, Count: 3'
"""
from __future__ import annotations

import re
from typing import Any, Dict, Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel

MISSING_FK_SUGGESTION = "Possible foreign key without constraint"
DELETE_ACTION_MESSAGE = "Consider CASCADE or SET NULL for DELETE"
UPDATE_ACTION_MESSAGE = "Consider CASCADE for UPDATE"


class Finding(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    table: str

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

    def detail_line(self) -> str:
        """Single human-readable line used in the audit log."""
        raise NotImplementedError


class MissingForeignKey(Finding):
    column: str
    data_type: str
    suggestion: str = MISSING_FK_SUGGESTION

    def detail_line(self) -> str:
        return f"Table: {self.table}, Column: {self.column}, {self.suggestion}"


class PermissiveAction(Finding):
    constraint_name: str
    action: Literal["delete", "update"]
    message: str

    @computed_field  # type: ignore[misc]
    @property
    def type(self) -> str:
        return f"{self.action.upper()}_ACTION"

    def detail_line(self) -> str:
        return (
            f"Table: {self.table}, Constraint: {self.constraint_name}, "
            f"Type: {self.type}, {self.message}"
        )


class NullViolation(Finding):
    type: Literal["NULL_VALUES"] = "NULL_VALUES"
    column: str
    count: int

    def detail_line(self) -> str:
        return f"Table: {self.table}, Column: {self.column}, Type: {self.type}, Count: {self.count}"


class DuplicateViolation(Finding):
    type: Literal["DUPLICATES"] = "DUPLICATES"
    column: str
    # number of distinct duplicated values, not the row overcount
    count: int

    def detail_line(self) -> str:
        return f"Table: {self.table}, Column: {self.column}, Type: {self.type}, Count: {self.count}"


DataAnomaly = Union[NullViolation, DuplicateViolation]


_HEADER_RE = re.compile(r"^\[(?P<timestamp>[^\]]+)\] (?P<kind>[A-Z_]+): ?(?P<summary>.*)$")
_DETAIL_PREFIX = "  - "


class AuditLogEntry(BaseModel):
    """One analyzer run as recorded in the audit log.

    Rendered form::

        [2025-01-31T10:00:00.000Z] DATA_ANOMALIES: Check completed. Found 1 anomalies
          - Table: Orders, Column: Id, Type: DUPLICATES, Count: 2
    """

    model_config = ConfigDict(frozen=True)

    timestamp: str
    kind: str
    summary_line: str
    detail_lines: Tuple[str, ...] = ()

    def render(self) -> str:
        summary = " ".join(self.summary_line.splitlines())
        lines = [f"[{self.timestamp}] {self.kind}: {summary}"]
        lines.extend(f"{_DETAIL_PREFIX}{line}" for line in self.detail_lines)
        return "\n".join(lines)

    @classmethod
    def parse(cls, block: str) -> "AuditLogEntry":
        """Rebuild an entry from its rendered text.

        Blocks that do not start with a ``[timestamp] KIND:`` header are kept
        under kind ``UNKNOWN`` rather than dropped.
        """
        lines = [line for line in block.strip().splitlines() if line.strip()]
        if not lines:
            return cls(timestamp="", kind="UNKNOWN", summary_line="")
        details = tuple(_strip_detail(line) for line in lines[1:])
        match = _HEADER_RE.match(lines[0])
        if match is None:
            return cls(timestamp="", kind="UNKNOWN", summary_line=lines[0], detail_lines=details)
        return cls(
            timestamp=match.group("timestamp"),
            kind=match.group("kind"),
            summary_line=match.group("summary"),
            detail_lines=details,
        )


def _strip_detail(line: str) -> str:
    stripped = line.strip()
    if stripped.startswith("- "):
        return stripped[2:]
    return stripped
