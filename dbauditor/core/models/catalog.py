# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Catalog snapshot models.

These models describe what a catalog backend reads from the engine's
metadata store. They are rebuilt on every analyzer run and never cached.

Classes
-------
ReferentialAction : Delete/update behaviour of a foreign key
ColumnDescriptor : One column of a base table
ForeignKeyConstraint : One column of an enforced foreign key
UniqueIndexColumn : One column of an enforced unique index

Examples
--------
>>> ReferentialAction.from_catalog("NO_ACTION")
<ReferentialAction.NO_ACTION: 'NO_ACTION'>
>>> ReferentialAction.from_catalog("set null")
<ReferentialAction.SET_NULL: 'SET_NULL'>
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ReferentialAction(str, Enum):
    CASCADE = "CASCADE"
    SET_NULL = "SET_NULL"
    SET_DEFAULT = "SET_DEFAULT"
    NO_ACTION = "NO_ACTION"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_catalog(cls, raw: Optional[str]) -> "ReferentialAction":
        """Normalize an engine's spelling of a referential action.

        SQL Server reports ``NO_ACTION``, information_schema and SQLite report
        ``NO ACTION``. ``RESTRICT`` only differs from NO ACTION in when the
        check fires, so it maps to NO_ACTION.
        """
        if not raw:
            return cls.UNKNOWN
        key = raw.strip().upper().replace(" ", "_")
        if key == "RESTRICT":
            return cls.NO_ACTION
        try:
            return cls(key)
        except ValueError:
            return cls.UNKNOWN


class _CatalogModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class ColumnDescriptor(_CatalogModel):
    table: str
    column: str
    data_type: str
    nullable: bool


class ForeignKeyConstraint(_CatalogModel):
    name: str
    table: str
    column: str
    referenced_table: str
    on_delete: ReferentialAction = ReferentialAction.UNKNOWN
    on_update: ReferentialAction = ReferentialAction.UNKNOWN


class UniqueIndexColumn(_CatalogModel):
    table: str
    column: str
