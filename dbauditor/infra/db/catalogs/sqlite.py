# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""SQLite catalog.

Reads metadata through the table-valued pragma functions joined against
``sqlite_master``. Only the ``main`` schema is audited. SQLite foreign
keys are unnamed, so constraints are labelled ``fk_<table>_<id>``.
The file is opened read-only; a path that does not exist is an error.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy.engine import URL, Connection

from dbauditor.config.config_schema import ConnectionConfig
from dbauditor.core.models import (
    ColumnDescriptor,
    ForeignKeyConstraint,
    ReferentialAction,
    UniqueIndexColumn,
)

from .base import Catalog

_USER_TABLES = "m.type = 'table' AND m.name NOT LIKE 'sqlite_%'"

_TABLES_SQL = f"""
    SELECT m.name
    FROM sqlite_master AS m
    WHERE {_USER_TABLES}
    ORDER BY m.name
"""

_COLUMNS_SQL = f"""
    SELECT m.name, p.name, p.type, p."notnull"
    FROM sqlite_master AS m
    JOIN pragma_table_info(m.name) AS p
    WHERE {_USER_TABLES}
        {{table_filter}}
    ORDER BY m.name, p.cid
"""

_FOREIGN_KEYS_SQL = f"""
    SELECT m.name, f.id, f."from", f."table", f.on_delete, f.on_update
    FROM sqlite_master AS m
    JOIN pragma_foreign_key_list(m.name) AS f
    WHERE {_USER_TABLES}
    ORDER BY m.name, f.id, f.seq
"""

# INTEGER PRIMARY KEY columns alias the rowid and have no index entry
_UNIQUE_COLUMNS_SQL = f"""
    SELECT m.name AS table_name, ii.name AS column_name
    FROM sqlite_master AS m
    JOIN pragma_index_list(m.name) AS il
    JOIN pragma_index_info(il.name) AS ii
    WHERE {_USER_TABLES}
        AND il."unique" = 1
        AND ii.name IS NOT NULL
        {{table_filter}}
    UNION
    SELECT m.name AS table_name, p.name AS column_name
    FROM sqlite_master AS m
    JOIN pragma_table_info(m.name) AS p
    WHERE {_USER_TABLES}
        AND p.pk > 0
        {{table_filter}}
    ORDER BY 1, 2
"""


class SqliteCatalog(Catalog):
    """SQLite catalog; ``ConnectionConfig.database`` is the database file."""

    dialect = "sqlite"
    TIMEOUT_MARKERS = ("database is locked", "timed out")

    def default_schema(self) -> str:
        return "main"

    def quote_identifier(self, name: str) -> str:
        return '"' + name.replace('"', '""') + '"'

    def quote_table(self, table: str) -> str:
        return self.quote_identifier(table)

    def build_url(self, config: ConnectionConfig) -> URL:
        # read-only URI: a missing file fails to open instead of being created
        return URL.create(
            "sqlite",
            database=Path(config.database).absolute().as_uri(),
            query={"mode": "ro", "uri": "true"},
        )

    def connect_args(self, config: ConnectionConfig) -> Dict[str, Any]:
        # busy timeout while waiting on a writer's lock
        return {"timeout": config.options.query_timeout_s}

    def list_tables(self, connection: Connection) -> List[str]:
        return [row[0] for row in self._fetch_all(connection, "list_tables", _TABLES_SQL)]

    def list_columns(
        self, connection: Connection, table: Optional[str] = None
    ) -> List[ColumnDescriptor]:
        params = {}
        table_filter = ""
        if table is not None:
            table_filter = "AND m.name = :table"
            params["table"] = table
        rows = self._fetch_all(
            connection, "list_columns", _COLUMNS_SQL.format(table_filter=table_filter), params
        )
        return [
            ColumnDescriptor(
                table=row[0], column=row[1], data_type=row[2] or "", nullable=not row[3]
            )
            for row in rows
        ]

    def list_foreign_keys(self, connection: Connection) -> List[ForeignKeyConstraint]:
        rows = self._fetch_all(connection, "list_foreign_keys", _FOREIGN_KEYS_SQL)
        return [
            ForeignKeyConstraint(
                name=f"fk_{row[0]}_{row[1]}",
                table=row[0],
                column=row[2],
                referenced_table=row[3],
                on_delete=ReferentialAction.from_catalog(row[4]),
                on_update=ReferentialAction.from_catalog(row[5]),
            )
            for row in rows
        ]

    def list_unique_index_columns(
        self, connection: Connection, table: Optional[str] = None
    ) -> List[UniqueIndexColumn]:
        params = {}
        table_filter = ""
        if table is not None:
            table_filter = "AND m.name = :table"
            params["table"] = table
        rows = self._fetch_all(
            connection,
            "list_unique_index_columns",
            _UNIQUE_COLUMNS_SQL.format(table_filter=table_filter),
            params,
        )
        return [UniqueIndexColumn(table=row[0], column=row[1]) for row in rows]
