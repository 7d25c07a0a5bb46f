# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""PostgreSQL catalog."""
from __future__ import annotations

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

# pg_constraint.confdeltype / confupdtype codes
_ACTION_CODES = {
    "a": "NO ACTION",
    "r": "RESTRICT",
    "c": "CASCADE",
    "n": "SET NULL",
    "d": "SET DEFAULT",
}

_TABLES_SQL = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_type = 'BASE TABLE'
        AND table_schema = :schema
    ORDER BY table_name
"""

_COLUMNS_SQL = """
    SELECT c.table_name, c.column_name, c.data_type, c.is_nullable
    FROM information_schema.columns c
    JOIN information_schema.tables t
        ON t.table_schema = c.table_schema
        AND t.table_name = c.table_name
    WHERE t.table_type = 'BASE TABLE'
        AND c.table_schema = :schema
        {table_filter}
    ORDER BY c.table_name, c.ordinal_position
"""

_FOREIGN_KEYS_SQL = """
    SELECT
        con.conname,
        cl.relname,
        att.attname,
        ref.relname,
        con.confdeltype,
        con.confupdtype
    FROM pg_constraint con
    JOIN pg_class cl ON cl.oid = con.conrelid
    JOIN pg_namespace ns ON ns.oid = cl.relnamespace
    JOIN pg_class ref ON ref.oid = con.confrelid
    CROSS JOIN LATERAL unnest(con.conkey) WITH ORDINALITY AS k(attnum, ord)
    JOIN pg_attribute att ON att.attrelid = con.conrelid AND att.attnum = k.attnum
    WHERE con.contype = 'f'
        AND ns.nspname = :schema
    ORDER BY con.oid, k.ord
"""

_UNIQUE_COLUMNS_SQL = """
    SELECT DISTINCT cl.relname, att.attname
    FROM pg_index ix
    JOIN pg_class cl ON cl.oid = ix.indrelid
    JOIN pg_namespace ns ON ns.oid = cl.relnamespace
    CROSS JOIN LATERAL unnest(ix.indkey::int2[]) AS k(attnum)
    JOIN pg_attribute att ON att.attrelid = ix.indrelid AND att.attnum = k.attnum
    WHERE ix.indisunique
        AND cl.relkind IN ('r', 'p')
        AND ns.nspname = :schema
        {table_filter}
    ORDER BY cl.relname, att.attname
"""


class PostgresqlCatalog(Catalog):
    """PostgreSQL catalog backed by psycopg2."""

    dialect = "postgresql"
    TIMEOUT_MARKERS = ("statement timeout", "lock timeout", "timeout expired", "timed out")

    def default_schema(self) -> str:
        return "public"

    def quote_identifier(self, name: str) -> str:
        return '"' + name.replace('"', '""') + '"'

    def build_url(self, config: ConnectionConfig) -> URL:
        options = config.options
        if not options.encrypt:
            sslmode = "disable"
        elif options.trust_server_certificate:
            sslmode = "require"
        else:
            sslmode = "verify-full"
        return URL.create(
            "postgresql+psycopg2",
            username=config.user or None,
            password=config.password or None,
            host=config.server,
            port=config.port,
            database=config.database,
            query={"sslmode": sslmode},
        )

    def connect_args(self, config: ConnectionConfig) -> Dict[str, Any]:
        return {
            "connect_timeout": config.options.login_timeout_s,
            "options": f"-c statement_timeout={config.options.query_timeout_s * 1000}",
        }

    def list_tables(self, connection: Connection) -> List[str]:
        rows = self._fetch_all(connection, "list_tables", _TABLES_SQL, {"schema": self.schema})
        return [row[0] for row in rows]

    def list_columns(
        self, connection: Connection, table: Optional[str] = None
    ) -> List[ColumnDescriptor]:
        params = {"schema": self.schema}
        table_filter = ""
        if table is not None:
            table_filter = "AND c.table_name = :table"
            params["table"] = table
        rows = self._fetch_all(
            connection, "list_columns", _COLUMNS_SQL.format(table_filter=table_filter), params
        )
        return [
            ColumnDescriptor(
                table=row[0], column=row[1], data_type=row[2], nullable=row[3] == "YES"
            )
            for row in rows
        ]

    def list_foreign_keys(self, connection: Connection) -> List[ForeignKeyConstraint]:
        rows = self._fetch_all(
            connection, "list_foreign_keys", _FOREIGN_KEYS_SQL, {"schema": self.schema}
        )
        return [
            ForeignKeyConstraint(
                name=row[0],
                table=row[1],
                column=row[2],
                referenced_table=row[3],
                on_delete=ReferentialAction.from_catalog(_ACTION_CODES.get(row[4])),
                on_update=ReferentialAction.from_catalog(_ACTION_CODES.get(row[5])),
            )
            for row in rows
        ]

    def list_unique_index_columns(
        self, connection: Connection, table: Optional[str] = None
    ) -> List[UniqueIndexColumn]:
        params = {"schema": self.schema}
        table_filter = ""
        if table is not None:
            table_filter = "AND cl.relname = :table"
            params["table"] = table
        rows = self._fetch_all(
            connection,
            "list_unique_index_columns",
            _UNIQUE_COLUMNS_SQL.format(table_filter=table_filter),
            params,
        )
        return [UniqueIndexColumn(table=row[0], column=row[1]) for row in rows]
