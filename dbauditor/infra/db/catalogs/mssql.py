# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Microsoft SQL Server / Azure SQL catalog."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import event
from sqlalchemy.engine import URL, Connection, Engine

from dbauditor.config.config_schema import ConnectionConfig
from dbauditor.core.models import (
    ColumnDescriptor,
    ForeignKeyConstraint,
    ReferentialAction,
    UniqueIndexColumn,
)

from .base import Catalog

_TABLES_SQL = """
    SELECT TABLE_NAME
    FROM INFORMATION_SCHEMA.TABLES
    WHERE TABLE_TYPE = 'BASE TABLE'
        AND TABLE_SCHEMA = :schema
    ORDER BY TABLE_NAME
"""

_COLUMNS_SQL = """
    SELECT c.TABLE_NAME, c.COLUMN_NAME, c.DATA_TYPE, c.IS_NULLABLE
    FROM INFORMATION_SCHEMA.COLUMNS c
    JOIN INFORMATION_SCHEMA.TABLES t
        ON t.TABLE_SCHEMA = c.TABLE_SCHEMA
        AND t.TABLE_NAME = c.TABLE_NAME
    WHERE t.TABLE_TYPE = 'BASE TABLE'
        AND c.TABLE_SCHEMA = :schema
        {table_filter}
    ORDER BY c.TABLE_NAME, c.ORDINAL_POSITION
"""

_FOREIGN_KEYS_SQL = """
    SELECT
        fk.name AS fk_name,
        OBJECT_NAME(fk.parent_object_id) AS table_name,
        COL_NAME(fkc.parent_object_id, fkc.parent_column_id) AS column_name,
        OBJECT_NAME(fk.referenced_object_id) AS referenced_table,
        fk.delete_referential_action_desc AS delete_action,
        fk.update_referential_action_desc AS update_action
    FROM sys.foreign_keys fk
    JOIN sys.foreign_key_columns fkc
        ON fk.object_id = fkc.constraint_object_id
    WHERE OBJECT_SCHEMA_NAME(fk.parent_object_id) = :schema
"""

_UNIQUE_COLUMNS_SQL = """
    SELECT DISTINCT t.name AS table_name, c.name AS column_name
    FROM sys.indexes i
    JOIN sys.index_columns ic
        ON i.object_id = ic.object_id AND i.index_id = ic.index_id
    JOIN sys.columns c
        ON c.object_id = ic.object_id AND c.column_id = ic.column_id
    JOIN sys.tables t
        ON t.object_id = i.object_id
    WHERE i.is_unique = 1
        AND ic.is_included_column = 0
        AND SCHEMA_NAME(t.schema_id) = :schema
        {table_filter}
    ORDER BY t.name, c.name
"""


class MssqlCatalog(Catalog):
    """Microsoft SQL Server / Azure SQL catalog backed by pyodbc."""

    dialect = "mssql"
    TIMEOUT_MARKERS = ("timeout expired", "timed out", "hyt00", "hyt01")
    # a unique index on SQL Server admits a single NULL
    UNIQUE_ALLOWS_MANY_NULLS = False

    def default_schema(self) -> str:
        return "dbo"

    def quote_identifier(self, name: str) -> str:
        return "[" + name.replace("]", "]]") + "]"

    def build_url(self, config: ConnectionConfig) -> URL:
        options = config.options
        return URL.create(
            "mssql+pyodbc",
            username=config.user or None,
            password=config.password or None,
            host=config.server,
            port=config.port,
            database=config.database,
            query={
                "driver": config.driver,
                "Encrypt": "yes" if options.encrypt else "no",
                "TrustServerCertificate": "yes" if options.trust_server_certificate else "no",
            },
        )

    def connect_args(self, config: ConnectionConfig) -> Dict[str, Any]:
        # pyodbc's connect timeout is the login timeout
        return {"timeout": config.options.login_timeout_s}

    def configure_engine(self, engine: Engine, config: ConnectionConfig) -> None:
        query_timeout = config.options.query_timeout_s

        @event.listens_for(engine, "connect")
        def _set_query_timeout(dbapi_connection, connection_record):
            dbapi_connection.timeout = query_timeout

    def list_tables(self, connection: Connection) -> List[str]:
        rows = self._fetch_all(connection, "list_tables", _TABLES_SQL, {"schema": self.schema})
        return [row[0] for row in rows]

    def list_columns(
        self, connection: Connection, table: Optional[str] = None
    ) -> List[ColumnDescriptor]:
        params = {"schema": self.schema}
        table_filter = ""
        if table is not None:
            table_filter = "AND c.TABLE_NAME = :table"
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
                on_delete=ReferentialAction.from_catalog(row[4]),
                on_update=ReferentialAction.from_catalog(row[5]),
            )
            for row in rows
        ]

    def list_unique_index_columns(
        self, connection: Connection, table: Optional[str] = None
    ) -> List[UniqueIndexColumn]:
        params = {"schema": self.schema}
        table_filter = ""
        if table is not None:
            table_filter = "AND t.name = :table"
            params["table"] = table
        rows = self._fetch_all(
            connection,
            "list_unique_index_columns",
            _UNIQUE_COLUMNS_SQL.format(table_filter=table_filter),
            params,
        )
        return [UniqueIndexColumn(table=row[0], column=row[1]) for row in rows]
