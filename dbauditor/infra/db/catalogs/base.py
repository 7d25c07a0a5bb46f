# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Catalog capability shared by every database backend.

A catalog knows how to reach one kind of engine (URL, driver arguments,
identifier quoting) and how to read the four pieces of metadata the
analyzers need:

- base tables
- columns with their nullability
- foreign keys with their referential actions
- columns participating in enforced unique indexes

It also runs the two data probes of the anomaly scan (null counts and
duplicate group counts) so the analyzers stay engine-agnostic. A new
backend only subclasses ``Catalog``.

Every query is translated into the application's error taxonomy:
timeouts and dropped connections become a retryable
``DatabaseConnectionError``, anything else the engine rejects becomes a
``CatalogQueryError``.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import text
from sqlalchemy.engine import URL, Connection, Engine, Row
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from dbauditor.config.config_schema import ConnectionConfig
from dbauditor.core.exceptions import CatalogQueryError, DatabaseConnectionError
from dbauditor.core.models import ColumnDescriptor, ForeignKeyConstraint, UniqueIndexColumn


class Catalog(ABC):
    """Abstract base for database catalog backends.

    Parameters
    ----------
    schema : str, optional
        Schema to audit. Defaults to the backend's ``default_schema()``.
    """

    #: dialect name used in configuration (``ConnectionConfig.dialect``)
    dialect: str = ""
    #: substrings of driver messages that mean a query or lock wait timed out
    TIMEOUT_MARKERS: Sequence[str] = ("timeout", "timed out")
    #: whether a unique index admits several NULLs on this engine
    UNIQUE_ALLOWS_MANY_NULLS: bool = True

    def __init__(self, schema: Optional[str] = None) -> None:
        self.schema = schema or self.default_schema()

    # ----- Connectivity -------------------------------------------------------

    @abstractmethod
    def default_schema(self) -> str:
        """Return the default schema name for this dialect."""

    @abstractmethod
    def build_url(self, config: ConnectionConfig) -> URL:
        """Build the SQLAlchemy URL for ``config``."""

    def connect_args(self, config: ConnectionConfig) -> Dict[str, Any]:
        """Extra keyword arguments for the DBAPI ``connect`` call."""
        return {}

    def configure_engine(self, engine: Engine, config: ConnectionConfig) -> None:
        """Hook for per-connection setup (event listeners). No-op by default."""

    # ----- Identifiers --------------------------------------------------------

    @abstractmethod
    def quote_identifier(self, name: str) -> str:
        """Quote a single identifier (table, column, schema)."""

    def quote_table(self, table: str) -> str:
        """Quote schema.table for use in FROM clauses."""
        if self.schema:
            return f"{self.quote_identifier(self.schema)}.{self.quote_identifier(table)}"
        return self.quote_identifier(table)

    # ----- Catalog operations -------------------------------------------------

    @abstractmethod
    def list_tables(self, connection: Connection) -> List[str]:
        """Base tables of the schema, ordered by name."""

    @abstractmethod
    def list_columns(
        self, connection: Connection, table: Optional[str] = None
    ) -> List[ColumnDescriptor]:
        """Columns of every base table, or of ``table`` only."""

    @abstractmethod
    def list_foreign_keys(self, connection: Connection) -> List[ForeignKeyConstraint]:
        """One entry per (constraint, column) pair, in catalog order."""

    @abstractmethod
    def list_unique_index_columns(
        self, connection: Connection, table: Optional[str] = None
    ) -> List[UniqueIndexColumn]:
        """Distinct columns taking part in an enforced unique index."""

    # ----- Data probes --------------------------------------------------------

    def count_nulls(self, connection: Connection, table: str, column: str) -> int:
        sql = (
            f"SELECT COUNT(*) FROM {self.quote_table(table)} "
            f"WHERE {self.quote_identifier(column)} IS NULL"
        )
        return int(self._fetch_scalar(connection, "count_nulls", sql, table=table, column=column) or 0)

    def count_duplicate_groups(self, connection: Connection, table: str, column: str) -> int:
        """Number of distinct values that occur more than once in ``column``."""
        quoted = self.quote_identifier(column)
        where = f" WHERE {quoted} IS NOT NULL" if self.UNIQUE_ALLOWS_MANY_NULLS else ""
        sql = (
            f"SELECT COUNT(*) FROM ("
            f"SELECT {quoted} FROM {self.quote_table(table)}{where} "
            f"GROUP BY {quoted} HAVING COUNT(*) > 1"
            f") AS dup"
        )
        return int(
            self._fetch_scalar(connection, "count_duplicate_groups", sql, table=table, column=column) or 0
        )

    # ----- Query helpers ------------------------------------------------------

    def _fetch_all(
        self,
        connection: Connection,
        operation: str,
        sql: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> List[Row]:
        try:
            return list(connection.execute(text(sql), dict(params or {})).fetchall())
        except DBAPIError as exc:
            raise self._translate(connection, operation, exc) from exc
        except SQLAlchemyError as exc:
            raise CatalogQueryError(operation, str(exc)) from exc

    def _fetch_scalar(
        self,
        connection: Connection,
        operation: str,
        sql: str,
        **context: str,
    ) -> Any:
        try:
            return connection.execute(text(sql)).scalar()
        except DBAPIError as exc:
            raise self._translate(connection, operation, exc, context) from exc
        except SQLAlchemyError as exc:
            raise CatalogQueryError(operation, str(exc), dict(context)) from exc

    def _translate(
        self,
        connection: Connection,
        operation: str,
        exc: DBAPIError,
        context: Optional[Dict[str, str]] = None,
    ) -> Exception:
        message = driver_message(exc)
        details = dict(context or {})
        details['operation'] = operation
        if exc.connection_invalidated or self.is_timeout(message):
            url = connection.engine.url
            return DatabaseConnectionError(
                url.host or url.database or "", message, retryable=True, details=details
            )
        return CatalogQueryError(operation, message, details)

    def is_timeout(self, message: str) -> bool:
        lowered = message.lower()
        return any(marker in lowered for marker in self.TIMEOUT_MARKERS)


def driver_message(exc: Exception) -> str:
    """Return the underlying DBAPI message of a SQLAlchemy error, verbatim."""
    orig = getattr(exc, "orig", None)
    if orig is not None:
        return str(orig)
    return str(exc)
