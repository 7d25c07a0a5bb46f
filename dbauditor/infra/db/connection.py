# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Connection management for the audited database.

Every call builds its own engine from an immutable ``ConnectionConfig``;
nothing is pooled or shared between analyzer runs.

Functions
---------
create_audit_engine : Build a non-pooling SQLAlchemy engine for a config
connect : Open a connection (caller closes it)
open_connection : Context manager that always closes the connection
probe : Open and immediately close a connection

Examples
--------
>>> config = ConnectionConfig(dialect="sqlite", database="shop.db")
>>> with open_connection(config) as conn:
...     conn.execute(text("SELECT 1")).scalar()
1

See Also
--------
dbauditor.infra.db.catalogs : Dialect-specific URLs and catalog queries
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from dbauditor.config.config_schema import ConnectionConfig
from dbauditor.core.exceptions import ConfigurationError, DatabaseConnectionError

from .catalogs import Catalog, driver_message, get_catalog

logger = logging.getLogger(__name__)


def create_audit_engine(config: ConnectionConfig, catalog: Optional[Catalog] = None) -> Engine:
    errors = config.validate()
    if errors:
        raise ConfigurationError("connection", "; ".join(errors), {"errors": errors})

    catalog = catalog or get_catalog(config.dialect, config.schema)
    try:
        engine = create_engine(
            catalog.build_url(config),
            poolclass=NullPool,
            connect_args=catalog.connect_args(config),
            future=True,
        )
    except ImportError as exc:
        raise ConfigurationError(
            "dialect", f"Database driver for '{config.dialect}' is not installed: {exc}"
        ) from exc
    catalog.configure_engine(engine, config)
    return engine


def connect(config: ConnectionConfig, catalog: Optional[Catalog] = None) -> Connection:
    """Open a session against the configured database.

    Raises:
        DatabaseConnectionError: Server unreachable, login rejected or
            database unknown. The driver message is kept verbatim.
    """
    engine = create_audit_engine(config, catalog)
    logger.debug("Connecting to %s (%s)", config.target, config.dialect)
    try:
        return engine.connect()
    except SQLAlchemyError as exc:
        message = driver_message(exc)
        logger.error("Connection to %s failed: %s", config.target, message)
        raise DatabaseConnectionError(config.target, message) from exc


@contextmanager
def open_connection(
    config: ConnectionConfig, catalog: Optional[Catalog] = None
) -> Iterator[Connection]:
    connection = connect(config, catalog)
    try:
        yield connection
    finally:
        connection.close()


def probe(config: ConnectionConfig) -> None:
    """Check that ``config`` reaches its database; no query is issued."""
    with open_connection(config):
        pass
    logger.info("Connection to %s succeeded", config.target)


__all__ = ["connect", "create_audit_engine", "open_connection", "probe"]
