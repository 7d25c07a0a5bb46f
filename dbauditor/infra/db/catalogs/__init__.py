# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Catalog backends for multi-database support."""
from __future__ import annotations

from typing import Optional, Tuple

from dbauditor.core.exceptions import ConfigurationError

from .base import Catalog, driver_message
from .mssql import MssqlCatalog
from .postgresql import PostgresqlCatalog
from .sqlite import SqliteCatalog

_CATALOGS = {
    "mssql": MssqlCatalog,
    "postgresql": PostgresqlCatalog,
    "sqlite": SqliteCatalog,
}


def get_catalog(dialect: str, schema: Optional[str] = None) -> Catalog:
    """Get the catalog backend for the given dialect name.

    Args:
        dialect: Configured dialect (mssql, postgresql, sqlite).
        schema: Schema to audit; the backend default when omitted.

    Returns:
        Catalog instance bound to ``schema``.

    Raises:
        ConfigurationError: If the dialect is not supported.
    """
    catalog_cls = _CATALOGS.get(dialect)
    if catalog_cls is None:
        raise ConfigurationError(
            "dialect",
            f"Unsupported dialect: {dialect} (expected one of {', '.join(supported_dialects())})",
        )
    return catalog_cls(schema=schema)


def supported_dialects() -> Tuple[str, ...]:
    """Return tuple of supported dialect names."""
    return tuple(_CATALOGS.keys())


__all__ = [
    "Catalog",
    "MssqlCatalog",
    "PostgresqlCatalog",
    "SqliteCatalog",
    "driver_message",
    "get_catalog",
    "supported_dialects",
]
