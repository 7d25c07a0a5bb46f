# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Database infrastructure.

Modules
-------
connection : Connection Provider (connect, open_connection, probe)
catalogs : Catalog backends per dialect

Examples
--------
>>> from dbauditor.infra.db import open_connection
>>> with open_connection(config) as conn:
...     tables = get_catalog(config.dialect).list_tables(conn)
"""
from __future__ import annotations

from .catalogs import Catalog, get_catalog, supported_dialects
from .connection import connect, create_audit_engine, open_connection, probe

__all__ = [
    "Catalog",
    "connect",
    "create_audit_engine",
    "get_catalog",
    "open_connection",
    "probe",
    "supported_dialects",
]
