# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Core domain logic for DBAuditor.

This package contains the catalog and finding models, the exception
hierarchy and the logging configuration.
"""
from __future__ import annotations

from .exceptions import (
    AuditError,
    CatalogQueryError,
    ConfigurationError,
    DatabaseConnectionError,
    DbAuditorError,
    LogReadError,
    LogWriteError,
)

__all__ = [
    "AuditError",
    "CatalogQueryError",
    "ConfigurationError",
    "DatabaseConnectionError",
    "DbAuditorError",
    "LogReadError",
    "LogWriteError",
]
