# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Custom exception hierarchy for DBAuditor.

This module defines all custom exceptions used throughout the application,
providing a clear error hierarchy for better error handling and debugging.

All exceptions inherit from DbAuditorError to allow catching application-specific
errors separately from standard Python exceptions.

Exception Hierarchy
-------------------
DbAuditorError (base)
├── DatabaseConnectionError
├── AuditError
│   └── CatalogQueryError
├── LogWriteError
├── LogReadError
└── ConfigurationError

Examples
--------
>>> try:
...     raise CatalogQueryError('list_columns', 'Invalid object name')
... except AuditError as e:
...     print(f"Catalog error: {e.operation}")
Catalog error: list_columns
"""
from typing import Optional


class DbAuditorError(Exception):
    """Base exception for all DBAuditor errors.

    Parameters
    ----------
    message : str
        Human-readable error message.
    details : dict, optional
        Dictionary containing additional error context. Default is None.

    Attributes
    ----------
    message : str
        The error message.
    details : dict
        Additional error context information.

    Examples
    --------
    >>> error = DbAuditorError("Something went wrong", {"code": 500})
    >>> error.message
    'Something went wrong'
    >>> error.details['code']
    500
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DatabaseConnectionError(DbAuditorError):
    """Raised when a session against the audited database cannot be used.

    Covers unreachable servers, rejected credentials and unknown databases
    at connect time, and dropped connections or expired query timeouts
    during a run. The driver message is kept verbatim as ``message`` so an
    operator sees exactly what the server said.

    Parameters
    ----------
    server : str
        Server (or file, for SQLite) the connection targeted.
    message : str
        Driver message, unmodified.
    retryable : bool, optional
        True when the failure was a timeout or a dropped connection. Default False.
    details : dict, optional
        Additional context. Default is None.

    Examples
    --------
    >>> error = DatabaseConnectionError('db01', 'Login failed for user sa.')
    >>> str(error)
    'Login failed for user sa.'
    >>> error.retryable
    False
    """

    def __init__(
        self,
        server: str,
        message: str,
        retryable: bool = False,
        details: Optional[dict] = None,
    ):
        details = details or {}
        details['server'] = server
        details['retryable'] = retryable
        super().__init__(message, details)
        self.server = server
        self.retryable = retryable


class AuditError(DbAuditorError):
    """Raised when an analyzer run is aborted.

    No partial finding list is ever returned together with this error.
    """


class CatalogQueryError(AuditError):
    """Raised when the engine rejects a catalog or data query.

    Parameters
    ----------
    operation : str
        Catalog operation that failed (e.g. 'list_columns', 'count_nulls').
    message : str
        Driver message, unmodified.
    details : dict, optional
        Additional context (table, column). Default is None.

    Attributes
    ----------
    operation : str
        The catalog operation that failed.

    Examples
    --------
    >>> error = CatalogQueryError('list_tables', "Invalid object name 'sys.tables'.")
    >>> error.operation
    'list_tables'
    """

    def __init__(self, operation: str, message: str, details: Optional[dict] = None):
        details = details or {}
        details['operation'] = operation
        super().__init__(message, details)
        self.operation = operation


class LogWriteError(DbAuditorError):
    """Raised when the audit log sink cannot be appended to.

    The recorder never lets this escape into an analyzer's result.
    """

    def __init__(self, path: str, message: str, details: Optional[dict] = None):
        details = details or {}
        details['path'] = path
        super().__init__(f"Cannot write audit log '{path}': {message}", details)
        self.path = path


class LogReadError(DbAuditorError):
    """Raised when an existing audit log cannot be read back."""

    def __init__(self, path: str, message: str, details: Optional[dict] = None):
        details = details or {}
        details['path'] = path
        super().__init__(f"Cannot read audit log '{path}': {message}", details)
        self.path = path


class ConfigurationError(DbAuditorError):
    """Raised when there are configuration-related issues.

    This exception is raised for invalid configurations, missing required
    settings, or configuration validation failures.

    Parameters
    ----------
    config_key : str
        Configuration key that caused the error.
    message : str
        Error message describing the configuration issue.
    details : dict, optional
        Additional context. Default is None.

    Attributes
    ----------
    config_key : str
        The problematic configuration key.

    Examples
    --------
    >>> error = ConfigurationError('dialect', 'Unsupported dialect: db2')
    >>> error.config_key
    'dialect'
    """

    def __init__(self, config_key: str, message: str, details: Optional[dict] = None):
        details = details or {}
        details['config_key'] = config_key
        super().__init__(f"Configuration error for '{config_key}': {message}", details)
        self.config_key = config_key
