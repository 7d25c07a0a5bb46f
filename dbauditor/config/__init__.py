# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""
Configuration package for DBAuditor.

This package provides configuration management functionality including
schema definition, validation, and loading from files, the environment
and command-line arguments.

Examples
--------
>>> from dbauditor.config import load_config
>>> config = load_config("dbauditor.yaml")

See Also
--------
dbauditor.core.exceptions : Configuration errors
"""
from __future__ import annotations

from .config_schema import (
    SUPPORTED_DIALECTS,
    AuditLogConfig,
    Config,
    ConnectionConfig,
    ConnectionOptions,
    LoggingConfig,
)
from .config_loader import ConfigLoader, load_config

__all__ = [
    'SUPPORTED_DIALECTS',
    'AuditLogConfig',
    'Config',
    'ConnectionConfig',
    'ConnectionOptions',
    'LoggingConfig',
    'ConfigLoader',
    'load_config',
]
