# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Configuration schema definitions.

This module defines the configuration structure, default values, and
validation logic for all application settings. Every section is a frozen
dataclass: a configuration value handed to ``connect`` or ``probe`` can
never be changed underneath the caller, and overrides produce a new value.

Classes
-------
Config : Main configuration class
ConnectionOptions : Transport and timeout options
ConnectionConfig : Target server, database and credentials
AuditLogConfig : Audit log location and detail level
LoggingConfig : Diagnostic logging

Examples
--------
>>> conn = ConnectionConfig(server="db01", database="Sales", user="sa", password="x")
>>> conn.with_overrides(database="Staging").database
'Staging'
>>> conn.database
'Sales'
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Optional

SUPPORTED_DIALECTS = ("mssql", "postgresql", "sqlite")


@dataclass(frozen=True)
class ConnectionOptions:
    """Transport and timeout options for the audited database."""

    encrypt: bool = True
    trust_server_certificate: bool = True
    login_timeout_s: int = 15
    query_timeout_s: int = 60

    def validate(self) -> List[str]:
        errors = []
        if self.login_timeout_s < 1:
            errors.append(f"login_timeout_s must be >= 1, got {self.login_timeout_s}")
        if self.query_timeout_s < 1:
            errors.append(f"query_timeout_s must be >= 1, got {self.query_timeout_s}")
        return errors


@dataclass(frozen=True)
class ConnectionConfig:
    """Where and how to connect to the audited database.

    For ``sqlite`` the ``database`` field is the database file path and
    ``server`` is ignored.
    """

    user: str = ""
    password: str = field(default="", repr=False)
    server: str = ""
    database: str = ""
    port: Optional[int] = None
    dialect: str = "mssql"
    driver: str = "ODBC Driver 18 for SQL Server"
    schema: Optional[str] = None
    options: ConnectionOptions = field(default_factory=ConnectionOptions)

    def validate(self) -> List[str]:
        """
        Validate connection configuration.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if self.dialect not in SUPPORTED_DIALECTS:
            errors.append(
                f"Unsupported dialect: {self.dialect} (expected one of {', '.join(SUPPORTED_DIALECTS)})"
            )
        if not self.database:
            errors.append("database is required")
        if self.dialect != "sqlite" and not self.server:
            errors.append("server is required")
        if self.port is not None and not 1 <= self.port <= 65535:
            errors.append(f"Invalid port number: {self.port}")

        errors.extend(self.options.validate())
        return errors

    def with_overrides(self, **changes: Any) -> "ConnectionConfig":
        """Return a copy with the non-None ``changes`` applied.

        ``options`` may be given as a ``ConnectionOptions`` or as a dict of
        option overrides.
        """
        changes = {key: value for key, value in changes.items() if value is not None}
        options = changes.pop("options", None)
        if isinstance(options, dict):
            changes["options"] = replace(self.options, **options)
        elif options is not None:
            changes["options"] = options
        return replace(self, **changes)

    @property
    def target(self) -> str:
        """Short label of the audited database used in logs and errors."""
        if self.dialect == "sqlite":
            return self.database
        return f"{self.server}/{self.database}"

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "ConnectionConfig":
        values = dict(values)
        options = values.pop("options", None) or {}
        return cls(options=ConnectionOptions(**options), **values)


@dataclass(frozen=True)
class AuditLogConfig:
    """Configuration for the append-only audit log."""

    path: str = "audit.log"
    include_details: bool = True

    def validate(self) -> List[str]:
        errors = []
        if not self.path:
            errors.append("audit log path is required")
        return errors


@dataclass(frozen=True)
class LoggingConfig:
    """Configuration for diagnostic logging."""

    level: str = "INFO"
    file: str = "dbauditor.log"
    log_dir: str = "logs"
    console: bool = True
    file_output: bool = False
    max_bytes: int = 10 * 1024 * 1024  # 10 MB
    backup_count: int = 5

    def validate(self) -> List[str]:
        """
        Validate logging configuration.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.level.upper() not in valid_levels:
            errors.append(f"Invalid log level: {self.level}")

        if self.max_bytes < 1024:
            errors.append(f"max_bytes too small: {self.max_bytes}")

        if self.backup_count < 0:
            errors.append(f"backup_count must be >= 0, got {self.backup_count}")

        return errors


@dataclass(frozen=True)
class Config:
    """
    Main configuration class for DBAuditor.

    This class aggregates all configuration sections and provides
    validation and conversion helpers.
    """

    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    audit_log: AuditLogConfig = field(default_factory=AuditLogConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> bool:
        """
        Validate entire configuration.

        Returns:
            True if valid, raises ConfigurationError if invalid

        Raises:
            ConfigurationError: If any validation fails
        """
        from dbauditor.core.exceptions import ConfigurationError

        all_errors = []
        all_errors.extend(self.connection.validate())
        all_errors.extend(self.audit_log.validate())
        all_errors.extend(self.logging.validate())

        if all_errors:
            error_msg = "\n".join(f"  - {err}" for err in all_errors)
            raise ConfigurationError(
                "configuration",
                f"Configuration validation failed:\n{error_msg}",
                {"errors": all_errors}
            )

        return True

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration
        """
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "Config":
        """
        Create configuration from dictionary.

        Args:
            config_dict: Dictionary with configuration values

        Returns:
            Config instance
        """
        return cls(
            connection=ConnectionConfig.from_dict(config_dict.get("connection") or {}),
            audit_log=AuditLogConfig(**(config_dict.get("audit_log") or {})),
            logging=LoggingConfig(**(config_dict.get("logging") or {})),
        )

