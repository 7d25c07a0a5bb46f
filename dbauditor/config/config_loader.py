# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Configuration loader for DBAuditor.

This module handles loading configuration from multiple sources with
well-defined precedence rules to provide flexible configuration management.

Configuration Sources
---------------------
The loader supports multiple configuration sources with the following priority
order (highest to lowest):

1. Command-line arguments (highest priority)
2. Environment variables (prefixed with DBAUDITOR_), including a .env file
3. Configuration file (YAML or TOML)
4. Default values (lowest priority)

Environment Variables
---------------------
All environment variables must be prefixed with `DBAUDITOR_`. Nesting uses
double underscores: `DBAUDITOR_CONNECTION__SERVER`,
`DBAUDITOR_CONNECTION__OPTIONS__ENCRYPT`, `DBAUDITOR_AUDIT_LOG__PATH`.

Because configuration sections are immutable, sources are merged as plain
dictionaries and the Config object is built once at the end.

Examples
--------
Load from YAML file:
    >>> loader = ConfigLoader()
    >>> config = loader.load_config('dbauditor.yaml')
    >>> config.connection.server
    'db01'

See Also
--------
config_schema : Configuration schema definitions
"""
from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

try:
    import tomllib
except ImportError:  # Python < 3.11
    import tomli as tomllib

from .config_schema import Config
from dbauditor.core.exceptions import ConfigurationError

# CLI argument name -> path inside the configuration dictionary
ARG_MAPPING = {
    'server': ('connection', 'server'),
    'database': ('connection', 'database'),
    'user': ('connection', 'user'),
    'password': ('connection', 'password'),
    'port': ('connection', 'port'),
    'dialect': ('connection', 'dialect'),
    'driver': ('connection', 'driver'),
    'schema': ('connection', 'schema'),
    'encrypt': ('connection', 'options', 'encrypt'),
    'trust_server_certificate': ('connection', 'options', 'trust_server_certificate'),
    'query_timeout': ('connection', 'options', 'query_timeout_s'),
    'login_timeout': ('connection', 'options', 'login_timeout_s'),
    'audit_log': ('audit_log', 'path'),
    'include_details': ('audit_log', 'include_details'),
    'log_level': ('logging', 'level'),
    'log_dir': ('logging', 'log_dir'),
}


class ConfigLoader:
    """Configuration loader that supports multiple sources.

    Attributes
    ----------
    ENV_PREFIX : str
        Prefix for environment variables ('DBAUDITOR_').
    values : dict
        Merged configuration values collected so far.

    Examples
    --------
    >>> loader = ConfigLoader()
    >>> config = loader.load_config(args={'server': 'db01', 'database': 'Sales'})
    >>> config.connection.target
    'db01/Sales'
    """

    ENV_PREFIX = "DBAUDITOR_"

    def __init__(self):
        """Initialize configuration loader with default values."""
        self.values: Dict[str, Any] = Config().to_dict()

    def load_from_file(self, file_path: str) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Supports YAML and TOML formats based on file extension.

        Args:
            file_path: Path to configuration file

        Returns:
            Merged configuration values

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        path = Path(file_path)

        if not path.exists():
            raise ConfigurationError(
                "file_path",
                f"Configuration file not found: {file_path}"
            )

        try:
            if path.suffix in ['.yaml', '.yml']:
                with open(path, 'r', encoding='utf-8') as f:
                    config_dict = yaml.safe_load(f) or {}
            elif path.suffix == '.toml':
                with open(path, 'rb') as f:
                    config_dict = tomllib.load(f)
            else:
                raise ConfigurationError(
                    "file_format",
                    f"Unsupported configuration file format: {path.suffix}"
                )
        except yaml.YAMLError as e:
            raise ConfigurationError(
                "yaml_parse",
                f"Failed to parse YAML configuration: {e}"
            ) from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(
                "toml_parse",
                f"Failed to parse TOML configuration: {e}"
            ) from e
        except OSError as e:
            raise ConfigurationError(
                "file_load",
                f"Failed to load configuration file: {e}"
            ) from e

        if not isinstance(config_dict, dict):
            raise ConfigurationError("file_format", "Configuration root must be a mapping")

        # Handle nested 'dbauditor' key if present
        if 'dbauditor' in config_dict:
            config_dict = config_dict['dbauditor'] or {}

        self._merge(self.values, config_dict)
        return self.values

    def load_from_env(self, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        """
        Load configuration from environment variables.

        Example:
            DBAUDITOR_CONNECTION__SERVER=db01
            DBAUDITOR_CONNECTION__OPTIONS__ENCRYPT=false
            DBAUDITOR_AUDIT_LOG__PATH=/var/log/dbauditor/audit.log

        Returns:
            Merged configuration values
        """
        environ = os.environ if environ is None else environ

        for key, value in environ.items():
            if not key.startswith(self.ENV_PREFIX):
                continue
            parts = tuple(key[len(self.ENV_PREFIX):].lower().split('__'))
            if len(parts) < 2:
                continue
            self._set_value(parts, value)

        return self.values

    def load_from_args(self, args: Dict[str, Any]) -> Dict[str, Any]:
        """
        Load configuration from command-line arguments.

        Args:
            args: Dictionary of argument names and values; None values are skipped

        Returns:
            Merged configuration values
        """
        for arg_name, value in (args or {}).items():
            if value is not None and arg_name in ARG_MAPPING:
                self._set_value(ARG_MAPPING[arg_name], value)
        return self.values

    def load_config(
        self,
        config_file: Optional[str] = None,
        env: bool = True,
        args: Optional[Dict[str, Any]] = None,
        dotenv_path: Optional[str] = None,
        validate: bool = True,
    ) -> Config:
        """
        Load configuration from multiple sources.

        Args:
            config_file: Path to configuration file (optional)
            env: Whether to load from environment variables (and .env)
            args: Command-line arguments dictionary (optional)
            dotenv_path: Custom .env location; python-dotenv searches when omitted
            validate: Validate the result; callers that only need part of the
                configuration can defer validation to the point of use

        Returns:
            Validated Config instance

        Raises:
            ConfigurationError: If configuration is invalid
        """
        self.values = Config().to_dict()

        if config_file:
            self.load_from_file(config_file)

        if env:
            load_dotenv(dotenv_path or find_dotenv(usecwd=True))
            self.load_from_env()

        if args:
            self.load_from_args(args)

        try:
            config = Config.from_dict(self.values)
        except TypeError as e:
            raise ConfigurationError("configuration", f"Unknown configuration option: {e}") from e

        if validate:
            config.validate()
        return config

    def _merge(self, target: Dict[str, Any], partial: Mapping[str, Any]) -> None:
        for key, value in partial.items():
            if isinstance(value, Mapping) and isinstance(target.get(key), dict):
                self._merge(target[key], value)
            else:
                target[key] = copy.deepcopy(value)

    def _set_value(self, path: tuple, value: Any) -> None:
        node = self.values
        for part in path[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                return
            node = child
        option = path[-1]
        if option not in node:
            return
        node[option] = self._coerce(value, node[option]) if isinstance(value, str) else value

    @staticmethod
    def _coerce(value: str, current: Any) -> Any:
        """
        Convert a string to the type of the value it replaces.

        Args:
            value: String value from environment variable or file
            current: Value currently held for the option

        Returns:
            Parsed value (bool, int, or str)
        """
        if isinstance(current, bool):
            lowered = value.strip().lower()
            if lowered in ('true', '1', 'yes', 'on'):
                return True
            if lowered in ('false', '0', 'no', 'off'):
                return False
            raise ConfigurationError("boolean", f"Cannot interpret '{value}' as a boolean")
        if isinstance(current, int) or (current is None and value.strip().isdigit()):
            try:
                return int(value)
            except ValueError as e:
                raise ConfigurationError("integer", f"Cannot interpret '{value}' as an integer") from e
        return value


def load_config(
    config_file: Optional[str] = None,
    env: bool = True,
    args: Optional[Dict[str, Any]] = None
) -> Config:
    """
    Convenience function to load configuration.

    Args:
        config_file: Path to configuration file (optional)
        env: Whether to load from environment variables
        args: Command-line arguments dictionary (optional)

    Returns:
        Validated Config instance
    """
    loader = ConfigLoader()
    return loader.load_config(config_file=config_file, env=env, args=args)
