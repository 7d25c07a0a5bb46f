# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""DBAuditor CLI - Command Line Interface.

This module provides the command-line interface for DBAuditor. Every
command prints the same JSON envelope the boundary operations return and
exits with code 1 when the envelope reports a failure.

Synopsis
--------
test-connection
    Open and close a connection with the configured credentials
referential-integrity
    Columns named like foreign keys that have no constraint
constraint-anomalies
    Foreign keys left on NO ACTION for delete or update
data-anomalies
    NULLs in NOT NULL columns and duplicates in unique columns
audit
    Run several analyzers in sequence
logs
    Print the audit log

Options
-------
Connection options are global and go before the command:
    --config, -c
        YAML or TOML configuration file
    --server, --database, --user, --password, --port, --dialect, --schema
        Override the configured connection
    --audit-log
        Audit log file (default: audit.log)

Every command accepts:
    --json-out
        Write the JSON payload to this path instead of stdout

Examples
--------
Probe a server:
    $ python -m dbauditor --server db01 --database Sales --user sa test-connection

Run every analyzer with settings from a file:
    $ python -m dbauditor -c dbauditor.yaml audit

Audit a SQLite file:
    $ python -m dbauditor --dialect sqlite --database shop.db data-anomalies

Notes
-----
Passwords are best supplied through DBAUDITOR_CONNECTION__PASSWORD (or a
.env file) rather than on the command line.

See Also
--------
dbauditor.application.orchestrator : Boundary operations

Author: Anush Krishna
License: MIT
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from tqdm import tqdm

from dbauditor.application.orchestrator import (
    BOUNDARY_OPERATIONS,
    available_analyzers,
    get_logs,
    test_connection,
)
from dbauditor.config import Config, ConfigLoader
from dbauditor.core.exceptions import ConfigurationError
from dbauditor.core.logging_config import setup_logging
from dbauditor.storage.audit_log import AuditRecorder


app = typer.Typer(
    help="DBAuditor CLI - Read-only structural audit for relational databases",
    add_completion=False
)


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="YAML or TOML configuration file"
    ),
    server: Optional[str] = typer.Option(None, "--server", help="Database server"),
    database: Optional[str] = typer.Option(
        None, "--database", help="Database name (file path for sqlite)"
    ),
    user: Optional[str] = typer.Option(None, "--user", help="Login name"),
    password: Optional[str] = typer.Option(None, "--password", help="Login password"),
    port: Optional[int] = typer.Option(None, "--port", help="Server port"),
    dialect: Optional[str] = typer.Option(
        None, "--dialect", help="mssql, postgresql or sqlite"
    ),
    schema: Optional[str] = typer.Option(None, "--schema", help="Schema to audit"),
    encrypt: Optional[bool] = typer.Option(
        None, "--encrypt/--no-encrypt", help="Encrypt the connection"
    ),
    trust_server_certificate: Optional[bool] = typer.Option(
        None,
        "--trust-server-certificate/--verify-server-certificate",
        help="Accept the server certificate without validation",
    ),
    query_timeout: Optional[int] = typer.Option(
        None, "--query-timeout", min=1, help="Per-query timeout in seconds"
    ),
    audit_log: Optional[str] = typer.Option(None, "--audit-log", help="Audit log file"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Diagnostic log level"),
) -> None:
    """Read-only structural audit for relational databases."""
    args = {
        "server": server,
        "database": database,
        "user": user,
        "password": password,
        "port": port,
        "dialect": dialect,
        "schema": schema,
        "encrypt": encrypt,
        "trust_server_certificate": trust_server_certificate,
        "query_timeout": query_timeout,
        "audit_log": audit_log,
        "log_level": log_level,
    }
    try:
        # connection settings are validated when a command connects
        config = ConfigLoader().load_config(config_file=config_file, args=args, validate=False)
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc.message}", err=True)
        raise typer.Exit(code=2)

    setup_logging(
        log_level=config.logging.level,
        log_file=config.logging.file,
        log_dir=config.logging.log_dir,
        console_output=config.logging.console,
        file_output=config.logging.file_output,
        max_bytes=config.logging.max_bytes,
        backup_count=config.logging.backup_count,
    )
    ctx.obj = config


def _config(ctx: typer.Context) -> Config:
    return ctx.obj


def _recorder(config: Config) -> AuditRecorder:
    return AuditRecorder(config.audit_log.path, include_details=config.audit_log.include_details)


def _emit(payload: Dict[str, Any], json_out: Optional[str]) -> None:
    """Write the payload to ``json_out`` or stdout."""
    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if json_out:
        out_path = Path(json_out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text, encoding="utf-8")
    else:
        typer.echo(text)


def _finish(payload: Dict[str, Any], json_out: Optional[str]) -> None:
    _emit(payload, json_out)
    if not payload.get("success", False):
        raise typer.Exit(code=1)


_JSON_OUT = typer.Option(None, "--json-out", help="Write JSON payload to this path")


@app.command("test-connection")
def test_connection_cmd(ctx: typer.Context, json_out: Optional[str] = _JSON_OUT) -> None:
    """Open and immediately close a connection; no audit query is run."""
    _finish(test_connection(_config(ctx).connection), json_out)


@app.command("referential-integrity")
def referential_integrity(ctx: typer.Context, json_out: Optional[str] = _JSON_OUT) -> None:
    """Report columns named like foreign keys that no constraint enforces."""
    config = _config(ctx)
    _finish(BOUNDARY_OPERATIONS["referential-integrity"](config.connection, _recorder(config)), json_out)


@app.command("constraint-anomalies")
def constraint_anomalies(ctx: typer.Context, json_out: Optional[str] = _JSON_OUT) -> None:
    """Report foreign keys whose delete or update action is NO ACTION."""
    config = _config(ctx)
    _finish(BOUNDARY_OPERATIONS["constraint-anomalies"](config.connection, _recorder(config)), json_out)


@app.command("data-anomalies")
def data_anomalies(ctx: typer.Context, json_out: Optional[str] = _JSON_OUT) -> None:
    """Report NULLs in NOT NULL columns and duplicates in unique columns."""
    config = _config(ctx)
    _finish(BOUNDARY_OPERATIONS["data-anomalies"](config.connection, _recorder(config)), json_out)


@app.command("audit")
def audit(
    ctx: typer.Context,
    analyzers: Optional[List[str]] = typer.Option(
        None, "--analyzer", "-a", help="Analyzers to run (default: all)"
    ),
    stop_on_error: bool = typer.Option(
        False, "--stop-on-error", help="Stop on first analyzer failure"
    ),
    json_out: Optional[str] = _JSON_OUT,
) -> None:
    """Run several analyzers in sequence, each on its own connection.

    The payload maps each analyzer name to its envelope and carries an
    overall ``success`` flag.

    Examples
    --------
    Run two analyzers:
        $ python -m dbauditor -c dbauditor.yaml audit -a referential-integrity -a data-anomalies
    """
    available = available_analyzers()
    selected = [name.lower() for name in analyzers] if analyzers else available

    unknown = [name for name in selected if name not in available]
    if unknown:
        raise typer.BadParameter(f"Unknown analyzers: {', '.join(unknown)}")

    config = _config(ctx)
    recorder = _recorder(config)
    results: Dict[str, Any] = {}

    bar = tqdm(total=len(selected), desc="analyzers", unit="run", dynamic_ncols=True)
    try:
        for name in selected:
            bar.set_postfix_str(name, refresh=True)
            results[name] = BOUNDARY_OPERATIONS[name](config.connection, recorder)
            bar.update(1)
            if stop_on_error and not results[name]["success"]:
                break
    finally:
        bar.close()

    success = all(result["success"] for result in results.values())
    _finish({"success": success, "results": results}, json_out)


@app.command("logs")
def logs(
    ctx: typer.Context,
    parsed: bool = typer.Option(
        False, "--parsed", help="Return structured entries instead of raw text"
    ),
    json_out: Optional[str] = _JSON_OUT,
) -> None:
    """Print every audit log entry, oldest first."""
    recorder = _recorder(_config(ctx))
    payload = get_logs(recorder)
    if parsed and payload["success"]:
        entries = recorder.read_all()
        payload = {
            "success": True,
            "logs": [entry.model_dump(mode="json") for entry in entries],
            "totalLogs": len(entries),
        }
    _finish(payload, json_out)


__all__ = ["app"]
