# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""
Audit Orchestrator

This module is the boundary of the anomaly-detection engine. It wires a
connection configuration, a catalog backend, an analyzer and the audit log
together, and wraps every outcome in a uniform JSON-ready envelope:

- success: ``{"success": True, ...payload}``
- failure: ``{"success": False, "error": <message passed through unmodified>}``

Each analyzer run opens its own connection and closes it on every exit
path. Only application errors (``DbAuditorError``) become failure
envelopes; anything else is a bug and propagates.

Example:
    Check a database for unconstrained foreign key candidates::

        config = ConnectionConfig(server="db01", database="Sales", user="sa", password="...")
        result = check_referential_integrity(config, AuditRecorder("audit.log"))
        result["totalIssues"]

Author: Anush Krishna
License: MIT
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from dbauditor.analyzers import (
    Analyzer,
    ConstraintActionAnalyzer,
    DataAnomalyAnalyzer,
    ReferentialIntegrityAnalyzer,
)
from dbauditor.config.config_schema import ConnectionConfig
from dbauditor.core.exceptions import ConfigurationError, DbAuditorError
from dbauditor.core.models import Finding
from dbauditor.infra.db.catalogs import Catalog, get_catalog
from dbauditor.infra.db.connection import connect, probe
from dbauditor.storage.audit_log import ERROR, AuditRecorder

logger = logging.getLogger(__name__)

# Analyzer factory registry mapping analyzer names to their implementation classes
ANALYZER_FACTORIES = {
    ReferentialIntegrityAnalyzer.name: ReferentialIntegrityAnalyzer,
    ConstraintActionAnalyzer.name: ConstraintActionAnalyzer,
    DataAnomalyAnalyzer.name: DataAnomalyAnalyzer,
}


def available_analyzers() -> List[str]:
    """Get list of available analyzers.

    Examples
    --------
    >>> available_analyzers()
    ['referential-integrity', 'constraint-anomalies', 'data-anomalies']
    """
    return list(ANALYZER_FACTORIES.keys())


def instantiate_analyzer(
    name: str, catalog: Catalog, recorder: Optional[AuditRecorder] = None
) -> Analyzer:
    """Instantiate an analyzer by name from the factory registry.

    Raises
    ------
    ConfigurationError
        If no analyzer is registered under ``name``.
    """
    factory = ANALYZER_FACTORIES.get(name.lower())
    if factory is None:
        raise ConfigurationError(
            "analyzer",
            f"Unknown analyzer: {name} (expected one of {', '.join(available_analyzers())})",
        )
    return factory(catalog, recorder)


def run_analyzer(
    name: str,
    config: ConnectionConfig,
    recorder: Optional[AuditRecorder] = None,
) -> List[Finding]:
    """Run one analyzer on its own connection and return its findings.

    Configuration and connection failures are recorded as ERROR entries,
    like failures inside the run.

    Raises
    ------
    DbAuditorError
        Configuration, connection or catalog failure. No findings are
        returned in that case.
    """
    try:
        catalog = get_catalog(config.dialect, config.schema)
        analyzer = instantiate_analyzer(name, catalog, recorder)
        connection = connect(config, catalog)
    except DbAuditorError as exc:
        if recorder is not None:
            recorder.record(ERROR, exc.message)
        raise
    try:
        return analyzer.run(connection)
    finally:
        connection.close()


# ---------------------------------------------------------------------------
# Boundary operations
# ---------------------------------------------------------------------------


def test_connection(config: ConnectionConfig, **overrides: Any) -> Dict[str, Any]:
    """Probe ``config`` (with optional server/database/user/password overrides).

    The base configuration is never modified; overrides produce a new value.
    """
    candidate = config.with_overrides(**overrides)
    try:
        probe(candidate)
    except DbAuditorError as exc:
        return _failure(exc)
    return {"success": True, "message": "Connection successful"}


# keep pytest from collecting the boundary function as a test
test_connection.__test__ = False


def check_referential_integrity(
    config: ConnectionConfig, recorder: Optional[AuditRecorder] = None
) -> Dict[str, Any]:
    try:
        findings = run_analyzer(ReferentialIntegrityAnalyzer.name, config, _recorder(recorder))
    except DbAuditorError as exc:
        return _failure(exc)
    return {
        "success": True,
        "missingConstraints": [finding.to_dict() for finding in findings],
        "totalIssues": len(findings),
    }


def check_constraint_anomalies(
    config: ConnectionConfig, recorder: Optional[AuditRecorder] = None
) -> Dict[str, Any]:
    try:
        findings = run_analyzer(ConstraintActionAnalyzer.name, config, _recorder(recorder))
    except DbAuditorError as exc:
        return _failure(exc)
    return {"success": True, "anomalies": [finding.to_dict() for finding in findings]}


def check_data_anomalies(
    config: ConnectionConfig, recorder: Optional[AuditRecorder] = None
) -> Dict[str, Any]:
    try:
        findings = run_analyzer(DataAnomalyAnalyzer.name, config, _recorder(recorder))
    except DbAuditorError as exc:
        return _failure(exc)
    return {"success": True, "anomalies": [finding.to_dict() for finding in findings]}


def get_logs(recorder: Optional[AuditRecorder] = None) -> Dict[str, Any]:
    """Return every audit log entry as trimmed text, oldest first."""
    try:
        logs = _recorder(recorder).read_blocks()
    except DbAuditorError as exc:
        return _failure(exc)
    return {"success": True, "logs": logs, "totalLogs": len(logs)}


BOUNDARY_OPERATIONS = {
    ReferentialIntegrityAnalyzer.name: check_referential_integrity,
    ConstraintActionAnalyzer.name: check_constraint_anomalies,
    DataAnomalyAnalyzer.name: check_data_anomalies,
}


def _recorder(recorder: Optional[AuditRecorder]) -> AuditRecorder:
    return recorder if recorder is not None else AuditRecorder()


def _failure(exc: DbAuditorError) -> Dict[str, Any]:
    logger.debug("Returning failure envelope: %s", exc.message)
    return {"success": False, "error": exc.message}


__all__ = [
    "ANALYZER_FACTORIES",
    "BOUNDARY_OPERATIONS",
    "available_analyzers",
    "check_constraint_anomalies",
    "check_data_anomalies",
    "check_referential_integrity",
    "get_logs",
    "instantiate_analyzer",
    "run_analyzer",
    "test_connection",
]
