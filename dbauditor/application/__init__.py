# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Application layer: analyzer registry and boundary operations."""
from __future__ import annotations

from .orchestrator import (
    available_analyzers,
    check_constraint_anomalies,
    check_data_anomalies,
    check_referential_integrity,
    get_logs,
    run_analyzer,
    test_connection,
)

__all__ = [
    "available_analyzers",
    "check_constraint_anomalies",
    "check_data_anomalies",
    "check_referential_integrity",
    "get_logs",
    "run_analyzer",
    "test_connection",
]
