# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Anomaly-detection engine.

Modules
-------
referential : Columns named like foreign keys without a constraint
constraints : Foreign keys left on NO ACTION
data_anomalies : NULLs in NOT NULL columns, duplicates in unique columns
"""
from __future__ import annotations

from .base import Analyzer
from .constraints import ConstraintActionAnalyzer
from .data_anomalies import DataAnomalyAnalyzer
from .referential import ReferentialIntegrityAnalyzer, looks_like_foreign_key

__all__ = [
    "Analyzer",
    "ConstraintActionAnalyzer",
    "DataAnomalyAnalyzer",
    "ReferentialIntegrityAnalyzer",
    "looks_like_foreign_key",
]
