# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""DBAuditor - read-only structural audit for relational databases.

DBAuditor inspects a database's catalog and live data and reports the
weaknesses a schema should shed before it is hardened.

The package provides:
- Referential integrity checks (columns that look like foreign keys but
  carry no enforced constraint)
- Constraint action checks (foreign keys left on NO ACTION)
- Data anomaly checks (nulls in NOT NULL columns, duplicates in unique columns)
- An append-only, human-readable audit log of every run
- A CLI that returns JSON envelopes

Examples
--------
Probe a server:
    $ python -m dbauditor --server db01 --database Sales --user sa test-connection

Run every analyzer:
    $ python -m dbauditor --config dbauditor.yaml audit

See Also
--------
dbauditor.auditor_cli.cli : Command-line interface
dbauditor.application.orchestrator : Boundary operations
dbauditor.analyzers : Anomaly-detection engine
"""
from __future__ import annotations

__version__ = "1.0.0"
__author__ = "Anush Krishna"
__license__ = "MIT"

__all__ = ["__version__", "__author__", "__license__"]
