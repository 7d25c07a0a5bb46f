# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Persistent storage for DBAuditor (the audit log)."""
from __future__ import annotations

from .audit_log import AuditRecorder, ENTRY_SEPARATOR

__all__ = ["AuditRecorder", "ENTRY_SEPARATOR"]
