# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Infrastructure layer for DBAuditor.

This package contains the connection provider and the catalog backends.
"""
from __future__ import annotations

__all__ = []
