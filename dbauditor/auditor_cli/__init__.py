# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Command-line interface for DBAuditor."""
from __future__ import annotations

from .cli import app

__all__ = ["app"]
