# Copyright (c) 2025 Anush Krishna
# Licensed under the MIT License. See LICENSE file in the project root.

"""Main entry point for running dbauditor as a module.

This module enables running dbauditor via `python -m dbauditor`.

Examples
--------
$ python -m dbauditor --help
$ python -m dbauditor --config dbauditor.yaml referential-integrity

See Also
--------
dbauditor.auditor_cli.cli : CLI implementation
"""
from __future__ import annotations

from .main import main


if __name__ == "__main__":
    main()
