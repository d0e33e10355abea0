"""Pytest configuration for path setup.

The test suite imports ``authsession`` from ``client/src`` and the fake
helpers from ``tests/helpers``.  When pytest is executed as an installed
script, the repository root is not automatically added to ``sys.path``.
This file makes both the project root and the ``client/src`` directory
available for imports during test collection.
"""

from __future__ import annotations

import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]

for path in (ROOT, ROOT / "client" / "src"):
    path_str = str(path)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)
