"""
Root conftest for notereel/.

Adds notereel/ to sys.path so that `schemas`, `renderer`, and `tests` are
importable with the same flat imports the CLI uses.

This file is picked up automatically by pytest when tests under
notereel/tests/ are collected.
"""
import sys
from pathlib import Path

_PKG_ROOT = Path(__file__).parent
if str(_PKG_ROOT) not in sys.path:
    sys.path.insert(0, str(_PKG_ROOT))
