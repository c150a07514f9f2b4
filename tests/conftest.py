# ruff: noqa: INP001
"""Pytest configuration shared across tracker tests."""

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Deterministic defaults during import-time settings initialization, regardless of shell env.
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["REMOTE_BASE_URL"] = ""
os.environ["LOG_FORMAT"] = "text"
