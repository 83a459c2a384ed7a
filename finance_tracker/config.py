"""Configuration management for the finance tracker.

This module centralizes all configuration values including paths,
defaults, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base project root - assumes this file is in finance_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("FINTRACK_DATA_DIR", _PROJECT_ROOT / "data"))

# Database
DB_PATH = Path(
    os.getenv("FINTRACK_DB_PATH", DATA_DIR / "finance.db")
).resolve()

# Logging
LOG_LEVEL = os.getenv("FINTRACK_LOG_LEVEL", "INFO").upper()
LOG_JSON = os.getenv("FINTRACK_LOG_JSON", "0").lower() in {"1", "true", "yes"}

# Budget and form limits
PROGRESS_CAP = 150
MIN_MONTH = 1
MAX_MONTH = 12
MIN_YEAR = 2000
MAX_YEAR = 2100
MIN_PASSWORD_LENGTH = 6
RECENT_TRANSACTION_LIMIT = 5


def ensure_data_directories() -> None:
    """Create the data directory and the database file's parent."""
    for directory in {DATA_DIR, DB_PATH.parent}:
        directory.mkdir(parents=True, exist_ok=True)
