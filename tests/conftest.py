"""
Pytest configuration file.

Ensures the repo root is on sys.path so that 'import sprint_tracker...' works,
and provides fixtures shared across test modules.
"""
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add the repo root to sys.path
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from sprint_tracker.utils.time import FrozenClock


SAMPLE_DATA_DIR = repo_root / "data" / "sample"


@pytest.fixture
def frozen_clock():
    """Clock pinned to Wednesday 2025-01-08 10:00 (inside the sample sprint)."""
    return FrozenClock(datetime(2025, 1, 8, 10, 0))


@pytest.fixture
def sample_data_dir():
    """Directory with SPRINT_CONFIG.csv, MEMBERS.csv, TASKS.csv, MILESTONES.csv."""
    return SAMPLE_DATA_DIR


@pytest.fixture
def sample_tables():
    """Raw CSV text of the sample sheet, keyed by table name."""
    return {
        path.stem: path.read_text(encoding="utf-8")
        for path in sorted(SAMPLE_DATA_DIR.glob("*.csv"))
    }
