from __future__ import annotations

import sys
from datetime import UTC, datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from sunmoon import Coordinate


@pytest.fixture
def reference_instant() -> datetime:
    # 2013-03-04 16:00 PST
    return datetime(2013, 3, 5, tzinfo=UTC)


@pytest.fixture
def reference_coordinate() -> Coordinate:
    return Coordinate(latitude=50.5, longitude=30.5)
