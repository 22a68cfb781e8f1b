from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

TZ = ZoneInfo("America/Toronto")


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tracker.db")
    return db_path


@pytest.fixture
def tz():
    return TZ


@pytest.fixture
def now():
    """Monday 2026-10-19, 09:00 in Toronto."""
    return datetime(2026, 10, 19, 9, 0, tzinfo=TZ)
