import sys
from datetime import date
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from scheduler.models import WeeklySchedule  # noqa: E402


@pytest.fixture
def mon_wed_schedule() -> WeeklySchedule:
    return WeeklySchedule(
        days=("Monday", "Wednesday"),
        start_time="10:00",
        end_time="11:00",
        start_date=date(2025, 1, 13),
        end_date=date(2025, 1, 24),
    )
