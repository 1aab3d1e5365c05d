"""Pytest configuration and fixtures."""
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from dutyrota.io.repository import InMemoryRepository
from dutyrota.models.config import EngineConfig, TieBreak
from dutyrota.models.duty import DutyType
from dutyrota.models.person import Person, Unit

# 2025-01-14 is a Tuesday, 2025-01-18/19 a weekend, 2025-12-25 a holiday
TUESDAY = "2025-01-14"
SATURDAY = "2025-01-18"
SUNDAY = "2025-01-19"
CHRISTMAS = "2025-12-25"


@pytest.fixture
def units():
    return [
        Unit(id="U1", name="Alpha Company"),
        Unit(id="U1-A", name="1st Platoon", parent_id="U1"),
        Unit(id="U1-A-1", name="1st Squad", parent_id="U1-A"),
        Unit(id="U2", name="Bravo Company"),
    ]


@pytest.fixture
def roster(units):
    """One active duty type (1 slot, no filters) and two people scored 5.0 and 2.0."""
    return InMemoryRepository(
        units=units,
        personnel=[
            Person(id="P1", unit_id="U1", rank="SGT", current_duty_score=5.0, last_name="Smith"),
            Person(id="P2", unit_id="U1", rank="CPL", current_duty_score=2.0, last_name="Jones"),
        ],
        duty_types=[DutyType(id="DT1", unit_id="U1", name="Duty NCO", slots_needed=1)],
    )


@pytest.fixture
def config():
    """Deterministic engine configuration."""
    return EngineConfig(tie_break=TieBreak.ID)
