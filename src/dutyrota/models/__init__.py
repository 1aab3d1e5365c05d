# dutyrota/models - Data models for the duty roster
from .config import EngineConfig, TieBreak
from .dates import normalize_date, parse_date
from .duty import (
    AvailabilityStatus,
    DutyFilter,
    DutyRequirement,
    DutySlot,
    DutyType,
    DutyValue,
    FilterMode,
    NonAvailability,
    Qualification,
    SlotStatus,
)
from .person import Person, Unit
from .schedule import ScheduleRequest, ScheduleResult

__all__ = [
    "Person", "Unit",
    "DutyType", "DutyFilter", "FilterMode", "DutyRequirement", "Qualification",
    "DutyValue", "DutySlot", "SlotStatus", "NonAvailability", "AvailabilityStatus",
    "ScheduleRequest", "ScheduleResult",
    "EngineConfig", "TieBreak",
    "normalize_date", "parse_date",
]
