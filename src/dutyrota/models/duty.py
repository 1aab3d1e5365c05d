"""Duty types, point values, slots and availability records."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .dates import normalize_date


class FilterMode(str, Enum):
    """How a duty type filter treats its value list."""
    INCLUDE = "include"
    EXCLUDE = "exclude"

    @classmethod
    def parse(cls, value) -> Optional["FilterMode"]:
        """Parse a mode from a string; blank or unknown means no filter."""
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        for member in cls:
            if member.value == key:
                return member
        return None


@dataclass
class DutyFilter:
    """Include/exclude filter on a person attribute (rank or unit)."""
    mode: Optional[FilterMode] = None
    values: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.mode = FilterMode.parse(self.mode)
        self.values = [str(v).strip() for v in (self.values or []) if str(v).strip()]

    @property
    def is_active(self) -> bool:
        return self.mode is not None and bool(self.values)

    def matches(self, value: str) -> bool:
        """True if value passes the filter. An inactive filter passes everyone."""
        if not self.is_active:
            return True
        hit = value in self.values
        return hit if self.mode == FilterMode.INCLUDE else not hit


@dataclass
class DutyType:
    """A category of recurring obligation scoped to one unit."""
    id: str
    unit_id: str
    name: str
    slots_needed: int = 1
    is_active: bool = True
    description: str = ""
    rank_filter: DutyFilter = field(default_factory=DutyFilter)
    section_filter: DutyFilter = field(default_factory=DutyFilter)

    def __post_init__(self):
        self.id = str(self.id).strip()
        self.unit_id = str(self.unit_id).strip()
        self.name = str(self.name).strip() or self.id
        self.slots_needed = int(self.slots_needed)
        if self.slots_needed < 1:
            raise ValueError(f"slots_needed must be >= 1 for duty type {self.id!r}")


@dataclass
class DutyRequirement:
    """A qualification a duty type requires."""
    duty_type_id: str
    required_qual_name: str


@dataclass
class Qualification:
    """A qualification held by a person."""
    person_id: str
    qual_name: str


# Defaults used when a duty type has no DutyValue configured
DEFAULT_BASE_WEIGHT = 1.0
DEFAULT_WEEKEND_MULTIPLIER = 1.5
DEFAULT_HOLIDAY_MULTIPLIER = 2.0


@dataclass
class DutyValue:
    """Point configuration for a duty type."""
    duty_type_id: str
    base_weight: float = DEFAULT_BASE_WEIGHT
    weekend_multiplier: float = DEFAULT_WEEKEND_MULTIPLIER
    holiday_multiplier: float = DEFAULT_HOLIDAY_MULTIPLIER


class SlotStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    SWAPPED = "swapped"


@dataclass
class DutySlot:
    """One concrete person-to-duty-on-date assignment."""
    id: str
    duty_type_id: str
    person_id: Optional[str]
    date: str
    assigned_by: str = ""
    points: float = 0.0
    status: SlotStatus = SlotStatus.SCHEDULED
    created_at: Optional[datetime] = field(default=None, compare=False)

    def __post_init__(self):
        self.date = normalize_date(self.date)
        if isinstance(self.status, str):
            self.status = SlotStatus(self.status.strip().lower())
        if self.person_id is not None:
            self.person_id = str(self.person_id).strip() or None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "duty_type_id": self.duty_type_id,
            "person_id": self.person_id,
            "date": self.date,
            "assigned_by": self.assigned_by,
            "points": self.points,
            "status": self.status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class AvailabilityStatus(str, Enum):
    PENDING = "pending"
    RECOMMENDED = "recommended"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class NonAvailability:
    """A date range (inclusive) during which a person cannot take duty."""
    id: str
    person_id: str
    start_date: str
    end_date: str
    reason: str = ""
    status: AvailabilityStatus = AvailabilityStatus.APPROVED

    def __post_init__(self):
        self.start_date = normalize_date(self.start_date)
        self.end_date = normalize_date(self.end_date)
        if isinstance(self.status, str):
            self.status = AvailabilityStatus(self.status.strip().lower())

    def covers(self, day: str) -> bool:
        """True if this record is approved and spans the given canonical date."""
        if self.status != AvailabilityStatus.APPROVED:
            return False
        return self.start_date <= day <= self.end_date
