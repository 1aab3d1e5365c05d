# dutyrota/solver - Fair duty allocation engine
from .allocator import (
    DutyAllocator,
    ScheduleRequestError,
    generate_schedule,
    preview_schedule,
)
from .calendar import day_type, generate_dates, is_holiday, is_weekend
from .context import SchedulingContext
from .eligibility import is_eligible, matches_filter
from .points import calculate_points
from .ranking import rank_candidates
from .validation import ValidationResult, Violation, validate_slots

__all__ = [
    "DutyAllocator",
    "ScheduleRequestError",
    "generate_schedule",
    "preview_schedule",
    "is_weekend",
    "is_holiday",
    "day_type",
    "generate_dates",
    "calculate_points",
    "SchedulingContext",
    "is_eligible",
    "matches_filter",
    "rank_candidates",
    "validate_slots",
    "ValidationResult",
    "Violation",
]
