"""
Schedule Validation
===================
Checks a set of duty slots for the hard invariants of the roster:
no person on two duties the same date, and no duty type over-filled.
"""
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from dutyrota.models.duty import DutySlot, DutyType, SlotStatus
from dutyrota.utils.logging_setup import get_logger, log_function_call

logger = get_logger("dutyrota.solver.validation")


@dataclass
class Violation:
    """Single violation with details."""
    type: str  # "double_booking", "overfilled"
    date: str
    message: str
    person_id: str = ""
    duty_type_id: str = ""
    count: int = 1


@dataclass
class ValidationResult:
    """Violation counts for a set of slots."""
    double_bookings: int = 0
    overfilled: int = 0
    violations: List[Violation] = field(default_factory=list)

    def add_violation(self, v: Violation):
        self.violations.append(v)

    def as_dict(self) -> Dict[str, int]:
        return {
            "double_bookings": self.double_bookings,
            "overfilled": self.overfilled,
        }

    @property
    def has_critical_issues(self) -> bool:
        return self.double_bookings > 0 or self.overfilled > 0


@log_function_call
def validate_slots(slots: Iterable[DutySlot], duty_types: Iterable[DutyType]) -> ValidationResult:
    """
    Validate slots against the roster invariants.

    Args:
        slots: Slots to check (cancelled slots are ignored)
        duty_types: Duty types supplying slots_needed

    Returns:
        ValidationResult with all violations
    """
    needed = {dt.id: dt.slots_needed for dt in duty_types}
    live = [s for s in slots if s.status != SlotStatus.CANCELLED]
    result = ValidationResult()

    per_person_day = Counter((s.person_id, s.date) for s in live if s.person_id)
    for (person_id, day), n in sorted(per_person_day.items()):
        if n > 1:
            result.double_bookings += 1
            result.add_violation(Violation(
                type="double_booking",
                date=day,
                person_id=person_id,
                count=n,
                message=f"{person_id} holds {n} duties on {day}",
            ))

    per_type_day = Counter((s.duty_type_id, s.date) for s in live)
    for (duty_type_id, day), n in sorted(per_type_day.items()):
        limit = needed.get(duty_type_id)
        if limit is not None and n > limit:
            result.overfilled += 1
            result.add_violation(Violation(
                type="overfilled",
                date=day,
                duty_type_id=duty_type_id,
                count=n - limit,
                message=f"{duty_type_id} has {n} slots on {day} (needs {limit})",
            ))

    if result.has_critical_issues:
        logger.warning(f"Validation found {len(result.violations)} violations")
    return result
