"""
Scheduling Context
==================
Run-scoped index over duty slots, built once per allocation run.

Two maps keyed by canonical date string:
    slots_by_date:     date -> [DutySlot, ...]
    assigned_by_date:  date -> {person_id, ...}

The allocator mutates the context as it commits slots, so later decisions
in the same run see earlier ones without going back to the data store.
A context belongs to exactly one run and is never persisted or shared.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set

from dutyrota.models.dates import DateLike, normalize_date
from dutyrota.models.duty import DutySlot, SlotStatus
from dutyrota.solver.calendar import add_days
from dutyrota.utils.logging_setup import get_logger

logger = get_logger("dutyrota.solver.context")


@dataclass
class SchedulingContext:
    """Date-indexed view of existing slots and assignments."""

    slots_by_date: Dict[str, List[DutySlot]] = field(default_factory=dict)
    assigned_by_date: Dict[str, Set[str]] = field(default_factory=dict)

    @classmethod
    def build(cls, all_slots: Iterable[DutySlot]) -> "SchedulingContext":
        """
        Index the full slot history in a single pass.

        Cancelled slots are ignored: they neither occupy a position nor
        count as an assignment.
        """
        ctx = cls()
        count = 0
        for slot in all_slots:
            if slot.status == SlotStatus.CANCELLED:
                continue
            ctx.record_slot(slot)
            count += 1
        logger.debug(f"Context built: {count} slots over {len(ctx.slots_by_date)} dates")
        return ctx

    def slots_on_date(self, day: DateLike) -> List[DutySlot]:
        return self.slots_by_date.get(normalize_date(day), [])

    def is_assigned_on_date(self, person_id: str, day: DateLike) -> bool:
        return person_id in self.assigned_by_date.get(normalize_date(day), ())

    def count_recent_duties(self, person_id: str, reference_date: DateLike, window_days: int = 7) -> int:
        """Number of the ``window_days`` days strictly before reference_date on which the person had duty."""
        ref = normalize_date(reference_date)
        return sum(
            1
            for offset in range(1, window_days + 1)
            if person_id in self.assigned_by_date.get(add_days(ref, -offset), ())
        )

    def count_existing_slots_for_duty_type(self, duty_type_id: str, day: DateLike) -> int:
        return sum(1 for s in self.slots_on_date(day) if s.duty_type_id == duty_type_id)

    def record_assignment(self, person_id: str, day: DateLike) -> None:
        self.assigned_by_date.setdefault(normalize_date(day), set()).add(person_id)

    def record_slot(self, slot: DutySlot) -> None:
        self.slots_by_date.setdefault(slot.date, []).append(slot)
        if slot.person_id:
            self.record_assignment(slot.person_id, slot.date)
