"""
Data Access
===========
The narrow persistence surface the allocation engine depends on, and an
in-memory implementation holding explicit state (no module-level caches).

All dates crossing this boundary are canonical ``YYYY-MM-DD`` strings.
"""
from collections import deque
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Protocol, Set, Tuple

from dutyrota.models.dates import DateLike, normalize_date
from dutyrota.models.duty import (
    DutyRequirement,
    DutySlot,
    DutyType,
    DutyValue,
    NonAvailability,
    Qualification,
    SlotStatus,
)
from dutyrota.models.person import Person, Unit
from dutyrota.utils.logging_setup import get_logger

logger = get_logger("dutyrota.io.repository")


class DutyDataAccess(Protocol):
    """Persistence operations consumed by the engine."""

    def get_unit(self, unit_id: str) -> Optional[Unit]:
        ...

    def get_active_duty_types_for_unit(self, unit_id: str) -> List[DutyType]:
        """Active duty types of the unit and all its descendant units, in stable order."""
        ...

    def get_personnel_for_unit(self, unit_id: str) -> List[Person]:
        """Personnel of the unit and all its descendant units."""
        ...

    def get_qualification_requirements(self, duty_type_id: str) -> List[DutyRequirement]:
        ...

    def person_has_qualification(self, person_id: str, qual_name: str) -> bool:
        ...

    def get_active_non_availability(self, person_id: str, date: str) -> Optional[NonAvailability]:
        ...

    def get_all_duty_slots(self) -> List[DutySlot]:
        """Full slot history, used to build the scheduling context."""
        ...

    def get_duty_value(self, duty_type_id: str) -> Optional[DutyValue]:
        ...

    def create_duty_slot(self, slot: DutySlot) -> DutySlot:
        ...

    def update_person_score(self, person_id: str, new_score: float) -> None:
        ...

    def clear_slots_in_range(self, unit_id: str, start: str, end: str) -> int:
        """Delete the unit's slots dated start..end inclusive; return the count removed."""
        ...


class InMemoryRepository:
    """
    Dictionary/list backed implementation of DutyDataAccess.

    Reads return copies of person records so callers cannot mutate stored
    scores except through update_person_score.
    """

    def __init__(
        self,
        units: Iterable[Unit] = (),
        personnel: Iterable[Person] = (),
        duty_types: Iterable[DutyType] = (),
        duty_values: Iterable[DutyValue] = (),
        requirements: Iterable[DutyRequirement] = (),
        qualifications: Iterable[Qualification] = (),
        non_availability: Iterable[NonAvailability] = (),
        slots: Iterable[DutySlot] = (),
    ):
        self._units: Dict[str, Unit] = {}
        self._personnel: Dict[str, Person] = {}
        self._duty_types: Dict[str, DutyType] = {}
        self._duty_values: Dict[str, DutyValue] = {}
        self._requirements: List[DutyRequirement] = []
        self._qualifications: Set[Tuple[str, str]] = set()
        self._non_availability: List[NonAvailability] = []
        self._slots: List[DutySlot] = []

        for u in units:
            self.add_unit(u)
        for p in personnel:
            self.add_person(p)
        for dt in duty_types:
            self.add_duty_type(dt)
        for dv in duty_values:
            self.set_duty_value(dv)
        for r in requirements:
            self.add_requirement(r.duty_type_id, r.required_qual_name)
        for q in qualifications:
            self.add_qualification(q.person_id, q.qual_name)
        for na in non_availability:
            self.add_non_availability(na)
        for s in slots:
            self._slots.append(s)

    # ---------- Population ----------

    def add_unit(self, unit: Unit) -> Unit:
        self._units[unit.id] = unit
        return unit

    def add_person(self, person: Person) -> Person:
        self._personnel[person.id] = person
        return person

    def add_duty_type(self, duty_type: DutyType) -> DutyType:
        self._duty_types[duty_type.id] = duty_type
        return duty_type

    def set_duty_value(self, value: DutyValue) -> DutyValue:
        self._duty_values[value.duty_type_id] = value
        return value

    def add_requirement(self, duty_type_id: str, qual_name: str) -> DutyRequirement:
        req = DutyRequirement(duty_type_id=duty_type_id, required_qual_name=qual_name)
        self._requirements.append(req)
        return req

    def add_qualification(self, person_id: str, qual_name: str) -> Qualification:
        self._qualifications.add((person_id, qual_name))
        return Qualification(person_id=person_id, qual_name=qual_name)

    def add_non_availability(self, record: NonAvailability) -> NonAvailability:
        self._non_availability.append(record)
        return record

    def add_slot(self, slot: DutySlot) -> DutySlot:
        """Add a historical slot without the double-booking check."""
        self._slots.append(slot)
        return slot

    # ---------- Read-only views ----------

    @property
    def units(self) -> List[Unit]:
        return list(self._units.values())

    @property
    def personnel(self) -> List[Person]:
        return [replace(p) for p in self._personnel.values()]

    @property
    def duty_types(self) -> List[DutyType]:
        return list(self._duty_types.values())

    @property
    def duty_values(self) -> List[DutyValue]:
        return list(self._duty_values.values())

    @property
    def requirements(self) -> List[DutyRequirement]:
        return list(self._requirements)

    @property
    def qualifications(self) -> List[Qualification]:
        return [Qualification(person_id=p, qual_name=q) for p, q in sorted(self._qualifications)]

    @property
    def non_availability(self) -> List[NonAvailability]:
        return list(self._non_availability)

    def get_person(self, person_id: str) -> Optional[Person]:
        person = self._personnel.get(person_id)
        return replace(person) if person else None

    def get_duty_type(self, duty_type_id: str) -> Optional[DutyType]:
        return self._duty_types.get(duty_type_id)

    def get_descendant_unit_ids(self, unit_id: str) -> List[str]:
        """IDs of the unit and all units below it, breadth-first, parent first."""
        children: Dict[Optional[str], List[str]] = {}
        for u in self._units.values():
            children.setdefault(u.parent_id, []).append(u.id)

        result: List[str] = []
        seen: Set[str] = set()
        queue = deque([unit_id])
        while queue:
            current = queue.popleft()
            if current in seen:
                continue
            seen.add(current)
            result.append(current)
            queue.extend(children.get(current, []))
        return result

    # ---------- DutyDataAccess ----------

    def get_unit(self, unit_id: str) -> Optional[Unit]:
        return self._units.get(unit_id)

    def get_active_duty_types_for_unit(self, unit_id: str) -> List[DutyType]:
        unit_ids = set(self.get_descendant_unit_ids(unit_id))
        return [dt for dt in self._duty_types.values() if dt.is_active and dt.unit_id in unit_ids]

    def get_personnel_for_unit(self, unit_id: str) -> List[Person]:
        unit_ids = set(self.get_descendant_unit_ids(unit_id))
        return [replace(p) for p in self._personnel.values() if p.unit_id in unit_ids]

    def get_qualification_requirements(self, duty_type_id: str) -> List[DutyRequirement]:
        return [r for r in self._requirements if r.duty_type_id == duty_type_id]

    def person_has_qualification(self, person_id: str, qual_name: str) -> bool:
        return (person_id, qual_name) in self._qualifications

    def get_active_non_availability(self, person_id: str, date: DateLike) -> Optional[NonAvailability]:
        day = normalize_date(date)
        for record in self._non_availability:
            if record.person_id == person_id and record.covers(day):
                return record
        return None

    def get_all_duty_slots(self) -> List[DutySlot]:
        return list(self._slots)

    def get_duty_value(self, duty_type_id: str) -> Optional[DutyValue]:
        return self._duty_values.get(duty_type_id)

    def create_duty_slot(self, slot: DutySlot) -> DutySlot:
        """
        Persist a new slot.

        Raises:
            ValueError: if the person already holds a live slot on that date.
        """
        if slot.person_id is not None:
            for existing in self._slots:
                if existing.status == SlotStatus.CANCELLED:
                    continue
                if existing.person_id == slot.person_id and existing.date == slot.date:
                    raise ValueError(
                        f"Person {slot.person_id} already assigned on {slot.date} (slot {existing.id})"
                    )
        self._slots.append(slot)
        return slot

    def update_person_score(self, person_id: str, new_score: float) -> None:
        if person_id not in self._personnel:
            raise KeyError(f"Unknown person: {person_id}")
        self._personnel[person_id].current_duty_score = float(new_score)

    def clear_slots_in_range(self, unit_id: str, start: DateLike, end: DateLike) -> int:
        start_s, end_s = normalize_date(start), normalize_date(end)
        unit_ids = set(self.get_descendant_unit_ids(unit_id))

        def _owned(slot: DutySlot) -> bool:
            dt = self._duty_types.get(slot.duty_type_id)
            return dt is not None and dt.unit_id in unit_ids

        kept = [s for s in self._slots if not (start_s <= s.date <= end_s and _owned(s))]
        removed = len(self._slots) - len(kept)
        self._slots = kept
        logger.debug(f"Cleared {removed} slots for unit {unit_id} in {start_s}..{end_s}")
        return removed
