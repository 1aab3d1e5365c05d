"""
Eligibility Filter
==================
Pass/fail decision for one (person, duty type, date). All checks must pass:

    1. availability     no approved non-availability covering the date
    2. same_day         not already on any duty that date (context or extra set)
    3. qualifications   holds every qualification the duty type requires
    4. rank_filter      include/exclude on the person's rank
    5. section_filter   include/exclude on the person's unit
"""
from typing import AbstractSet, Iterable, List, Optional, Sequence

from dutyrota.io.repository import DutyDataAccess
from dutyrota.models.duty import DutyFilter, DutyRequirement, DutyType, FilterMode
from dutyrota.models.person import Person
from dutyrota.solver.context import SchedulingContext
from dutyrota.utils.logging_setup import get_logger, log_check

logger = get_logger("dutyrota.solver.eligibility")


def matches_filter(mode: Optional[FilterMode], values: Optional[Sequence[str]], value: str) -> bool:
    """Include/exclude match. No mode or no values passes everyone."""
    return DutyFilter(mode=mode, values=list(values or [])).matches(value)


def meets_requirements(
    person_id: str,
    requirements: Iterable[DutyRequirement],
    repo: DutyDataAccess,
) -> bool:
    """True if the person holds every required qualification (vacuously true for none)."""
    return all(repo.person_has_qualification(person_id, r.required_qual_name) for r in requirements)


def ineligibility_reason(
    person: Person,
    duty_type: DutyType,
    day: str,
    ctx: SchedulingContext,
    repo: DutyDataAccess,
    extra_excluded_ids: Optional[AbstractSet[str]] = None,
    requirements: Optional[List[DutyRequirement]] = None,
) -> Optional[str]:
    """
    Name of the first failed check, or None if the person is eligible.

    ``requirements`` may be passed in when the caller has already fetched
    them for the duty type.
    """
    if repo.get_active_non_availability(person.id, day) is not None:
        return "availability"

    if ctx.is_assigned_on_date(person.id, day):
        return "same_day"
    if extra_excluded_ids and person.id in extra_excluded_ids:
        return "same_day"

    if requirements is None:
        requirements = repo.get_qualification_requirements(duty_type.id)
    if not meets_requirements(person.id, requirements, repo):
        return "qualifications"

    if not duty_type.rank_filter.matches(person.rank):
        return "rank_filter"

    if not duty_type.section_filter.matches(person.unit_id):
        return "section_filter"

    return None


def is_eligible(
    person: Person,
    duty_type: DutyType,
    day: str,
    ctx: SchedulingContext,
    repo: DutyDataAccess,
    extra_excluded_ids: Optional[AbstractSet[str]] = None,
    requirements: Optional[List[DutyRequirement]] = None,
) -> bool:
    """True if the person passes all five eligibility checks."""
    reason = ineligibility_reason(
        person, duty_type, day, ctx, repo,
        extra_excluded_ids=extra_excluded_ids,
        requirements=requirements,
    )
    log_check(
        logger,
        f"{person.id} → {duty_type.name} {day}",
        reason is None,
        f"failed {reason}" if reason else "",
    )
    return reason is None
