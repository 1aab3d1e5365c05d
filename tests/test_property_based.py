"""
Property-Based Tests with Hypothesis
====================================
Invariants that must hold for arbitrary rosters and date ranges.
"""
import copy
from collections import Counter

from hypothesis import given, settings, strategies as st

from dutyrota.io.repository import InMemoryRepository
from dutyrota.models.config import EngineConfig, TieBreak
from dutyrota.models.duty import DutyFilter, DutyType, NonAvailability
from dutyrota.models.person import Person, Unit
from dutyrota.models.schedule import ScheduleRequest
from dutyrota.solver.allocator import generate_schedule, preview_schedule
from dutyrota.solver.calendar import add_days, generate_dates
from dutyrota.solver.context import SchedulingContext
from dutyrota.solver.eligibility import ineligibility_reason
from dutyrota.solver.points import calculate_points

RANKS = ["PVT", "CPL", "SGT", "SSG"]
QUALS = ["CPR", "Armory"]
STATUSES = ["approved", "pending", "rejected"]
UNITS = [Unit(id="U1"), Unit(id="U1-A", parent_id="U1"), Unit(id="U1-B", parent_id="U1")]

scores = st.integers(min_value=0, max_value=20).map(lambda n: n / 2)


@st.composite
def rosters(draw, filters=True):
    """A repository for unit U1 plus a request over up to two weeks."""
    n_people = draw(st.integers(min_value=1, max_value=6))
    people = [
        Person(
            id=f"P{i}",
            unit_id=draw(st.sampled_from(["U1", "U1-A", "U1-B"])),
            rank=draw(st.sampled_from(RANKS)),
            current_duty_score=draw(scores),
        )
        for i in range(n_people)
    ]

    duty_types = []
    for i in range(draw(st.integers(min_value=1, max_value=3))):
        rank_filter = DutyFilter()
        if filters and draw(st.booleans()):
            rank_filter = DutyFilter(
                draw(st.sampled_from(["include", "exclude"])),
                draw(st.lists(st.sampled_from(RANKS), min_size=1, max_size=2, unique=True)),
            )
        duty_types.append(DutyType(
            id=f"DT{i}",
            unit_id=draw(st.sampled_from(["U1", "U1", "U1-A"])),
            name=f"Duty {i}",
            slots_needed=draw(st.integers(min_value=1, max_value=3)),
            rank_filter=rank_filter,
        ))

    start = add_days("2025-01-01", draw(st.integers(min_value=0, max_value=360)))
    end = add_days(start, draw(st.integers(min_value=0, max_value=13)))

    repo = InMemoryRepository(units=UNITS, personnel=people, duty_types=duty_types)

    if filters:
        for dt in duty_types:
            for qual in draw(st.lists(st.sampled_from(QUALS), max_size=1)):
                repo.add_requirement(dt.id, qual)
        for p in people:
            for qual in draw(st.lists(st.sampled_from(QUALS), max_size=2, unique=True)):
                repo.add_qualification(p.id, qual)
        for i, p in enumerate(people):
            if draw(st.booleans()):
                na_start = add_days(start, draw(st.integers(min_value=-3, max_value=10)))
                repo.add_non_availability(NonAvailability(
                    id=f"NA{i}",
                    person_id=p.id,
                    start_date=na_start,
                    end_date=add_days(na_start, draw(st.integers(min_value=0, max_value=5))),
                    status=draw(st.sampled_from(STATUSES)),
                ))

    request = ScheduleRequest(unit_id="U1", start_date=start, end_date=end, assigned_by="admin")
    return repo, request


CONFIG = EngineConfig(tie_break=TieBreak.ID)


def _snapshot(repo):
    return (
        [p.to_dict() for p in repo.personnel],
        [s.to_dict() for s in repo.get_all_duty_slots()],
    )


class TestAllocationProperties:

    @given(rosters())
    @settings(max_examples=30, deadline=None)
    def test_no_double_booking(self, data):
        repo, request = data
        generate_schedule(repo, request, CONFIG)

        per_day = Counter((s.date, s.person_id) for s in repo.get_all_duty_slots())
        assert all(n == 1 for n in per_day.values())

    @given(rosters())
    @settings(max_examples=30, deadline=None)
    def test_slot_ceiling_and_accounting(self, data):
        repo, request = data
        result = generate_schedule(repo, request, CONFIG)

        needed = {dt.id: dt.slots_needed for dt in repo.duty_types}
        per_slot = Counter((s.date, s.duty_type_id) for s in result.slots)
        assert all(n <= needed[dt_id] for (_, dt_id), n in per_slot.items())

        days = len(list(generate_dates(request.start_date, request.end_date)))
        assert result.slots_created + result.slots_skipped == days * sum(needed.values())
        assert result.slots_skipped == len(result.warnings)

    @given(rosters())
    @settings(max_examples=30, deadline=None)
    def test_assignments_respect_eligibility(self, data):
        repo, request = data
        people = {p.id: p for p in repo.personnel}
        result = generate_schedule(repo, request, CONFIG)

        empty = SchedulingContext.build([])
        for slot in result.slots:
            person = people[slot.person_id]
            duty_type = repo.get_duty_type(slot.duty_type_id)
            assert person.unit_id in repo.get_descendant_unit_ids(duty_type.unit_id)
            assert ineligibility_reason(person, duty_type, slot.date, empty, repo) is None

    @given(rosters())
    @settings(max_examples=30, deadline=None)
    def test_scores_grow_by_points_earned(self, data):
        repo, request = data
        before = {p.id: p.current_duty_score for p in repo.personnel}
        result = generate_schedule(repo, request, CONFIG)

        earned = Counter()
        for slot in result.slots:
            earned[slot.person_id] += slot.points
            dv = repo.get_duty_value(slot.duty_type_id)
            assert slot.points == calculate_points(slot.date, dv, CONFIG)
        for p in repo.personnel:
            assert abs(p.current_duty_score - before[p.id] - earned[p.id]) < 1e-9

    @given(rosters())
    @settings(max_examples=30, deadline=None)
    def test_preview_is_isolated_and_matches_apply(self, data):
        repo, request = data
        twin = copy.deepcopy(repo)
        before = _snapshot(repo)

        preview = preview_schedule(repo, request, CONFIG)
        applied = generate_schedule(twin, request, CONFIG)

        assert _snapshot(repo) == before
        assert [(s.date, s.duty_type_id, s.person_id) for s in preview.slots] == \
            [(s.date, s.duty_type_id, s.person_id) for s in applied.slots]


class TestFairnessProperties:

    @given(rosters(filters=False))
    @settings(max_examples=30, deadline=None)
    def test_first_pick_has_lowest_score(self, data):
        repo, request = data
        request.end_date = request.start_date
        first_type = repo.duty_types[0]
        pool = repo.get_personnel_for_unit(first_type.unit_id)
        result = generate_schedule(repo, request, CONFIG)

        picks = [s for s in result.slots if s.duty_type_id == first_type.id]
        if pool:
            lowest = min(p.current_duty_score for p in pool)
            chosen = next(p for p in pool if p.id == picks[0].person_id)
            assert chosen.current_duty_score == lowest

    @given(rosters(filters=False))
    @settings(max_examples=30, deadline=None)
    def test_pick_order_is_non_decreasing_in_score(self, data):
        repo, request = data
        request.end_date = request.start_date
        first_type = repo.duty_types[0]
        pool = {p.id: p.current_duty_score for p in repo.get_personnel_for_unit(first_type.unit_id)}
        result = generate_schedule(repo, request, CONFIG)

        picked = [pool[s.person_id] for s in result.slots if s.duty_type_id == first_type.id]
        assert picked == sorted(picked)
