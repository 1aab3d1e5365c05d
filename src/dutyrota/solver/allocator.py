"""
Allocation Driver
=================
Greedy per-slot duty allocation over a date range.

    for date in range (ascending):
        for duty type (stable order):
            for each unfilled slot position:
                eligible → ranked → take the first → commit

Apply and Preview run the same loop; they differ only in the commit
strategy. Apply writes each slot and score to the data store as soon as it
is chosen (best-effort: a failure mid-run leaves earlier commits in place).
Preview writes nothing.
"""
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Dict, List, Optional, Set

from dutyrota.io.repository import DutyDataAccess
from dutyrota.models.config import EngineConfig
from dutyrota.models.dates import parse_date
from dutyrota.models.duty import DutyRequirement, DutySlot, DutyType, SlotStatus
from dutyrota.models.person import Person
from dutyrota.models.schedule import ScheduleRequest, ScheduleResult
from dutyrota.solver.calendar import generate_dates
from dutyrota.solver.context import SchedulingContext
from dutyrota.solver.eligibility import is_eligible
from dutyrota.solver.points import calculate_points
from dutyrota.solver.ranking import TieBreaker, make_tie_breaker, rank_candidates
from dutyrota.utils.logging_setup import RunLogger, get_logger
from dutyrota.utils.structured_logging import bound_context, get_structured_logger

logger = get_logger("dutyrota.solver.allocator")
slog = get_structured_logger("dutyrota.solver.allocator")

NO_DUTY_TYPES_WARNING = "No active duty types found for this unit"
NOTHING_FILLED_ERROR = "Could not fill any duty slots - check personnel availability and qualifications"

CancelCheck = Callable[[], bool]


class ScheduleRequestError(ValueError):
    """A malformed request, rejected before anything is read or written."""


class CommitStrategy(ABC):
    """How a chosen assignment is committed."""

    preview: bool = False

    @abstractmethod
    def new_slot_id(self) -> str:
        pass

    @abstractmethod
    def commit_slot(self, slot: DutySlot) -> None:
        pass

    @abstractmethod
    def commit_score(self, person_id: str, new_score: float) -> None:
        pass

    def excluded_on(self, day: str) -> Optional[Set[str]]:
        """Extra person IDs to exclude on ``day`` beyond the context."""
        return None


class PersistingCommit(CommitStrategy):
    """Apply mode: write slots and scores through immediately."""

    def __init__(self, repo: DutyDataAccess):
        self.repo = repo

    def new_slot_id(self) -> str:
        return str(uuid.uuid4())

    def commit_slot(self, slot: DutySlot) -> None:
        self.repo.create_duty_slot(slot)

    def commit_score(self, person_id: str, new_score: float) -> None:
        self.repo.update_person_score(person_id, new_score)


class PreviewCommit(CommitStrategy):
    """Preview mode: remember assignments locally, persist nothing."""

    preview = True

    def __init__(self):
        self.assigned: Dict[str, Set[str]] = {}

    def new_slot_id(self) -> str:
        return f"preview-{uuid.uuid4()}"

    def commit_slot(self, slot: DutySlot) -> None:
        self.assigned.setdefault(slot.date, set()).add(slot.person_id)

    def commit_score(self, person_id: str, new_score: float) -> None:
        pass

    def excluded_on(self, day: str) -> Optional[Set[str]]:
        return self.assigned.get(day)


class DutyAllocator:
    """
    Fair duty allocation engine over a data-access handle.

    One allocator may serve many runs; each run builds its own
    SchedulingContext and score accumulator.
    """

    def __init__(self, repo: DutyDataAccess, config: Optional[EngineConfig] = None):
        self.repo = repo
        self.config = config or EngineConfig()

    # ---------- Entry points ----------

    def generate_schedule(
        self,
        request: ScheduleRequest,
        should_cancel: Optional[CancelCheck] = None,
    ) -> ScheduleResult:
        """Allocate and persist duty slots (Apply mode)."""
        self.validate_request(request)
        result = ScheduleResult()

        if request.clear_existing:
            cleared = self.repo.clear_slots_in_range(request.unit_id, request.start_date, request.end_date)
            if cleared > 0:
                result.warnings.append(f"Cleared {cleared} existing duty slots")
                logger.warning(f"Cleared {cleared} existing duty slots for unit {request.unit_id}")

        return self._run(request, PersistingCommit(self.repo), result, should_cancel)

    def preview_schedule(
        self,
        request: ScheduleRequest,
        should_cancel: Optional[CancelCheck] = None,
    ) -> ScheduleResult:
        """Forecast the allocation without writing anything (Preview mode)."""
        self.validate_request(request)
        if request.clear_existing:
            logger.debug("clear_existing ignored in preview mode")
        return self._run(request, PreviewCommit(), ScheduleResult(preview=True), should_cancel)

    def validate_request(self, request: ScheduleRequest) -> None:
        """
        Reject malformed requests.

        Raises:
            ScheduleRequestError: unknown unit, inverted or oversized range,
                missing assigner.
        """
        if not request.unit_id or self.repo.get_unit(request.unit_id) is None:
            raise ScheduleRequestError(f"Unit not found: {request.unit_id!r}")
        start = parse_date(request.start_date)
        end = parse_date(request.end_date)
        if start > end:
            raise ScheduleRequestError("start_date must be before or equal to end_date")
        if (end - start).days > self.config.max_range_days:
            raise ScheduleRequestError(f"Date range cannot exceed {self.config.max_range_days} days")
        if not request.assigned_by:
            raise ScheduleRequestError("assigned_by is required")

    # ---------- Core loop ----------

    def _run(
        self,
        request: ScheduleRequest,
        commit: CommitStrategy,
        result: ScheduleResult,
        should_cancel: Optional[CancelCheck],
    ) -> ScheduleResult:
        mode = "preview" if commit.preview else "apply"
        run_id = uuid.uuid4().hex[:8]
        rlog = RunLogger("dutyrota.solver.allocator")

        with bound_context(run_id=run_id, unit_id=request.unit_id, mode=mode):
            duty_types = self.repo.get_active_duty_types_for_unit(request.unit_id)
            if not duty_types:
                result.warnings.append(NO_DUTY_TYPES_WARNING)
                slog.info("run_skipped", reason="no_active_duty_types")
                return result

            rlog.phase(f"Duty allocation ({mode}) {request.start_date} → {request.end_date}")
            slog.info(
                "run_started",
                start=request.start_date,
                end=request.end_date,
                duty_types=len(duty_types),
            )

            rlog.step("Indexing existing slots")
            ctx = SchedulingContext.build(self.repo.get_all_duty_slots())
            rlog.detail("dates indexed", len(ctx.slots_by_date))
            rlog.detail("duty types", ", ".join(dt.name for dt in duty_types))
            tie_break = make_tie_breaker(self.config)
            scores: Dict[str, float] = {}
            requirements = {dt.id: self.repo.get_qualification_requirements(dt.id) for dt in duty_types}
            values = {dt.id: self.repo.get_duty_value(dt.id) for dt in duty_types}
            personnel: Dict[str, List[Person]] = {}

            for day in generate_dates(request.start_date, request.end_date):
                if should_cancel is not None and should_cancel():
                    result.warnings.append(f"Scheduling cancelled before {day}")
                    slog.warning("run_cancelled", before=day, created=result.slots_created)
                    break

                created_before = result.slots_created
                with rlog.scope(day, summary=lambda: f"{result.slots_created - created_before} created"):
                    for duty_type in duty_types:
                        existing = ctx.count_existing_slots_for_duty_type(duty_type.id, day)
                        if duty_type.slots_needed - existing <= 0:
                            continue

                        points = calculate_points(day, values[duty_type.id], self.config)
                        if duty_type.unit_id not in personnel:
                            personnel[duty_type.unit_id] = self.repo.get_personnel_for_unit(duty_type.unit_id)

                        for position in range(existing, duty_type.slots_needed):
                            chosen = self._pick(
                                duty_type, day, personnel[duty_type.unit_id], ctx, commit,
                                requirements[duty_type.id], scores, tie_break,
                            )
                            if chosen is None:
                                msg = f"No eligible personnel for {duty_type.name} on {day} (slot {position + 1})"
                                result.warnings.append(msg)
                                result.slots_skipped += 1
                                logger.warning(msg)
                                continue

                            slot = DutySlot(
                                id=commit.new_slot_id(),
                                duty_type_id=duty_type.id,
                                person_id=chosen.id,
                                date=day,
                                assigned_by=request.assigned_by,
                                points=points,
                                status=SlotStatus.SCHEDULED,
                                created_at=datetime.now(),
                            )
                            commit.commit_slot(slot)
                            ctx.record_assignment(chosen.id, day)
                            ctx.record_slot(slot)

                            new_score = scores.get(chosen.id, chosen.current_duty_score) + points
                            scores[chosen.id] = new_score
                            commit.commit_score(chosen.id, new_score)

                            result.slots.append(slot)
                            result.slots_created += 1
                            logger.debug(
                                f"{day} {duty_type.name} #{position + 1} → {chosen.id} "
                                f"(+{points:g}, score {new_score:g})"
                            )

            if result.slots_created == 0 and result.slots_skipped > 0:
                result.success = False
                result.errors.append(NOTHING_FILLED_ERROR)
                logger.error(NOTHING_FILLED_ERROR)

            slog.info(
                "run_finished",
                success=result.success,
                created=result.slots_created,
                skipped=result.slots_skipped,
            )
        return result

    def _pick(
        self,
        duty_type: DutyType,
        day: str,
        candidates: List[Person],
        ctx: SchedulingContext,
        commit: CommitStrategy,
        requirements: List[DutyRequirement],
        scores: Dict[str, float],
        tie_break: TieBreaker,
    ) -> Optional[Person]:
        """Best-ranked eligible candidate for one slot, or None."""
        excluded = commit.excluded_on(day)
        eligible = [
            p for p in candidates
            if is_eligible(p, duty_type, day, ctx, self.repo,
                           extra_excluded_ids=excluded, requirements=requirements)
        ]
        if not eligible:
            return None
        ranked = rank_candidates(
            eligible,
            score_of=lambda p: scores.get(p.id, p.current_duty_score),
            recent_count_of=lambda p: ctx.count_recent_duties(p.id, day, self.config.recent_window_days),
            tie_break=tie_break,
        )
        return ranked[0]


def generate_schedule(
    repo: DutyDataAccess,
    request: ScheduleRequest,
    config: Optional[EngineConfig] = None,
    should_cancel: Optional[CancelCheck] = None,
) -> ScheduleResult:
    """Apply mode: allocate and persist duty slots for the request."""
    return DutyAllocator(repo, config).generate_schedule(request, should_cancel)


def preview_schedule(
    repo: DutyDataAccess,
    request: ScheduleRequest,
    config: Optional[EngineConfig] = None,
    should_cancel: Optional[CancelCheck] = None,
) -> ScheduleResult:
    """Preview mode: the same allocation, with nothing persisted."""
    return DutyAllocator(repo, config).preview_schedule(request, should_cancel)
