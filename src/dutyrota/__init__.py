"""Duty Rota: fair duty allocation for roster administrators."""
from dutyrota.io.repository import DutyDataAccess, InMemoryRepository
from dutyrota.models import EngineConfig, ScheduleRequest, ScheduleResult, TieBreak
from dutyrota.solver.allocator import (
    DutyAllocator,
    ScheduleRequestError,
    generate_schedule,
    preview_schedule,
)

__version__ = "0.1.0"

__all__ = [
    "DutyAllocator",
    "DutyDataAccess",
    "InMemoryRepository",
    "EngineConfig",
    "TieBreak",
    "ScheduleRequest",
    "ScheduleResult",
    "ScheduleRequestError",
    "generate_schedule",
    "preview_schedule",
]
