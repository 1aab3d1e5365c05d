# dutyrota/io - Data access and CSV input/output
from .csv_loader import load_repository, save_personnel, save_repository, save_slots
from .repository import DutyDataAccess, InMemoryRepository

__all__ = [
    "DutyDataAccess",
    "InMemoryRepository",
    "load_repository",
    "save_repository",
    "save_slots",
    "save_personnel",
]
