"""CSV loading and saving for roster data."""
import math
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from dutyrota.io.repository import InMemoryRepository
from dutyrota.models.duty import (
    DutyFilter,
    DutySlot,
    DutyType,
    DutyValue,
    NonAvailability,
)
from dutyrota.models.person import Person, Unit
from dutyrota.models.schedule import ScheduleResult
from dutyrota.utils.logging_setup import get_logger, log_function_call

logger = get_logger("dutyrota.io.csv_loader")

PathLike = Union[str, Path]

# file name -> required columns
REQUIRED_FILES: Dict[str, List[str]] = {
    "units.csv": ["id"],
    "personnel.csv": ["id", "unit_id"],
    "duty_types.csv": ["id", "unit_id", "name"],
}
OPTIONAL_FILES: Dict[str, List[str]] = {
    "duty_values.csv": ["duty_type_id"],
    "requirements.csv": ["duty_type_id", "required_qual_name"],
    "qualifications.csv": ["person_id", "qual_name"],
    "non_availability.csv": ["person_id", "start_date", "end_date"],
    "duty_slots.csv": ["duty_type_id", "date"],
}

PERSONNEL_COLUMNS = ["id", "unit_id", "rank", "current_duty_score", "first_name", "last_name", "service_id"]

VALUE_SEPARATOR = "|"


def _safe_int(value, default: int = 0) -> int:
    """Safely convert value to int."""
    try:
        return int(float(value))
    except (ValueError, TypeError):
        return default


def _safe_float(value, default: float = 0.0) -> float:
    try:
        result = float(value)
    except (ValueError, TypeError):
        return default
    return result if math.isfinite(result) else default


def _safe_datetime(value) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(str(value).strip())
    except ValueError:
        return None


def _safe_bool(value, default: bool = False) -> bool:
    """Safely convert value to bool."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if not text:
            return default
        return text in ("1", "true", "yes", "y")
    return default


def _split_values(value) -> List[str]:
    return [v.strip() for v in str(value or "").split(VALUE_SEPARATOR) if v.strip()]


def _read(path: Path, required: List[str]) -> pd.DataFrame:
    df = pd.read_csv(path, dtype=str, keep_default_na=False).fillna("")
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"{path.name} must have columns: {', '.join(missing)}")
    return df


def _rows(df: pd.DataFrame):
    for _, row in df.iterrows():
        yield {k: (v.strip() if isinstance(v, str) else v) for k, v in row.to_dict().items()}


@log_function_call
def load_repository(directory: PathLike) -> InMemoryRepository:
    """
    Load a roster from a directory of CSV files.

    units.csv, personnel.csv and duty_types.csv are required; the other
    files are read when present.

    Raises:
        FileNotFoundError: a required file is missing
        ValueError: a file lacks a required column, or a row holds a value
            the models reject (non-finite score, slots_needed below 1)
    """
    base = Path(directory)
    frames: Dict[str, pd.DataFrame] = {}
    for name, cols in REQUIRED_FILES.items():
        path = base / name
        if not path.exists():
            raise FileNotFoundError(f"Missing required file: {path}")
        frames[name] = _read(path, cols)
    for name, cols in OPTIONAL_FILES.items():
        path = base / name
        if path.exists():
            frames[name] = _read(path, cols)

    repo = InMemoryRepository()

    for row in _rows(frames["units.csv"]):
        if row["id"]:
            repo.add_unit(Unit(id=row["id"], name=row.get("name", ""), parent_id=row.get("parent_id") or None))

    for row in _rows(frames["personnel.csv"]):
        if not row["id"]:
            continue
        repo.add_person(Person(
            id=row["id"],
            unit_id=row["unit_id"],
            rank=row.get("rank", ""),
            current_duty_score=row.get("current_duty_score") or 0.0,
            first_name=row.get("first_name", ""),
            last_name=row.get("last_name", ""),
            service_id=row.get("service_id", ""),
        ))

    for row in _rows(frames["duty_types.csv"]):
        if not row["id"]:
            continue
        repo.add_duty_type(DutyType(
            id=row["id"],
            unit_id=row["unit_id"],
            name=row["name"],
            slots_needed=_safe_int(row.get("slots_needed"), 1),
            is_active=_safe_bool(row.get("is_active"), True),
            description=row.get("description", ""),
            rank_filter=DutyFilter(row.get("rank_filter_mode"), _split_values(row.get("rank_filter_values"))),
            section_filter=DutyFilter(
                row.get("section_filter_mode"), _split_values(row.get("section_filter_values"))
            ),
        ))

    defaults = DutyValue(duty_type_id="")
    for row in _rows(frames.get("duty_values.csv", pd.DataFrame())):
        repo.set_duty_value(DutyValue(
            duty_type_id=row["duty_type_id"],
            base_weight=_safe_float(row.get("base_weight"), defaults.base_weight),
            weekend_multiplier=_safe_float(row.get("weekend_multiplier"), defaults.weekend_multiplier),
            holiday_multiplier=_safe_float(row.get("holiday_multiplier"), defaults.holiday_multiplier),
        ))

    for row in _rows(frames.get("requirements.csv", pd.DataFrame())):
        repo.add_requirement(row["duty_type_id"], row["required_qual_name"])

    for row in _rows(frames.get("qualifications.csv", pd.DataFrame())):
        repo.add_qualification(row["person_id"], row["qual_name"])

    for idx, row in enumerate(_rows(frames.get("non_availability.csv", pd.DataFrame()))):
        repo.add_non_availability(NonAvailability(
            id=row.get("id") or f"na-{idx}",
            person_id=row["person_id"],
            start_date=row["start_date"],
            end_date=row["end_date"],
            reason=row.get("reason", ""),
            status=row.get("status") or "approved",
        ))

    for idx, row in enumerate(_rows(frames.get("duty_slots.csv", pd.DataFrame()))):
        repo.add_slot(DutySlot(
            id=row.get("id") or f"slot-{idx}",
            duty_type_id=row["duty_type_id"],
            person_id=row.get("person_id") or None,
            date=row["date"],
            assigned_by=row.get("assigned_by", ""),
            points=_safe_float(row.get("points"), 0.0),
            status=row.get("status") or "scheduled",
            created_at=_safe_datetime(row.get("created_at")),
        ))

    logger.info(
        f"Loaded roster from {base}: {len(repo.units)} units, {len(repo.personnel)} personnel, "
        f"{len(repo.duty_types)} duty types, {len(repo.get_all_duty_slots())} slots"
    )
    return repo


def slots_to_dataframe(slots: List[DutySlot]) -> pd.DataFrame:
    """Convert slots to a DataFrame with the duty_slots.csv columns."""
    return ScheduleResult(slots=list(slots)).to_dataframe()


def save_slots(slots: List[DutySlot], path: PathLike) -> None:
    """Save slots to a CSV file."""
    slots_to_dataframe(slots).to_csv(path, index=False)


def save_personnel(people: List[Person], path: PathLike) -> None:
    """
    Save personnel (with current scores) to a CSV file.

    When the file already exists only ``current_duty_score`` is updated in
    place; columns the engine does not know about are kept as they were.
    People missing from the file are appended.
    """
    path = Path(path)
    current = pd.DataFrame([p.to_dict() for p in people], columns=PERSONNEL_COLUMNS)
    if not path.exists():
        current.to_csv(path, index=False)
        return

    existing = pd.read_csv(path, dtype=str, keep_default_na=False)
    if "current_duty_score" not in existing.columns:
        existing["current_duty_score"] = ""
    scores = dict(zip(current["id"], current["current_duty_score"]))
    ids = existing["id"].str.strip()
    known = ids.isin(list(scores))
    existing.loc[known, "current_duty_score"] = ids[known].map(scores).map(str)

    added = current[~current["id"].isin(set(ids))].astype(str)
    merged = pd.concat([existing, added], ignore_index=True).fillna("")
    merged.to_csv(path, index=False)


def save_repository(repo: InMemoryRepository, directory: PathLike) -> None:
    """Write back the state an Apply run changes: personnel scores and slots."""
    base = Path(directory)
    save_personnel(repo.personnel, base / "personnel.csv")
    save_slots(repo.get_all_duty_slots(), base / "duty_slots.csv")
