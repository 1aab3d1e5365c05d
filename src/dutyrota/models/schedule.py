"""Schedule request and result models."""
from dataclasses import dataclass, field
from typing import Any, Dict, List

import pandas as pd

from .dates import DateLike, normalize_date
from .duty import DutySlot

SLOT_COLUMNS = ["id", "duty_type_id", "person_id", "date", "assigned_by", "points", "status", "created_at"]


@dataclass
class ScheduleRequest:
    """A request to allocate duties for one unit over an inclusive date range."""
    unit_id: str
    start_date: DateLike
    end_date: DateLike
    assigned_by: str = "system"
    clear_existing: bool = False  # Apply mode only

    def __post_init__(self):
        self.unit_id = str(self.unit_id).strip()
        self.start_date = normalize_date(self.start_date)
        self.end_date = normalize_date(self.end_date)
        self.assigned_by = str(self.assigned_by or "").strip()


@dataclass
class ScheduleResult:
    """Outcome of one allocation run (Apply or Preview)."""

    success: bool = True
    slots_created: int = 0
    slots_skipped: int = 0
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    slots: List[DutySlot] = field(default_factory=list)
    preview: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "success": self.success,
            "preview": self.preview,
            "slots_created": self.slots_created,
            "slots_skipped": self.slots_skipped,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "slots": [s.to_dict() for s in self.slots],
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Convert created slots to a DataFrame."""
        if not self.slots:
            return pd.DataFrame(columns=SLOT_COLUMNS)
        rows = [{k: v for k, v in s.to_dict().items() if k in SLOT_COLUMNS} for s in self.slots]
        return pd.DataFrame(rows, columns=SLOT_COLUMNS)

    def points_by_person(self) -> pd.DataFrame:
        """Slots and points earned per person in this run."""
        df = self.to_dataframe()
        if df.empty:
            return pd.DataFrame(columns=["person_id", "slots", "points"])
        stats = df.groupby("person_id").agg(slots=("id", "count"), points=("points", "sum"))
        return stats.reset_index().sort_values("person_id", ignore_index=True)

    def summary(self) -> Dict[str, Any]:
        """Get summary dictionary for display."""
        return {
            "success": self.success,
            "preview": self.preview,
            "created": self.slots_created,
            "skipped": self.slots_skipped,
            "errors": len(self.errors),
            "warnings": len(self.warnings),
        }
