"""Person and unit models for the duty roster."""
import math
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Unit:
    """An organizational unit. Units form a forest through parent_id."""

    id: str
    name: str = ""
    parent_id: Optional[str] = None

    def __post_init__(self):
        self.id = str(self.id).strip()
        self.name = str(self.name).strip() or self.id
        if self.parent_id is not None:
            self.parent_id = str(self.parent_id).strip() or None

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "parent_id": self.parent_id}

    @classmethod
    def from_dict(cls, d: dict) -> "Unit":
        return cls(
            id=d.get("id", ""),
            name=d.get("name", ""),
            parent_id=d.get("parent_id") or None,
        )


@dataclass
class Person:
    """A member of the roster who can be assigned to duties."""

    id: str
    unit_id: str
    rank: str = ""
    current_duty_score: float = 0.0

    # Display only
    first_name: str = ""
    last_name: str = ""

    service_id: str = field(default="", compare=False)

    def __post_init__(self):
        """Validate and normalize fields."""
        self.id = str(self.id).strip()
        self.unit_id = str(self.unit_id).strip()
        self.rank = str(self.rank).strip()
        self.first_name = str(self.first_name).strip()
        self.last_name = str(self.last_name).strip()
        try:
            self.current_duty_score = float(self.current_duty_score)
        except (TypeError, ValueError):
            self.current_duty_score = 0.0
        # NaN would break the ranking order
        if not math.isfinite(self.current_duty_score):
            raise ValueError(f"current_duty_score must be finite for person {self.id!r}")

    @property
    def display_name(self) -> str:
        """Rank and last name, e.g. "SGT SMITH"."""
        parts = [self.rank.upper(), self.last_name.upper()]
        name = " ".join(p for p in parts if p)
        return name or self.id

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "unit_id": self.unit_id,
            "rank": self.rank,
            "current_duty_score": self.current_duty_score,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "service_id": self.service_id,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Person":
        """Create from dictionary."""
        return cls(
            id=d.get("id", ""),
            unit_id=d.get("unit_id", ""),
            rank=d.get("rank", ""),
            current_duty_score=d.get("current_duty_score", 0.0),
            first_name=d.get("first_name", ""),
            last_name=d.get("last_name", ""),
            service_id=str(d.get("service_id", "") or ""),
        )
