"""Engine configuration."""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .duty import (
    DEFAULT_BASE_WEIGHT,
    DEFAULT_HOLIDAY_MULTIPLIER,
    DEFAULT_WEEKEND_MULTIPLIER,
    DutyValue,
)


class TieBreak(str, Enum):
    """How candidates with equal score and equal recent count are ordered."""
    RANDOM = "random"  # Uniform random, avoids favoring low IDs
    ID = "id"  # Deterministic, lowest person ID first


@dataclass
class EngineConfig:
    """Configuration for the duty allocation engine."""

    # Point defaults for duty types without a DutyValue
    default_base_weight: float = DEFAULT_BASE_WEIGHT
    default_weekend_multiplier: float = DEFAULT_WEEKEND_MULTIPLIER
    default_holiday_multiplier: float = DEFAULT_HOLIDAY_MULTIPLIER

    # Trailing window for the secondary fairness signal
    recent_window_days: int = 7

    # Request limits
    max_range_days: int = 90

    # Ranking
    tie_break: TieBreak = TieBreak.RANDOM
    seed: Optional[int] = None  # Only used by TieBreak.RANDOM

    def default_duty_value(self, duty_type_id: str = "") -> DutyValue:
        """DutyValue used when a duty type has none configured."""
        return DutyValue(
            duty_type_id=duty_type_id,
            base_weight=self.default_base_weight,
            weekend_multiplier=self.default_weekend_multiplier,
            holiday_multiplier=self.default_holiday_multiplier,
        )

    def to_dict(self) -> Dict:
        """Serialize to dictionary."""
        return {
            "default_base_weight": self.default_base_weight,
            "default_weekend_multiplier": self.default_weekend_multiplier,
            "default_holiday_multiplier": self.default_holiday_multiplier,
            "recent_window_days": self.recent_window_days,
            "max_range_days": self.max_range_days,
            "tie_break": self.tie_break.value,
            "seed": self.seed,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "EngineConfig":
        """Create from dictionary, ignoring unknown keys."""
        cfg = cls()
        for key, value in d.items():
            if hasattr(cfg, key):
                if key == "tie_break":
                    value = TieBreak(value) if value else TieBreak.RANDOM
                setattr(cfg, key, value)
        return cfg
