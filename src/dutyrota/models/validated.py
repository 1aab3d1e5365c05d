"""
Pydantic Validated Models
=========================
Strict validation for schedule requests arriving at the boundary
(CLI arguments, JSON payloads).

Usage:
    from dutyrota.models.validated import ValidatedScheduleRequest

    req = ValidatedScheduleRequest(unit_id="U1", start_date="2025-01-06", end_date="2025-01-12")
    request = req.to_request()

Note: the engine itself works with the ScheduleRequest dataclass.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .dates import normalize_date, parse_date
from .schedule import ScheduleRequest


class ValidatedScheduleRequest(BaseModel):
    """
    Pydantic-validated schedule request.

    Dates accept canonical strings or ISO-8601 timestamps and are stored
    in canonical YYYY-MM-DD form.
    """
    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    unit_id: str = Field(min_length=1, description="Target unit")
    start_date: str = Field(description="First date to schedule (inclusive)")
    end_date: str = Field(description="Last date to schedule (inclusive)")
    assigned_by: str = Field(default="system", min_length=1)
    clear_existing: bool = Field(default=False)
    preview: bool = Field(default=False)
    max_range_days: int = Field(default=90, ge=1, le=3660)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def validate_date(cls, v) -> str:
        """Normalize to canonical date strings."""
        return normalize_date(v)

    @model_validator(mode="after")
    def validate_range(self):
        """Cross-field validation of the date range."""
        start = parse_date(self.start_date)
        end = parse_date(self.end_date)
        if start > end:
            raise ValueError("start_date must be before or equal to end_date")
        if (end - start).days > self.max_range_days:
            raise ValueError(f"Date range cannot exceed {self.max_range_days} days")
        if self.preview and self.clear_existing:
            raise ValueError("clear_existing is not allowed in preview mode")
        return self

    def to_request(self) -> ScheduleRequest:
        """Convert to the dataclass used by the engine."""
        return ScheduleRequest(
            unit_id=self.unit_id,
            start_date=self.start_date,
            end_date=self.end_date,
            assigned_by=self.assigned_by,
            clear_existing=self.clear_existing,
        )
