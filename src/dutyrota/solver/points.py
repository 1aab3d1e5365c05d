"""Point value of a duty occurrence."""
from typing import Optional

from dutyrota.models.config import EngineConfig
from dutyrota.models.dates import DateLike
from dutyrota.models.duty import DutyValue
from dutyrota.solver.calendar import is_holiday, is_weekend


def calculate_points(
    day: DateLike,
    duty_value: Optional[DutyValue],
    config: Optional[EngineConfig] = None,
) -> float:
    """
    Points earned for one duty on ``day``.

    Holiday: base × holiday multiplier. Weekend: base × weekend multiplier.
    Otherwise the base weight. A holiday on a weekend only gets the holiday
    multiplier. Without a DutyValue the config defaults are used.
    """
    if duty_value is None:
        duty_value = (config or EngineConfig()).default_duty_value()

    if is_holiday(day):
        return duty_value.base_weight * duty_value.holiday_multiplier
    if is_weekend(day):
        return duty_value.base_weight * duty_value.weekend_multiplier
    return duty_value.base_weight
