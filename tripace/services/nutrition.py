"""Carbohydrate fuelling estimate for the bike and run legs."""

from __future__ import annotations

import math
from dataclasses import dataclass

from tripace.services.race_data import InvalidInputError
from tripace.services.timefmt import Duration, round_half_up

CARBS_PER_GEL = 25
CARBS_PER_HOUR_MIN = 60
CARBS_PER_HOUR_MAX = 120
CARBS_PER_HOUR_DEFAULT = 90


@dataclass(frozen=True)
class FuelingPlan:
    carbs_per_hour: int
    bike_carbs_g: int
    run_carbs_g: int
    bike_gels: int
    run_gels: int

    @property
    def total_carbs_g(self) -> int:
        return self.bike_carbs_g + self.run_carbs_g

    @property
    def total_gels(self) -> int:
        return self.bike_gels + self.run_gels


def _gels(carbs: int) -> int:
    return math.ceil(carbs / CARBS_PER_GEL) if carbs > 0 else 0


def fueling_plan(bike_time: Duration, run_time: Duration, carbs_per_hour: int = CARBS_PER_HOUR_DEFAULT) -> FuelingPlan:
    if not CARBS_PER_HOUR_MIN <= carbs_per_hour <= CARBS_PER_HOUR_MAX:
        raise InvalidInputError(
            f"carbs_per_hour must be within {CARBS_PER_HOUR_MIN}-{CARBS_PER_HOUR_MAX}, got {carbs_per_hour}"
        )
    bike_carbs = round_half_up(bike_time.total_seconds / 3600 * carbs_per_hour)
    run_carbs = round_half_up(run_time.total_seconds / 3600 * carbs_per_hour)
    return FuelingPlan(
        carbs_per_hour=carbs_per_hour,
        bike_carbs_g=bike_carbs,
        run_carbs_g=run_carbs,
        bike_gels=_gels(bike_carbs),
        run_gels=_gels(run_carbs),
    )
