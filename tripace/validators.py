"""Pydantic validation models for all user-facing data entry points.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from tripace.services.benchmarks import PRO_BENCHMARKS
from tripace.services.goal_distributor import SplitSet
from tripace.services.nutrition import CARBS_PER_HOUR_DEFAULT, CARBS_PER_HOUR_MAX, CARBS_PER_HOUR_MIN
from tripace.services.race_calculator import DEFAULT_T1, DEFAULT_T2
from tripace.services.race_data import CourseProfile, DistanceClass
from tripace.services.timefmt import Duration


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DurationInput(BaseModel):
    h: int = Field(default=0, ge=0)
    m: int = Field(default=0, ge=0)
    s: int = Field(default=0, ge=0)

    def to_duration(self) -> Duration:
        return Duration(hours=self.h, minutes=self.m, seconds=self.s)

    @classmethod
    def from_duration(cls, duration: Duration) -> DurationInput:
        return cls(**duration.as_dict())


class GoalTimeInput(_CamelModel):
    total_time: DurationInput
    distance: DistanceClass
    course_profile: CourseProfile = CourseProfile.ROLLING
    athlete_bias: float = Field(default=50, ge=0, le=100)


class PacePlanInput(_CamelModel):
    distance: DistanceClass
    bike_time: DurationInput
    run_time: DurationInput
    negative_split: bool = True


class RaceTimesInput(_CamelModel):
    distance: DistanceClass
    swim: DurationInput = Field(default_factory=DurationInput)
    t1: DurationInput = Field(default_factory=lambda: DurationInput.from_duration(DEFAULT_T1))
    bike: DurationInput = Field(default_factory=DurationInput)
    t2: DurationInput = Field(default_factory=lambda: DurationInput.from_duration(DEFAULT_T2))
    run: DurationInput = Field(default_factory=DurationInput)

    def to_splits(self) -> SplitSet:
        return SplitSet(
            swim=self.swim.to_duration(),
            t1=self.t1.to_duration(),
            bike=self.bike.to_duration(),
            t2=self.t2.to_duration(),
            run=self.run.to_duration(),
        )


class DisciplinePacesInput(_CamelModel):
    distance: DistanceClass
    swim_sec_per_100m: float = Field(default=0, ge=0, alias="swimSecPer100m")
    bike_kmh: float = Field(default=0, ge=0)
    run_sec_per_km: float = Field(default=0, ge=0)


class ProComparisonInput(RaceTimesInput):
    pro: str = "blummenfelt"

    @field_validator("pro")
    @classmethod
    def known_pro(cls, v):
        if v not in PRO_BENCHMARKS:
            raise ValueError(f"pro must be one of {sorted(PRO_BENCHMARKS)}")
        return v


class NutritionInput(_CamelModel):
    bike_time: DurationInput
    run_time: DurationInput
    carbs_per_hour: int = Field(default=CARBS_PER_HOUR_DEFAULT, ge=CARBS_PER_HOUR_MIN, le=CARBS_PER_HOUR_MAX)


class InsightInput(RaceTimesInput):
    pass
