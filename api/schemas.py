from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tripace.services.benchmarks import BucketPosition, ProComparison
from tripace.services.goal_distributor import SplitSet
from tripace.services.nutrition import FuelingPlan
from tripace.services.pace_planner import PacePlan, PaceSegment
from tripace.services.race_calculator import DerivedPaces
from tripace.services.timefmt import Duration


class CamelOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TimeOut(BaseModel):
    h: int
    m: int
    s: int

    @classmethod
    def from_duration(cls, d: Duration) -> TimeOut:
        return cls(**d.as_dict())


class SplitsOut(CamelOut):
    swim_time: TimeOut
    t1_time: TimeOut
    bike_time: TimeOut
    t2_time: TimeOut
    run_time: TimeOut
    total_seconds: int

    @classmethod
    def from_splits(cls, splits: SplitSet, **extra) -> SplitsOut:
        return cls(
            **extra,
            swim_time=TimeOut.from_duration(splits.swim),
            t1_time=TimeOut.from_duration(splits.t1),
            bike_time=TimeOut.from_duration(splits.bike),
            t2_time=TimeOut.from_duration(splits.t2),
            run_time=TimeOut.from_duration(splits.run),
            total_seconds=splits.total_seconds,
        )


class GoalTimeOut(SplitsOut):
    strategy: str


class SegmentOut(CamelOut):
    segment: str
    target_time: str
    target_pace: str
    tip: str

    @classmethod
    def from_segment(cls, seg: PaceSegment) -> SegmentOut:
        return cls(segment=seg.segment, target_time=seg.target_time, target_pace=seg.target_pace, tip=seg.tip)


class PacePlanOut(CamelOut):
    bike_plan: list[SegmentOut]
    run_plan: list[SegmentOut]
    strategy: str

    @classmethod
    def from_plan(cls, plan: PacePlan, strategy: str) -> PacePlanOut:
        return cls(
            bike_plan=[SegmentOut.from_segment(s) for s in plan.bike_plan],
            run_plan=[SegmentOut.from_segment(s) for s in plan.run_plan],
            strategy=strategy,
        )


class PacesOut(CamelOut):
    swim_sec_per_100m: Optional[float] = Field(default=None, alias="swimSecPer100m")
    bike_kmh: Optional[float] = None
    run_sec_per_km: Optional[float] = None
    swim_pace: str
    bike_speed: str
    run_pace: str

    @classmethod
    def from_paces(cls, paces: DerivedPaces) -> PacesOut:
        return cls(
            swim_sec_per_100m=paces.swim_sec_per_100m,
            bike_kmh=paces.bike_kmh,
            run_sec_per_km=paces.run_sec_per_km,
            swim_pace=paces.swim_display,
            bike_speed=paces.bike_display,
            run_pace=paces.run_display,
        )


class BucketOut(CamelOut):
    index: int
    label: str
    share_pct: float
    faster_pct: float

    @classmethod
    def from_position(cls, pos: Optional[BucketPosition]) -> Optional[BucketOut]:
        if pos is None:
            return None
        return cls(index=pos.index, label=pos.label, share_pct=pos.share_pct, faster_pct=pos.faster_pct)


class RaceSummaryOut(CamelOut):
    total_time: TimeOut
    total_display: str
    paces: PacesOut
    total_position: Optional[BucketOut] = None
    swim_position: Optional[BucketOut] = None
    bike_position: Optional[BucketOut] = None
    run_position: Optional[BucketOut] = None


class DisciplineTimesOut(CamelOut):
    swim_time: TimeOut
    bike_time: TimeOut
    run_time: TimeOut


class ProComparisonOut(CamelOut):
    pro_key: str
    pro_name: str
    pro_time: str
    user_time: str
    closeness_pct: float
    message: str

    @classmethod
    def from_comparison(cls, cmp: ProComparison, user_time: str) -> ProComparisonOut:
        return cls(
            pro_key=cmp.pro_key,
            pro_name=cmp.pro_name,
            pro_time=cmp.pro_time,
            user_time=user_time,
            closeness_pct=cmp.closeness_pct,
            message=cmp.message,
        )


class NutritionOut(CamelOut):
    carbs_per_hour: int
    bike_carbs_g: int
    run_carbs_g: int
    total_carbs_g: int
    bike_gels: int
    run_gels: int
    total_gels: int

    @classmethod
    def from_plan(cls, plan: FuelingPlan) -> NutritionOut:
        return cls(
            carbs_per_hour=plan.carbs_per_hour,
            bike_carbs_g=plan.bike_carbs_g,
            run_carbs_g=plan.run_carbs_g,
            total_carbs_g=plan.total_carbs_g,
            bike_gels=plan.bike_gels,
            run_gels=plan.run_gels,
            total_gels=plan.total_gels,
        )


class InsightOut(BaseModel):
    insight: str


class DistanceOut(CamelOut):
    key: str
    label: str
    swim_m: float
    bike_km: float
    run_km: float


class HealthOut(CamelOut):
    status: str
    env: str
    split_strategy: str
    pace_plan_strategy: str
    genai_configured: bool
