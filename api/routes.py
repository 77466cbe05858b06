import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Request, Response

from api.deps import get_genai_client, get_pace_plan_strategy, get_split_strategy
from api.observability import bind_race_fields
from api.ratelimit import generation_limit, limiter
from api.schemas import (
    BucketOut,
    DisciplineTimesOut,
    DistanceOut,
    GoalTimeOut,
    HealthOut,
    InsightOut,
    NutritionOut,
    PacePlanOut,
    PacesOut,
    ProComparisonOut,
    RaceSummaryOut,
    TimeOut,
)
from tripace.config import Settings, get_settings
from tripace.services.benchmarks import compare_to_pro, position_for_seconds
from tripace.services.genai import GenerativeTextClient
from tripace.services.insights import performance_insight
from tripace.services.nutrition import fueling_plan
from tripace.services.pace_planner import PacePlan
from tripace.services.plan_export import csv_filename, pace_plan_to_csv
from tripace.services.race_calculator import (
    bike_time_from_speed,
    derive_paces,
    run_time_from_pace,
    swim_time_from_pace,
    total_time,
)
from tripace.services.race_data import DISTANCES
from tripace.services.strategies import PacePlanStrategy, SplitStrategy
from tripace.services.timefmt import format_hms
from tripace.validators import (
    DisciplinePacesInput,
    GoalTimeInput,
    InsightInput,
    NutritionInput,
    PacePlanInput,
    ProComparisonInput,
    RaceTimesInput,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1")


@router.get("/health", response_model=HealthOut, tags=["meta"])
def health(settings: Annotated[Settings, Depends(get_settings)]):
    return HealthOut(
        status="ok",
        env=settings.app_env,
        split_strategy=settings.split_strategy,
        pace_plan_strategy=settings.pace_plan_strategy,
        genai_configured=settings.genai_configured,
    )


@router.get("/distances", response_model=list[DistanceOut], tags=["meta"])
def list_distances():
    return [
        DistanceOut(key=key.value, label=race.label, swim_m=race.swim_m, bike_km=race.bike_km, run_km=race.run_km)
        for key, race in DISTANCES.items()
    ]


@router.post("/goal-time/distribute", response_model=GoalTimeOut, tags=["planning"])
@limiter.limit(generation_limit)
def distribute_goal_time(
    request: Request,
    response: Response,
    body: GoalTimeInput,
    strategy: Annotated[SplitStrategy, Depends(get_split_strategy)],
):
    del request, response
    bind_race_fields(distance=body.distance.value, strategy=strategy.name)
    splits = strategy.distribute(body.total_time.to_duration(), body.distance, body.course_profile, body.athlete_bias)
    logger.info("goal_time_distributed", extra={"total_seconds": splits.total_seconds})
    return GoalTimeOut.from_splits(splits, strategy=strategy.name)


def _build_plan(body: PacePlanInput, strategy: PacePlanStrategy) -> PacePlan:
    bind_race_fields(distance=body.distance.value, strategy=strategy.name)
    plan = strategy.plan(body.distance, body.bike_time.to_duration(), body.run_time.to_duration(), body.negative_split)
    logger.info(
        "pace_plan_built",
        extra={
            "bike_segments": len(plan.bike_plan),
            "run_segments": len(plan.run_plan),
        },
    )
    return plan


@router.post("/pace-plan", response_model=PacePlanOut, tags=["planning"])
@limiter.limit(generation_limit)
def pace_plan(
    request: Request,
    response: Response,
    body: PacePlanInput,
    strategy: Annotated[PacePlanStrategy, Depends(get_pace_plan_strategy)],
):
    del request, response
    return PacePlanOut.from_plan(_build_plan(body, strategy), strategy.name)


@router.post("/pace-plan/csv", tags=["planning"])
@limiter.limit(generation_limit)
def pace_plan_csv(
    request: Request,
    response: Response,
    body: PacePlanInput,
    strategy: Annotated[PacePlanStrategy, Depends(get_pace_plan_strategy)],
):
    del request, response
    content = pace_plan_to_csv(_build_plan(body, strategy))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{csv_filename(body.distance.value)}"'},
    )


@router.post("/race/summary", response_model=RaceSummaryOut, tags=["race"])
def race_summary(body: RaceTimesInput):
    bind_race_fields(distance=body.distance.value)
    splits = body.to_splits()
    total = total_time(splits)
    distance = body.distance
    return RaceSummaryOut(
        total_time=TimeOut.from_duration(total),
        total_display=str(total),
        paces=PacesOut.from_paces(derive_paces(distance, splits)),
        total_position=BucketOut.from_position(position_for_seconds(distance, "total", total.total_seconds)),
        swim_position=BucketOut.from_position(position_for_seconds(distance, "swim", splits.swim.total_seconds)),
        bike_position=BucketOut.from_position(position_for_seconds(distance, "bike", splits.bike.total_seconds)),
        run_position=BucketOut.from_position(position_for_seconds(distance, "run", splits.run.total_seconds)),
    )


@router.post("/race/discipline-times", response_model=DisciplineTimesOut, tags=["race"])
def discipline_times(body: DisciplinePacesInput):
    return DisciplineTimesOut(
        swim_time=TimeOut.from_duration(swim_time_from_pace(body.distance, body.swim_sec_per_100m)),
        bike_time=TimeOut.from_duration(bike_time_from_speed(body.distance, body.bike_kmh)),
        run_time=TimeOut.from_duration(run_time_from_pace(body.distance, body.run_sec_per_km)),
    )


@router.post("/race/pro-comparison", response_model=ProComparisonOut, tags=["race"])
def pro_comparison(body: ProComparisonInput):
    bind_race_fields(distance=body.distance.value, pro=body.pro)
    total_seconds = body.to_splits().total_seconds
    cmp = compare_to_pro(total_seconds, body.distance, body.pro)
    return ProComparisonOut.from_comparison(cmp, user_time=format_hms(total_seconds))


@router.post("/nutrition", response_model=NutritionOut, tags=["race"])
def nutrition(body: NutritionInput):
    plan = fueling_plan(body.bike_time.to_duration(), body.run_time.to_duration(), body.carbs_per_hour)
    return NutritionOut.from_plan(plan)


@router.post("/insights", response_model=InsightOut, tags=["race"])
@limiter.limit(generation_limit)
def insights(
    request: Request,
    response: Response,
    body: InsightInput,
    client: Annotated[Optional[GenerativeTextClient], Depends(get_genai_client)],
):
    del request, response
    bind_race_fields(distance=body.distance.value)
    return InsightOut(insight=performance_insight(client, body.distance, body.to_splits()))
