"""Prompt templates and structured output models for the generative service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from tripace.services.race_data import DISTANCES, DistanceClass
from tripace.services.timefmt import Duration


class TimeOut(BaseModel):
    h: int = Field(ge=0)
    m: int = Field(ge=0)
    s: int = Field(ge=0)

    @property
    def total_seconds(self) -> int:
        return self.h * 3600 + self.m * 60 + self.s


class DisciplineSplitsOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    swim_time: TimeOut = Field(alias="swimTime")
    bike_time: TimeOut = Field(alias="bikeTime")
    run_time: TimeOut = Field(alias="runTime")


class SegmentOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    segment: str = Field(min_length=1)
    target_time: str = Field(alias="targetTime")
    target_pace: str = Field(default="", alias="targetPace")
    tip: str = ""


class PacePlanOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    bike_plan: list[SegmentOut] = Field(default_factory=list, alias="bikePlan")
    run_plan: list[SegmentOut] = Field(default_factory=list, alias="runPlan")


class InsightOut(BaseModel):
    insight: str = Field(min_length=1)


TIME_JSON = '{"h": <int>, "m": <int>, "s": <int>}'

SPLIT_PROMPT = """You are an expert triathlon coach. Distribute an athlete's goal time into realistic swim, bike and run splits.

Goal time: {hours} hours, {minutes} minutes and {seconds} seconds for a {distance} distance triathlon ({swim_m:g} m swim, {bike_km:g} km bike, {run_km:g} km run).

Consider:
1. Course profile: '{course}'. Hilly or extreme courses need more time on the bike and run than a flat course for the same effort.
2. Athlete bias: {bias} on a 0-100 scale. Near 0 is a strong swimmer/biker who is relatively slower on the run; near 100 is a strong runner; 50 is balanced.

Leave roughly {transition_pct:.1f}% of the goal time for transitions; do not include transitions in the splits.

Respond with JSON only, in exactly this shape:
{{"swimTime": {time_json}, "bikeTime": {time_json}, "runTime": {time_json}}}
"""

PACE_PLAN_PROMPT = """You are an expert triathlon coach creating a race day pace plan.

The athlete is racing a {distance} distance triathlon ({bike_km:g} km bike, {run_km:g} km run).
Target bike time: {bike}. Target run time: {run}.

Break the bike into segments of 20-30 km for a full, 10-20 km for a half and 5-10 km for olympic or sprint.
Break the run into segments of 5 km for a full or half, 2.5 km for olympic and 1 km for sprint.
Label each segment as "<start>-<end> km". Segment times must add up to the target time for the leg.
Give bike targets as average speed ("30.0 km/h") and run targets as pace ("05:45 min/km").
Add a short, actionable tip for every segment. A steady effort or a very slight negative split is the goal.

Respond with JSON only, in exactly this shape:
{{"bikePlan": [{{"segment": "0-30 km", "targetTime": "HH:MM:SS", "targetPace": "...", "tip": "..."}}], "runPlan": [...]}}
"""

INSIGHT_PROMPT = """You are an expert triathlon coach analysing an athlete's {distance} distance race.

Times in minutes:
Swim: {swim:.1f}
T1: {t1:.1f}
Bike: {bike:.1f}
T2: {t2:.1f}
Run: {run:.1f}

Give one actionable insight on which single discipline (swim, bike or run) the athlete should focus on to improve their overall result, with brief reasoning based on typical pacing and the relative impact of each discipline. Do not advise on transitions. No more than 2 sentences.

Respond with JSON only: {{"insight": "..."}}
"""


def split_prompt(total_time: Duration, distance: DistanceClass, course: str, bias: float, transition_fraction: float) -> str:
    race = DISTANCES[distance]
    return SPLIT_PROMPT.format(
        hours=total_time.hours,
        minutes=total_time.minutes,
        seconds=total_time.seconds,
        distance=distance.value,
        swim_m=race.swim_m,
        bike_km=race.bike_km,
        run_km=race.run_km,
        course=course,
        bias=bias,
        transition_pct=transition_fraction * 100,
        time_json=TIME_JSON,
    )


def pace_plan_prompt(distance: DistanceClass, bike_time: Duration, run_time: Duration) -> str:
    race = DISTANCES[distance]
    return PACE_PLAN_PROMPT.format(
        distance=distance.value,
        bike_km=race.bike_km,
        run_km=race.run_km,
        bike=str(bike_time),
        run=str(run_time),
    )


def insight_prompt(distance: DistanceClass, swim: float, t1: float, bike: float, t2: float, run: float) -> str:
    return INSIGHT_PROMPT.format(distance=distance.value, swim=swim, t1=t1, bike=bike, t2=t2, run=run)
