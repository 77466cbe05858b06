"""Segmented bike and run pace plans.

Each leg is cut into fixed km segments. Segment times follow either even
pacing or a negative split (slower start, faster finish) whose average pace
still equals the leg's average. Raw times are scaled so they add up to the
leg time, then rounded to whole seconds with the leftover second(s) going
to the last segment.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from tripace.services.race_data import (
    NEGATIVE_SPLIT_INTENSITY,
    DistanceClass,
    Discipline,
    InvalidInputError,
    leg_distance_km,
    parse_discipline,
    parse_distance,
    segment_bounds,
)
from tripace.services.timefmt import Duration, format_hms, format_km, format_pace, format_speed, round_half_up

logger = logging.getLogger(__name__)

_LABEL_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*-\s*(\d+(?:\.\d+)?)\s*km\s*$", re.I)

BIKE_TIPS = [
    "Settle in below target power and let the heart rate come down after the swim.",
    "Start fuelling early: carbs and fluids every 15-20 minutes.",
    "Hold a steady cadence and stay aero on the flats.",
    "Ride the climbs by effort, not by speed.",
    "Check in on nutrition and hydration; do not skip a feed.",
    "Spin a lighter gear in the last kilometres to prepare the legs for the run.",
]

RUN_TIPS = [
    "Start controlled; the first kilometres should feel easy.",
    "Short, quick steps and a relaxed upper body.",
    "Take on fluids and carbs at every aid station.",
    "Stay on pace and keep your form tall.",
    "Break the distance into aid station to aid station.",
    "Hold form as fatigue builds; pump the arms to keep cadence.",
    "This is where the negative split pays off. Press on.",
    "Stay mentally in the segment you are running.",
    "Empty the tank and enjoy the finish.",
]


@dataclass(frozen=True)
class PaceSegment:
    segment: str
    start_km: float
    end_km: float
    target_seconds: int
    target_time: str
    target_pace: str
    tip: str = ""

    @property
    def distance_km(self) -> float:
        return self.end_km - self.start_km


@dataclass(frozen=True)
class PacePlan:
    bike_plan: list[PaceSegment] = field(default_factory=list)
    run_plan: list[PaceSegment] = field(default_factory=list)


def negative_split_multipliers(segment_count: int, intensity: float = 0.03) -> list[float]:
    """Linearly decreasing pace multipliers with a mean of exactly 1.

    The first segment starts at 1 + intensity/2 and the last ends at
    1 - intensity/2 before normalisation.
    """
    if segment_count <= 1:
        return [1.0]
    raw = [1 + intensity / 2 - (i / (segment_count - 1)) * intensity for i in range(segment_count)]
    return _mean_normalized(raw)


def _mean_normalized(values: list[float]) -> list[float]:
    factor = len(values) / sum(values)
    return [v * factor for v in values]


def round_with_residual(values: list[float], total: int) -> list[int]:
    """Round each value and put the integer leftover on the last one.

    When rounding overshoots the total, the excess is taken back from the
    last segment first and then from earlier ones, never below zero.
    """
    rounded = [round_half_up(v) for v in values]
    residual = total - sum(rounded)
    if residual >= 0:
        rounded[-1] += residual
        return rounded
    excess = -residual
    for i in range(len(rounded) - 1, -1, -1):
        take = min(excess, rounded[i])
        rounded[i] -= take
        excess -= take
        if not excess:
            break
    return rounded


def _tip(tips: list[str], index: int, count: int) -> str:
    if index == count - 1:
        return tips[-1]
    return tips[index % (len(tips) - 1)]


def segment_label(start_km: float, end_km: float) -> str:
    return f"{format_km(start_km)}-{format_km(end_km)} km"


def parse_segment_label(label: str) -> tuple[float, float] | None:
    """Read '<start>-<end> km' back into kilometre marks; None if it does not match."""
    match = _LABEL_RE.match(label or "")
    if not match:
        return None
    start, end = float(match.group(1)), float(match.group(2))
    return (start, end) if end > start else None


def plan_discipline(
    distance: DistanceClass | str,
    discipline_time: Duration | int,
    discipline: Discipline | str,
    negative_split: bool = True,
    intensity: float | None = None,
) -> list[PaceSegment]:
    """Build the segment plan for one leg. A zero leg time yields no segments."""
    distance = parse_distance(distance)
    discipline = parse_discipline(discipline)
    if discipline is Discipline.SWIM:
        raise InvalidInputError("Pace plans cover the bike and run legs only")

    total = discipline_time.total_seconds if isinstance(discipline_time, Duration) else int(discipline_time)
    if total <= 0:
        if total < 0:
            logger.warning("Negative %s time %ss; returning an empty plan", discipline.value, total)
        return []

    bounds = segment_bounds(distance, discipline)
    lengths = [end - start for start, end in bounds]
    n = len(bounds)
    if negative_split:
        spread = NEGATIVE_SPLIT_INTENSITY[discipline] if intensity is None else intensity
        pace_multipliers = negative_split_multipliers(n, spread)
    else:
        pace_multipliers = [1.0] * n

    leg_km = leg_distance_km(distance, discipline)
    if discipline is Discipline.BIKE:
        # Faster pace means higher speed, so speed scales with the reciprocal.
        avg_speed = leg_km / (total / 3600)
        speed_multipliers = _mean_normalized([1 / m for m in pace_multipliers])
        raw = [length / (avg_speed * m) * 3600 for length, m in zip(lengths, speed_multipliers)]
    else:
        avg_pace = total / leg_km
        raw = [length * avg_pace * m for length, m in zip(lengths, pace_multipliers)]

    correction = total / sum(raw)
    seconds = round_with_residual([t * correction for t in raw], total)

    tips = BIKE_TIPS if discipline is Discipline.BIKE else RUN_TIPS
    plan = []
    for i, ((start, end), secs) in enumerate(zip(bounds, seconds)):
        plan.append(PaceSegment(
            segment=segment_label(start, end),
            start_km=start,
            end_km=end,
            target_seconds=secs,
            target_time=format_hms(secs),
            target_pace=segment_pace(discipline, end - start, secs),
            tip=_tip(tips, i, n),
        ))
    return plan


def segment_pace(discipline: Discipline, length_km: float, seconds: float) -> str:
    """Speed for bike segments, min/km pace for run segments."""
    if length_km <= 0 or seconds <= 0:
        return "n/a"
    if discipline is Discipline.BIKE:
        return format_speed(length_km / seconds * 3600)
    return format_pace(seconds / length_km)


def plan_pacing(
    distance: DistanceClass | str,
    bike_time: Duration | int,
    run_time: Duration | int,
    negative_split: bool = True,
) -> PacePlan:
    return PacePlan(
        bike_plan=plan_discipline(distance, bike_time, Discipline.BIKE, negative_split),
        run_plan=plan_discipline(distance, run_time, Discipline.RUN, negative_split),
    )
