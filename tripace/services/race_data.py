"""Static race tables keyed by distance class, course profile and discipline.

Every number the split and pacing algorithms depend on lives here so the
algorithm bodies stay identical across distance classes. The proportion and
delta constants are tuned values, not derived ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class InvalidInputError(ValueError):
    pass


class DistanceClass(str, Enum):
    FULL = "full"
    HALF = "half"
    OLYMPIC = "olympic"
    SPRINT = "sprint"


class CourseProfile(str, Enum):
    FLAT = "flat"
    ROLLING = "rolling"
    HILLY = "hilly"
    EXTREME = "extreme"


class Discipline(str, Enum):
    SWIM = "swim"
    BIKE = "bike"
    RUN = "run"


@dataclass(frozen=True)
class RaceDistance:
    """Leg distances for one distance class."""
    label: str
    swim_m: float
    bike_km: float
    run_km: float


DISTANCES: dict[DistanceClass, RaceDistance] = {
    DistanceClass.FULL: RaceDistance("Full Distance", 3800, 180, 42.2),
    DistanceClass.HALF: RaceDistance("Half Distance", 1900, 90, 21.1),
    DistanceClass.OLYMPIC: RaceDistance("Olympic", 1500, 40, 10),
    DistanceClass.SPRINT: RaceDistance("Sprint", 750, 20, 5),
}

# Share of the total finish time spent in T1 + T2.
TRANSITION_FRACTION: dict[DistanceClass, float] = {
    DistanceClass.FULL: 0.025,
    DistanceClass.HALF: 0.03,
    DistanceClass.OLYMPIC: 0.04,
    DistanceClass.SPRINT: 0.05,
}

T1_SHARE = 0.6
T2_SHARE = 0.4

# (swim, bike, run) share of the non-transition time on a rolling course.
BASELINE_PROPORTIONS: dict[DistanceClass, tuple[float, float, float]] = {
    DistanceClass.FULL: (0.11, 0.53, 0.36),
    DistanceClass.HALF: (0.10, 0.52, 0.38),
    DistanceClass.OLYMPIC: (0.15, 0.50, 0.35),
    DistanceClass.SPRINT: (0.15, 0.50, 0.35),
}

# (bike delta, run delta) added to the baseline; swim absorbs the difference.
COURSE_DELTAS: dict[CourseProfile, tuple[float, float]] = {
    CourseProfile.FLAT: (-0.03, -0.01),
    CourseProfile.ROLLING: (0.0, 0.0),
    CourseProfile.HILLY: (0.03, 0.01),
    CourseProfile.EXTREME: (0.05, 0.02),
}

# Largest bias shift as a fraction of the smallest proportion.
BIAS_STRENGTH = 0.2
BIAS_BALANCED = 50.0

# (segment length km, equal segments, final mark km or None)
SEGMENT_PARTITIONS: dict[tuple[DistanceClass, Discipline], tuple[float, int, float | None]] = {
    (DistanceClass.FULL, Discipline.BIKE): (30, 6, None),
    (DistanceClass.HALF, Discipline.BIKE): (22.5, 4, None),
    (DistanceClass.OLYMPIC, Discipline.BIKE): (10, 4, None),
    (DistanceClass.SPRINT, Discipline.BIKE): (5, 4, None),
    (DistanceClass.FULL, Discipline.RUN): (5, 8, 42.2),
    (DistanceClass.HALF, Discipline.RUN): (5, 4, 21.1),
    (DistanceClass.OLYMPIC, Discipline.RUN): (2.5, 4, None),
    (DistanceClass.SPRINT, Discipline.RUN): (1, 5, None),
}

# Pace spread between first and last segment for a negative split.
NEGATIVE_SPLIT_INTENSITY: dict[Discipline, float] = {
    Discipline.BIKE: 0.02,
    Discipline.RUN: 0.03,
}


def _coerce(enum_cls, value, kind: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidInputError(f"Unknown {kind}: {value!r}. Use one of {allowed}") from None


def parse_distance(value: DistanceClass | str) -> DistanceClass:
    return _coerce(DistanceClass, value, "distance")


def parse_course(value: CourseProfile | str) -> CourseProfile:
    return _coerce(CourseProfile, value, "course profile")


def parse_discipline(value: Discipline | str) -> Discipline:
    return _coerce(Discipline, value, "discipline")


def leg_distance_km(distance: DistanceClass, discipline: Discipline) -> float:
    race = DISTANCES[distance]
    if discipline is Discipline.SWIM:
        return race.swim_m / 1000.0
    if discipline is Discipline.BIKE:
        return race.bike_km
    return race.run_km


def segment_bounds(distance: DistanceClass, discipline: Discipline) -> list[tuple[float, float]]:
    """Return the (start_km, end_km) pace-plan segments for a leg."""
    key = (parse_distance(distance), parse_discipline(discipline))
    if key not in SEGMENT_PARTITIONS:
        raise InvalidInputError(f"No segment partition for {key[1].value}")
    length, count, final_mark = SEGMENT_PARTITIONS[key]
    bounds = [(i * length, (i + 1) * length) for i in range(count)]
    if final_mark is not None:
        bounds.append((count * length, final_mark))
    return bounds
