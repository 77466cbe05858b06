"""Split a goal finish time into swim, T1, bike, T2 and run times.

The total is carved into a transition allowance (fixed fraction per distance,
60/40 between T1 and T2) and the time available for the three disciplines.
The available time is shared out by a baseline proportion table, shifted by
the course profile and by the athlete's swim/bike vs run bias. Every component
is rounded to whole seconds and the rounding residual is added to the run,
so the five outputs always sum to the input exactly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tripace.services.race_data import (
    BASELINE_PROPORTIONS,
    BIAS_BALANCED,
    BIAS_STRENGTH,
    COURSE_DELTAS,
    T1_SHARE,
    T2_SHARE,
    TRANSITION_FRACTION,
    CourseProfile,
    DistanceClass,
    InvalidInputError,
    parse_course,
    parse_distance,
)
from tripace.services.timefmt import ZERO, Duration, round_half_up

logger = logging.getLogger(__name__)

Proportions = tuple[float, float, float]


@dataclass(frozen=True)
class SplitSet:
    """Five race components whose seconds add up to the goal time."""
    swim: Duration
    t1: Duration
    bike: Duration
    t2: Duration
    run: Duration

    @property
    def total_seconds(self) -> int:
        return sum(d.total_seconds for d in (self.swim, self.t1, self.bike, self.t2, self.run))


ZERO_SPLITS = SplitSet(swim=ZERO, t1=ZERO, bike=ZERO, t2=ZERO, run=ZERO)


def transition_carve_out(total_seconds: float, distance: DistanceClass | str) -> tuple[float, float, float]:
    """Return raw (t1, t2, available) seconds for a total finish time."""
    fraction = TRANSITION_FRACTION[parse_distance(distance)]
    transition = total_seconds * fraction
    return transition * T1_SHARE, transition * T2_SHARE, total_seconds - transition


def normalize_proportions(proportions: Proportions) -> Proportions:
    """Scale a (swim, bike, run) triple to sum to exactly 1."""
    if any(p <= 0 for p in proportions):
        raise InvalidInputError(f"Proportions must be positive: {proportions}")
    total = sum(proportions)
    swim, bike, run = (p / total for p in proportions)
    return swim, bike, run


def course_adjusted_proportions(distance: DistanceClass | str, course_profile: CourseProfile | str) -> Proportions:
    _, bike, run = BASELINE_PROPORTIONS[parse_distance(distance)]
    bike_delta, run_delta = COURSE_DELTAS[parse_course(course_profile)]
    bike += bike_delta
    run += run_delta
    return 1.0 - bike - run, bike, run


def apply_athlete_bias(proportions: Proportions, athlete_bias: float) -> Proportions:
    """Shift time towards or away from the run.

    Bias below 50 (swim/bike strength) moves time onto the run; above 50
    (run strength) moves it off the run. The shift never exceeds 20% of the
    smallest proportion, so no discipline can reach zero.
    """
    if not 0 <= athlete_bias <= 100:
        raise InvalidInputError(f"athlete_bias must be within 0-100, got {athlete_bias}")
    swim, bike, run = proportions
    b = (athlete_bias - BIAS_BALANCED) / BIAS_BALANCED
    shift = min(swim, bike, run) * BIAS_STRENGTH * abs(b)
    if b < 0:
        run += shift
        bike -= shift / 2
        swim -= shift / 2
    elif b > 0:
        run -= shift
        bike += shift / 2
        swim += shift / 2
    return swim, bike, run


def compute_proportions(
    distance: DistanceClass | str,
    course_profile: CourseProfile | str = CourseProfile.ROLLING,
    athlete_bias: float = BIAS_BALANCED,
) -> Proportions:
    adjusted = course_adjusted_proportions(distance, course_profile)
    return normalize_proportions(apply_athlete_bias(adjusted, athlete_bias))


def assemble_splits(total_seconds: int, t1: float, t2: float, available: float, proportions: Proportions) -> SplitSet:
    """Round every component and hand the residual to the run."""
    swim_p, bike_p, run_p = proportions
    rounded = {
        "swim": round_half_up(available * swim_p),
        "t1": round_half_up(t1),
        "bike": round_half_up(available * bike_p),
        "t2": round_half_up(t2),
        "run": round_half_up(available * run_p),
    }
    residual = total_seconds - sum(rounded.values())
    rounded["run"] += residual
    if residual:
        logger.debug("Rounding residual of %ds added to run", residual)
    return SplitSet(**{k: Duration.from_seconds(v) for k, v in rounded.items()})


def distribute_goal_time(
    total_time: Duration | int,
    distance: DistanceClass | str,
    course_profile: CourseProfile | str = CourseProfile.ROLLING,
    athlete_bias: float = BIAS_BALANCED,
) -> SplitSet:
    """Distribute a goal finish time across the five race components.

    A total of zero seconds or less is not an error; it yields all-zero splits.
    """
    total_seconds = total_time.total_seconds if isinstance(total_time, Duration) else int(total_time)
    proportions = compute_proportions(distance, course_profile, athlete_bias)
    if total_seconds <= 0:
        logger.warning("Goal time of %ss cannot be distributed; returning zero splits", total_seconds)
        return ZERO_SPLITS

    t1, t2, available = transition_carve_out(total_seconds, distance)
    return assemble_splits(total_seconds, t1, t2, available, proportions)
