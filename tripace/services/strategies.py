"""Interchangeable ways to produce a SplitSet or a PacePlan.

Each capability has a deterministic table-driven implementation and a
generative one backed by the remote text service. Which one runs is a
configuration choice (Settings.split_strategy / pace_plan_strategy).

The generative implementations never trust the model's arithmetic: splits
are used only as proportions over the locally carved-out discipline time,
transitions are always computed locally, and segment times are rescaled to
the leg total before rounding.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from tripace.services.genai import GenerativeServiceError, GenerativeTextClient
from tripace.services.goal_distributor import (
    ZERO_SPLITS,
    SplitSet,
    apply_athlete_bias,
    assemble_splits,
    course_adjusted_proportions,
    distribute_goal_time,
    normalize_proportions,
    transition_carve_out,
)
from tripace.services.pace_planner import (
    PacePlan,
    PaceSegment,
    parse_segment_label,
    plan_pacing,
    round_with_residual,
    segment_pace,
)
from tripace.services.prompts import (
    DisciplineSplitsOut,
    PacePlanOut,
    SegmentOut,
    pace_plan_prompt,
    split_prompt,
)
from tripace.services.race_data import (
    TRANSITION_FRACTION,
    CourseProfile,
    Discipline,
    DistanceClass,
    InvalidInputError,
    parse_course,
    parse_distance,
)
from tripace.services.timefmt import Duration, format_hms, parse_hms

logger = logging.getLogger(__name__)


class SplitStrategy(ABC):
    """Produce a SplitSet for a goal time."""

    name: str = ""

    @abstractmethod
    def distribute(
        self,
        total_time: Duration,
        distance: DistanceClass | str,
        course_profile: CourseProfile | str,
        athlete_bias: float,
    ) -> SplitSet:
        ...


class PacePlanStrategy(ABC):
    """Produce bike and run pace plans for leg times."""

    name: str = ""

    @abstractmethod
    def plan(
        self,
        distance: DistanceClass | str,
        bike_time: Duration,
        run_time: Duration,
        negative_split: bool = True,
    ) -> PacePlan:
        ...


class TableSplitStrategy(SplitStrategy):
    name = "table"

    def distribute(self, total_time, distance, course_profile, athlete_bias):
        return distribute_goal_time(total_time, distance, course_profile, athlete_bias)


class GenerativeSplitStrategy(SplitStrategy):
    name = "generative"

    def __init__(self, client: GenerativeTextClient):
        self.client = client

    def distribute(self, total_time, distance, course_profile, athlete_bias):
        distance = parse_distance(distance)
        course = parse_course(course_profile)
        # Same input checks as the table path before spending a remote call.
        apply_athlete_bias(course_adjusted_proportions(distance, course), athlete_bias)

        total_seconds = total_time.total_seconds
        if total_seconds <= 0:
            logger.warning("Goal time of %ss cannot be distributed; returning zero splits", total_seconds)
            return ZERO_SPLITS

        prompt = split_prompt(total_time, distance, course.value, athlete_bias, TRANSITION_FRACTION[distance])
        out = self.client.generate_structured(prompt, DisciplineSplitsOut)
        raw = (out.swim_time.total_seconds, out.bike_time.total_seconds, out.run_time.total_seconds)
        try:
            proportions = normalize_proportions(raw)
        except InvalidInputError as exc:
            raise GenerativeServiceError(f"Generative service returned unusable splits: {raw}") from exc

        t1, t2, available = transition_carve_out(total_seconds, distance)
        logger.info(
            "generative_splits_reconciled",
            extra={"model_seconds": sum(raw), "available_seconds": round(available), "distance": distance.value},
        )
        return assemble_splits(total_seconds, t1, t2, available, proportions)


class TablePacePlanStrategy(PacePlanStrategy):
    name = "table"

    def plan(self, distance, bike_time, run_time, negative_split=True):
        return plan_pacing(distance, bike_time, run_time, negative_split)


def _reconcile_segments(segments: list[SegmentOut], total: int, discipline: Discipline) -> list[PaceSegment]:
    """Rescale model segment times to the leg total and re-derive paces."""
    if total <= 0:
        return []
    if not segments:
        raise GenerativeServiceError(f"Generative service returned no {discipline.value} segments")
    try:
        model_seconds = [parse_hms(s.target_time) for s in segments]
    except ValueError as exc:
        raise GenerativeServiceError(f"Generative service returned a malformed {discipline.value} time") from exc
    if any(secs <= 0 for secs in model_seconds):
        raise GenerativeServiceError(f"Generative service returned an empty {discipline.value} segment")

    scale = total / sum(model_seconds)
    seconds = round_with_residual([secs * scale for secs in model_seconds], total)

    plan = []
    for seg, secs in zip(segments, seconds):
        bounds = parse_segment_label(seg.segment)
        if bounds is None:
            # Model pace belongs to the model's own time; it cannot be re-derived here.
            logger.warning(
                "generative_segment_unparsed",
                extra={"segment": seg.segment, "discipline": discipline.value},
            )
        start, end = bounds if bounds else (0.0, 0.0)
        plan.append(PaceSegment(
            segment=seg.segment,
            start_km=start,
            end_km=end,
            target_seconds=secs,
            target_time=format_hms(secs),
            target_pace=segment_pace(discipline, end - start, secs) if bounds else "n/a",
            tip=seg.tip,
        ))
    return plan


class GenerativePacePlanStrategy(PacePlanStrategy):
    name = "generative"

    def __init__(self, client: GenerativeTextClient):
        self.client = client

    def plan(self, distance, bike_time, run_time, negative_split=True):
        # The prompt already asks for steady or slightly negative pacing.
        distance = parse_distance(distance)
        bike_total = bike_time.total_seconds
        run_total = run_time.total_seconds
        if bike_total <= 0 and run_total <= 0:
            return PacePlan()

        out = self.client.generate_structured(pace_plan_prompt(distance, bike_time, run_time), PacePlanOut)
        return PacePlan(
            bike_plan=_reconcile_segments(out.bike_plan, bike_total, Discipline.BIKE),
            run_plan=_reconcile_segments(out.run_plan, run_total, Discipline.RUN),
        )


def _require_client(client: GenerativeTextClient | None) -> GenerativeTextClient:
    if client is None:
        raise GenerativeServiceError("Generative service is not configured")
    return client


def select_split_strategy(name: str, client: GenerativeTextClient | None = None) -> SplitStrategy:
    if name == "table":
        return TableSplitStrategy()
    if name == "generative":
        return GenerativeSplitStrategy(_require_client(client))
    raise ValueError(f"Unknown split strategy: {name!r}")


def select_pace_plan_strategy(name: str, client: GenerativeTextClient | None = None) -> PacePlanStrategy:
    if name == "table":
        return TablePacePlanStrategy()
    if name == "generative":
        return GenerativePacePlanStrategy(_require_client(client))
    raise ValueError(f"Unknown pace plan strategy: {name!r}")
