"""One-line coaching tip on which discipline to improve, from the generative service."""

from __future__ import annotations

import logging

from tripace.services.genai import GenerativeServiceError, GenerativeTextClient
from tripace.services.goal_distributor import SplitSet
from tripace.services.prompts import InsightOut, insight_prompt
from tripace.services.race_data import DistanceClass, InvalidInputError, parse_distance

logger = logging.getLogger(__name__)


def performance_insight(client: GenerativeTextClient | None, distance: DistanceClass | str, splits: SplitSet) -> str:
    if client is None:
        raise GenerativeServiceError("Generative service is not configured")
    distance = parse_distance(distance)
    if splits.swim.total_seconds + splits.bike.total_seconds + splits.run.total_seconds <= 0:
        raise InvalidInputError("Enter a swim, bike or run time to get an insight")

    prompt = insight_prompt(
        distance,
        swim=splits.swim.total_seconds / 60,
        t1=splits.t1.total_seconds / 60,
        bike=splits.bike.total_seconds / 60,
        t2=splits.t2.total_seconds / 60,
        run=splits.run.total_seconds / 60,
    )
    out = client.generate_structured(prompt, InsightOut)
    insight = out.insight.strip()
    logger.info("performance_insight", extra={"distance": distance.value, "chars": len(insight)})
    return insight
