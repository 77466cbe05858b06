from __future__ import annotations

from collections.abc import Generator
from typing import Optional

from fastapi import Depends

from tripace.config import Settings, get_settings
from tripace.services.genai import GenerativeTextClient, build_genai_client
from tripace.services.strategies import (
    PacePlanStrategy,
    SplitStrategy,
    select_pace_plan_strategy,
    select_split_strategy,
)


def get_genai_client(settings: Settings = Depends(get_settings)) -> Generator[Optional[GenerativeTextClient], None, None]:
    client = build_genai_client(settings)
    try:
        yield client
    finally:
        if client is not None:
            client.close()


def get_split_strategy(
    settings: Settings = Depends(get_settings),
    client: Optional[GenerativeTextClient] = Depends(get_genai_client),
) -> SplitStrategy:
    return select_split_strategy(settings.split_strategy, client)


def get_pace_plan_strategy(
    settings: Settings = Depends(get_settings),
    client: Optional[GenerativeTextClient] = Depends(get_genai_client),
) -> PacePlanStrategy:
    return select_pace_plan_strategy(settings.pace_plan_strategy, client)
