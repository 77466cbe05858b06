"""Tests for the carbohydrate fuelling estimate."""

from __future__ import annotations

import pytest

from tripace.services.nutrition import fueling_plan
from tripace.services.race_data import InvalidInputError
from tripace.services.timefmt import Duration


def test_default_ninety_grams_per_hour():
    plan = fueling_plan(Duration(hours=5), Duration(hours=3, minutes=30))
    assert plan.carbs_per_hour == 90
    assert plan.bike_carbs_g == 450
    assert plan.run_carbs_g == 315
    assert plan.total_carbs_g == 765
    assert plan.bike_gels == 18
    assert plan.run_gels == 13
    assert plan.total_gels == 31


def test_zero_legs_need_nothing():
    plan = fueling_plan(Duration(), Duration(), carbs_per_hour=60)
    assert plan.total_carbs_g == 0
    assert plan.total_gels == 0


@pytest.mark.parametrize("rate", [59, 121])
def test_rate_out_of_range(rate):
    with pytest.raises(InvalidInputError):
        fueling_plan(Duration(hours=1), Duration(hours=1), carbs_per_hour=rate)
