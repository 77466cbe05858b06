"""Tests for finisher distributions and pro comparisons."""

from __future__ import annotations

import pytest

from tripace.services.benchmarks import (
    DISCIPLINE_DISTRIBUTIONS,
    TOTAL_DISTRIBUTIONS,
    compare_to_pro,
    distribution_for,
    locate_bucket,
    position_for_seconds,
)
from tripace.services.race_data import DistanceClass, InvalidInputError


def test_every_distance_has_tables():
    for distance in DistanceClass:
        assert distance in TOTAL_DISTRIBUTIONS
        assert set(DISCIPLINE_DISTRIBUTIONS[distance]) == {"swim", "bike", "run"}


def test_bucket_bounds_increase():
    tables = list(TOTAL_DISTRIBUTIONS.values())
    tables += [t for legs in DISCIPLINE_DISTRIBUTIONS.values() for t in legs.values()]
    for table in tables:
        uppers = [upper for _, _, upper in table.buckets]
        assert uppers == sorted(uppers)


def test_locate_bucket_reports_faster_share():
    pos = locate_bucket(distribution_for("full"), 11.75)
    assert pos.label == "11.5-12h"
    assert pos.index == 7
    assert pos.share_pct == 13.0
    assert pos.faster_pct == 43.0


def test_locate_bucket_past_the_end_is_last():
    table = distribution_for("full")
    pos = locate_bucket(table, 20)
    assert pos.index == len(table.buckets) - 1


def test_locate_bucket_zero_has_no_position():
    assert locate_bucket(distribution_for("half"), 0) is None


def test_position_for_seconds_converts_units():
    swim = position_for_seconds("full", "swim", 70 * 60)
    assert swim.label == "70-75"
    total = position_for_seconds("full", "total", 11.75 * 3600)
    assert total.label == "11.5-12h"


def test_unknown_leg_rejected():
    with pytest.raises(InvalidInputError):
        distribution_for("full", "kayak")


def test_compare_slower_than_pro():
    cmp = compare_to_pro(12 * 3600, "full", "blummenfelt")
    assert cmp.pro_time == "07:21:12"
    assert cmp.message == "Your time is 63% slower than their record."
    assert cmp.closeness_pct == pytest.approx(61.3)


def test_compare_faster_than_age_grouper():
    cmp = compare_to_pro(5 * 3600, "half", "ag-avg")
    assert cmp.message == "Your time is 10% faster than their record!"


def test_compare_without_time():
    cmp = compare_to_pro(0, "sprint")
    assert cmp.message == "Enter your times to compare."
    assert cmp.closeness_pct == 0.0


def test_compare_unknown_pro():
    with pytest.raises(InvalidInputError):
        compare_to_pro(3600, "sprint", "nobody")
