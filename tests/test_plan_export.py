"""Tests for pace plan CSV export."""

from __future__ import annotations

from tripace.services.pace_planner import PacePlan, PaceSegment, plan_pacing
from tripace.services.plan_export import CSV_HEADERS, csv_filename, pace_plan_rows, pace_plan_to_csv
from tripace.services.timefmt import Duration


def test_header_and_row_order():
    plan = plan_pacing("sprint", Duration(minutes=40), Duration(minutes=25))
    lines = pace_plan_to_csv(plan).splitlines()
    assert lines[0] == '"Discipline","Segment","Target Time","Target Pace/Speed","Tip"'
    assert len(lines) == 1 + 4 + 5
    assert lines[1].startswith('"Bike","0-5 km",')
    assert lines[5].startswith('"Run","0-1 km",')


def test_embedded_quotes_are_doubled():
    seg = PaceSegment("0-5 km", 0, 5, 600, "00:10:00", "30.0 km/h", 'Stay "aero"')
    text = pace_plan_to_csv(PacePlan(bike_plan=[seg]))
    assert text.splitlines()[1] == '"Bike","0-5 km","00:10:00","30.0 km/h","Stay ""aero"""'


def test_empty_plan_is_header_only():
    assert pace_plan_to_csv(PacePlan()) == ",".join(f'"{h}"' for h in CSV_HEADERS) + "\n"
    assert pace_plan_rows(PacePlan()) == []


def test_filename():
    assert csv_filename("half") == "pace-plan-half.csv"
