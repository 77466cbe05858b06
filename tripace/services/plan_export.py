"""CSV export of a pace plan."""

from __future__ import annotations

import csv
import io

from tripace.services.pace_planner import PacePlan

CSV_HEADERS = ["Discipline", "Segment", "Target Time", "Target Pace/Speed", "Tip"]


def pace_plan_rows(plan: PacePlan) -> list[list[str]]:
    rows = []
    for label, segments in (("Bike", plan.bike_plan), ("Run", plan.run_plan)):
        for seg in segments:
            rows.append([label, seg.segment, seg.target_time, seg.target_pace, seg.tip])
    return rows


def pace_plan_to_csv(plan: PacePlan) -> str:
    """Render bike rows then run rows; every field quoted, quotes doubled."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    writer.writerows(pace_plan_rows(plan))
    return buf.getvalue()


def csv_filename(distance: str) -> str:
    return f"pace-plan-{distance}.csv"
