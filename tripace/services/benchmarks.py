"""Where a time sits against typical finisher distributions and pro records.

The distribution tables are relative finisher shares per time bucket, not
raw counts; bucket upper bounds are expressed in the table's unit.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from tripace.services.race_data import DistanceClass, InvalidInputError, parse_distance
from tripace.services.timefmt import format_hms

INF = math.inf


@dataclass(frozen=True)
class DistributionTable:
    unit: str  # "hours" | "minutes"
    buckets: tuple[tuple[str, int, float], ...]  # (label, finisher share, upper bound)


@dataclass(frozen=True)
class BucketPosition:
    index: int
    label: str
    share_pct: float
    faster_pct: float  # finishers in quicker buckets


def _hours(*buckets) -> DistributionTable:
    return DistributionTable("hours", tuple(buckets))


def _minutes(*buckets) -> DistributionTable:
    return DistributionTable("minutes", tuple(buckets))


TOTAL_DISTRIBUTIONS: dict[DistanceClass, DistributionTable] = {
    DistanceClass.FULL: _hours(
        ("<8.5h", 1, 8.5), ("8.5-9h", 2, 9), ("9-9.5h", 4, 9.5), ("9.5-10h", 6, 10),
        ("10-10.5h", 8, 10.5), ("10.5-11h", 10, 11), ("11-11.5h", 12, 11.5), ("11.5-12h", 13, 12),
        ("12-12.5h", 12, 12.5), ("12.5-13h", 10, 13), ("13-13.5h", 8, 13.5), ("13.5-14h", 6, 14),
        ("14-14.5h", 4, 14.5), ("14.5-15h", 2, 15), ("15-15.5h", 1, 15.5), (">15.5h", 1, INF),
    ),
    DistanceClass.HALF: _hours(
        ("<4:15", 2, 4.25), ("4:15-4:30", 5, 4.5), ("4:30-4:45", 9, 4.75), ("4:45-5:00", 12, 5),
        ("5:00-5:15", 14, 5.25), ("5:15-5:30", 15, 5.5), ("5:30-5:45", 13, 5.75), ("5:45-6:00", 10, 6),
        ("6:00-6:15", 8, 6.25), ("6:15-6:30", 5, 6.5), ("6:30-6:45", 4, 6.75), (">6:45", 3, INF),
    ),
    DistanceClass.OLYMPIC: _hours(
        ("<2:08", 4, 2.13), ("2:08-2:15", 8, 2.25), ("2:15-2:22", 12, 2.37), ("2:22-2:30", 15, 2.5),
        ("2:30-2:38", 18, 2.63), ("2:38-2:45", 15, 2.75), ("2:45-2:52", 10, 2.87), ("2:52-3:00", 8, 3),
        ("3:00-3:08", 5, 3.13), (">3:08", 5, INF),
    ),
    DistanceClass.SPRINT: _hours(
        ("<1:05", 7, 1.08), ("1:05-1:10", 10, 1.16), ("1:10-1:15", 15, 1.25), ("1:15-1:20", 18, 1.33),
        ("1:20-1:25", 18, 1.42), ("1:25-1:30", 13, 1.5), ("1:30-1:35", 9, 1.58), ("1:35-1:40", 6, 1.66),
        (">1:40", 4, INF),
    ),
}

DISCIPLINE_DISTRIBUTIONS: dict[DistanceClass, dict[str, DistributionTable]] = {
    DistanceClass.FULL: {
        "swim": _minutes(
            ("<55", 4, 55), ("55-60", 8, 60), ("60-65", 13, 65), ("65-70", 18, 70), ("70-75", 20, 75),
            ("75-80", 15, 80), ("80-85", 10, 85), ("85-90", 7, 90), (">90", 5, INF),
        ),
        "bike": _hours(
            ("<4:45", 2, 4.75), ("4:45-5:00", 5, 5), ("5:00-5:15", 9, 5.25), ("5:15-5:30", 13, 5.5),
            ("5:30-5:45", 16, 5.75), ("5:45-6:00", 16, 6), ("6:00-6:15", 13, 6.25), ("6:15-6:30", 9, 6.5),
            ("6:30-6:45", 7, 6.75), (">6:45", 10, INF),
        ),
        "run": _hours(
            ("<3:15", 4, 3.25), ("3:15-3:30", 7, 3.5), ("3:30-3:45", 10, 3.75), ("3:45-4:00", 14, 4),
            ("4:00-4:15", 18, 4.25), ("4:15-4:30", 18, 4.5), ("4:30-4:45", 13, 4.75), ("4:45-5:00", 9, 5),
            (">5:00", 7, INF),
        ),
    },
    DistanceClass.HALF: {
        "swim": _minutes(
            ("<28", 5, 28), ("28-31", 12, 31), ("31-34", 20, 34), ("34-37", 23, 37), ("37-40", 18, 40),
            ("40-43", 12, 43), ("43-46", 7, 46), (">46", 3, INF),
        ),
        "bike": _hours(
            ("<2:15", 4, 2.25), ("2:15-2:30", 8, 2.5), ("2:30-2:45", 15, 2.75), ("2:45-3:00", 20, 3),
            ("3:00-3:15", 22, 3.25), ("3:15-3:30", 15, 3.5), ("3:30-3:45", 9, 3.75), (">3:45", 7, INF),
        ),
        "run": _hours(
            ("<1:40", 5, 1.66), ("1:40-1:50", 15, 1.83), ("1:50-2:00", 25, 2.0), ("2:00-2:10", 25, 2.16),
            ("2:10-2:20", 15, 2.33), ("2:20-2:30", 10, 2.5), (">2:30", 5, INF),
        ),
    },
    DistanceClass.OLYMPIC: {
        "swim": _minutes(
            ("<22.5", 6, 22.5), ("22.5-25", 11, 25), ("25-27.5", 17, 27.5), ("27.5-30", 20, 30),
            ("30-32.5", 18, 32.5), ("32.5-35", 12, 35), ("35-37.5", 8, 37.5), ("37.5-40", 5, 40), (">40", 3, INF),
        ),
        "bike": _minutes(
            ("<60", 4, 60), ("60-65", 8, 65), ("65-70", 15, 70), ("70-75", 20, 75), ("75-80", 22, 80),
            ("80-85", 15, 85), ("85-90", 9, 90), (">90", 7, INF),
        ),
        "run": _minutes(
            ("<40", 4, 40), ("40-45", 8, 45), ("45-50", 16, 50), ("50-55", 22, 55), ("55-60", 20, 60),
            ("60-65", 14, 65), ("65-70", 9, 70), (">70", 7, INF),
        ),
    },
    DistanceClass.SPRINT: {
        "swim": _minutes(
            ("<12", 10, 12), ("12-14", 20, 14), ("14-16", 30, 16), ("16-18", 20, 18), ("18-20", 10, 20),
            ("20-22", 5, 22), (">22", 5, INF),
        ),
        "bike": _minutes(
            ("<32", 4, 32), ("32-35", 8, 35), ("35-37.5", 13, 37.5), ("37.5-40", 18, 40), ("40-42.5", 20, 42.5),
            ("42.5-45", 15, 45), ("45-47.5", 10, 47.5), ("47.5-50", 7, 50), (">50", 5, INF),
        ),
        "run": _minutes(
            ("<20", 4, 20), ("20-22", 8, 22), ("22-24", 14, 24), ("24-26", 18, 26), ("26-28", 20, 28),
            ("28-30", 15, 30), ("30-32", 10, 32), ("32-34", 7, 34), (">34", 4, INF),
        ),
    },
}


def distribution_for(distance: DistanceClass | str, leg: str = "total") -> DistributionTable:
    distance = parse_distance(distance)
    if leg == "total":
        return TOTAL_DISTRIBUTIONS[distance]
    tables = DISCIPLINE_DISTRIBUTIONS[distance]
    if leg not in tables:
        raise InvalidInputError(f"Unknown leg: {leg!r}. Use total, swim, bike or run")
    return tables[leg]


def locate_bucket(table: DistributionTable, value: float) -> BucketPosition | None:
    """Find the bucket a value (in the table's unit) falls into.

    Zero means "no time entered" and has no bucket; anything past the last
    bound lands in the final bucket.
    """
    if value <= 0:
        return None
    buckets = table.buckets
    index = next((i for i, (_, _, upper) in enumerate(buckets) if value < upper), len(buckets) - 1)
    total = sum(share for _, share, _ in buckets)
    faster = sum(share for _, share, _ in buckets[:index])
    label, share, _ = buckets[index]
    return BucketPosition(
        index=index,
        label=label,
        share_pct=round(share / total * 100, 1),
        faster_pct=round(faster / total * 100, 1),
    )


def position_for_seconds(distance: DistanceClass | str, leg: str, seconds: float) -> BucketPosition | None:
    table = distribution_for(distance, leg)
    value = seconds / 3600 if table.unit == "hours" else seconds / 60
    return locate_bucket(table, value)


# --- Pro benchmarks ---

@dataclass(frozen=True)
class ProBenchmark:
    name: str
    description: str
    best_seconds: dict[DistanceClass, int]


PRO_BENCHMARKS: dict[str, ProBenchmark] = {
    "blummenfelt": ProBenchmark(
        "Kristian Blummenfelt",
        "Olympic champion and a powerhouse across all distances.",
        {DistanceClass.FULL: 7 * 3600 + 21 * 60 + 12, DistanceClass.HALF: 3 * 3600 + 29 * 60 + 4,
         DistanceClass.OLYMPIC: 3600 + 45 * 60 + 4, DistanceClass.SPRINT: 50 * 60 + 53},
    ),
    "frodeno": ProBenchmark(
        "Jan Frodeno",
        "Widely considered the greatest long-distance triathlete.",
        {DistanceClass.FULL: 7 * 3600 + 27 * 60 + 43, DistanceClass.HALF: 3 * 3600 + 33 * 60 + 21,
         DistanceClass.OLYMPIC: 3600 + 45 * 60 + 31, DistanceClass.SPRINT: 52 * 60 + 10},
    ),
    "ryf": ProBenchmark(
        "Daniela Ryf",
        "The dominant force in female long-distance racing for a decade.",
        {DistanceClass.FULL: 8 * 3600 + 8 * 60 + 29, DistanceClass.HALF: 3 * 3600 + 51 * 60 + 56,
         DistanceClass.OLYMPIC: 3600 + 55 * 60 + 42, DistanceClass.SPRINT: 58 * 60 + 54},
    ),
    "sanders": ProBenchmark(
        "Lionel Sanders",
        "Known for huge bike power and an all-in racing style.",
        {DistanceClass.FULL: 7 * 3600 + 43 * 60 + 30, DistanceClass.HALF: 3 * 3600 + 41 * 60 + 11,
         DistanceClass.OLYMPIC: 3600 + 48 * 60, DistanceClass.SPRINT: 55 * 60},
    ),
    "ag-avg": ProBenchmark(
        "Average Age Grouper",
        "A competitive age-group time at a championship event.",
        {DistanceClass.FULL: 12 * 3600 + 35 * 60, DistanceClass.HALF: 5 * 3600 + 30 * 60,
         DistanceClass.OLYMPIC: 2 * 3600 + 45 * 60, DistanceClass.SPRINT: 3600 + 25 * 60},
    ),
}


@dataclass(frozen=True)
class ProComparison:
    pro_key: str
    pro_name: str
    pro_seconds: int
    pro_time: str
    closeness_pct: float  # smaller time / larger time, 0-100
    message: str


def compare_to_pro(total_seconds: int, distance: DistanceClass | str, pro_key: str = "blummenfelt") -> ProComparison:
    if pro_key not in PRO_BENCHMARKS:
        raise InvalidInputError(f"Unknown benchmark: {pro_key!r}. Use one of {sorted(PRO_BENCHMARKS)}")
    pro = PRO_BENCHMARKS[pro_key]
    pro_seconds = pro.best_seconds[parse_distance(distance)]

    if total_seconds <= 0:
        closeness, message = 0.0, "Enter your times to compare."
    elif total_seconds > pro_seconds:
        closeness = pro_seconds / total_seconds * 100
        message = f"Your time is {(total_seconds / pro_seconds - 1) * 100:.0f}% slower than their record."
    else:
        closeness = total_seconds / pro_seconds * 100
        message = f"Your time is {(pro_seconds / total_seconds - 1) * 100:.0f}% faster than their record!"

    return ProComparison(
        pro_key=pro_key,
        pro_name=pro.name,
        pro_seconds=pro_seconds,
        pro_time=format_hms(pro_seconds),
        closeness_pct=round(closeness, 1),
        message=message,
    )
