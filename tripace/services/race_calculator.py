"""Race totals and conversions between leg times, paces and speeds."""

from __future__ import annotations

from dataclasses import dataclass

from tripace.services.goal_distributor import SplitSet
from tripace.services.race_data import DISTANCES, DistanceClass, parse_distance
from tripace.services.timefmt import ZERO, Duration, format_pace, format_speed

DEFAULT_T1 = Duration(minutes=5)
DEFAULT_T2 = Duration(minutes=3)


@dataclass(frozen=True)
class DerivedPaces:
    """Average swim pace, bike speed and run pace implied by leg times."""
    swim_sec_per_100m: float | None
    bike_kmh: float | None
    run_sec_per_km: float | None

    @property
    def swim_display(self) -> str:
        return format_pace(self.swim_sec_per_100m or 0, unit="100m")

    @property
    def bike_display(self) -> str:
        return format_speed(self.bike_kmh or 0)

    @property
    def run_display(self) -> str:
        return format_pace(self.run_sec_per_km or 0)


def total_time(splits: SplitSet) -> Duration:
    return Duration.from_seconds(splits.total_seconds)


def swim_time_from_pace(distance: DistanceClass | str, sec_per_100m: float) -> Duration:
    if sec_per_100m <= 0:
        return ZERO
    swim_m = DISTANCES[parse_distance(distance)].swim_m
    return Duration.from_seconds(swim_m / 100 * sec_per_100m)


def bike_time_from_speed(distance: DistanceClass | str, kmh: float) -> Duration:
    if kmh <= 0:
        return ZERO
    bike_km = DISTANCES[parse_distance(distance)].bike_km
    return Duration.from_seconds(bike_km / kmh * 3600)


def run_time_from_pace(distance: DistanceClass | str, sec_per_km: float) -> Duration:
    if sec_per_km <= 0:
        return ZERO
    run_km = DISTANCES[parse_distance(distance)].run_km
    return Duration.from_seconds(run_km * sec_per_km)


def derive_paces(distance: DistanceClass | str, splits: SplitSet) -> DerivedPaces:
    race = DISTANCES[parse_distance(distance)]
    swim_s = splits.swim.total_seconds
    bike_s = splits.bike.total_seconds
    run_s = splits.run.total_seconds
    return DerivedPaces(
        swim_sec_per_100m=swim_s / (race.swim_m / 100) if swim_s > 0 else None,
        bike_kmh=race.bike_km / (bike_s / 3600) if bike_s > 0 else None,
        run_sec_per_km=run_s / race.run_km if run_s > 0 else None,
    )
