"""Duration value type and time/pace/speed formatting helpers.

All race arithmetic works in whole seconds; Duration is only the
{hours, minutes, seconds} shape users type in and read back.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Duration:
    """Hours, minutes and seconds as entered by a user."""
    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    @property
    def total_seconds(self) -> int:
        return self.hours * 3600 + self.minutes * 60 + self.seconds

    @classmethod
    def from_seconds(cls, total: float) -> Duration:
        """Split seconds into h/m/s, flooring any fractional part."""
        whole = math.floor(total)
        if whole < 0:
            raise ValueError(f"Duration cannot be negative: {total}")
        h, rem = divmod(whole, 3600)
        m, s = divmod(rem, 60)
        return cls(hours=int(h), minutes=int(m), seconds=int(s))

    def as_dict(self) -> dict[str, int]:
        return {"h": self.hours, "m": self.minutes, "s": self.seconds}

    def __str__(self) -> str:
        return format_hms(self.total_seconds)


ZERO = Duration()


def round_half_up(value: float) -> int:
    """Nearest whole number, ties away from zero for positive values."""
    return int(math.floor(value + 0.5))


def format_hms(seconds: float) -> str:
    """Format seconds as zero-padded HH:MM:SS."""
    total = round_half_up(seconds)
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def parse_hms(text: str) -> int:
    """Parse 'HH:MM:SS' or 'MM:SS' into whole seconds."""
    parts = str(text).strip().split(":")
    if len(parts) == 2:
        parts = ["0", *parts]
    if len(parts) != 3:
        raise ValueError(f"Not a time: {text!r}")
    h, m, s = (int(p) for p in parts)
    if h < 0 or m < 0 or s < 0:
        raise ValueError(f"Not a time: {text!r}")
    return h * 3600 + m * 60 + s


def format_pace(sec_per_unit: float, unit: str = "km") -> str:
    """Format a pace as 'MM:SS min/<unit>'; a rounded 60s carries into minutes."""
    if sec_per_unit <= 0:
        return "n/a"
    minutes = int(sec_per_unit // 60)
    secs = round_half_up(sec_per_unit % 60)
    if secs == 60:
        minutes += 1
        secs = 0
    return f"{minutes:02d}:{secs:02d} min/{unit}"


def format_speed(kmh: float) -> str:
    if kmh <= 0:
        return "n/a"
    return f"{kmh:.1f} km/h"


def format_km(value: float) -> str:
    """Render a kilometre mark without a trailing '.0' (22.5 -> '22.5', 30.0 -> '30')."""
    text = f"{value:.1f}"
    return text[:-2] if text.endswith(".0") else text
