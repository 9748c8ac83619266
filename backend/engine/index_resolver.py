"""
Index resolution for indexed rent components (ILC / ILAT / ICC style indices).

Published values are used as-is from their effective date onward (last known
value, no interpolation). Past the last published point the index compounds at
the TCAM derived from the base index and the furthest known point.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Callable, Iterable, List, Optional

from engine.dates import years_between
from models.rent_schedule import KnownIndexPoint

IndexResolver = Callable[[date], float]


def parse_known_index_points(points: Iterable[KnownIndexPoint], start_date: date) -> List[KnownIndexPoint]:
    """Positive points effective on or after start_date, sorted by date."""
    kept = [
        p for p in points
        if not math.isnan(p.index_value) and p.index_value > 0 and p.effective_date >= start_date
    ]
    return sorted(kept, key=lambda p: p.effective_date)


def compute_tcam(
    base_index_value: float,
    base_date: date,
    points: List[KnownIndexPoint],
) -> Optional[float]:
    """
    Compound annual growth rate from the base index to the furthest known point.
    None when there is no known point or no time elapses before it.
    """
    if not points or base_index_value <= 0:
        return None
    furthest = points[-1]
    years = years_between(base_date, furthest.effective_date)
    if years <= 0:
        return None
    return (furthest.index_value / base_index_value) ** (1.0 / years) - 1.0


def extrapolate_index(
    anchor_value: float,
    anchor_date: date,
    target_date: date,
    tcam: Optional[float],
) -> float:
    if not tcam:
        return anchor_value
    years = years_between(anchor_date, target_date)
    if years <= 0:
        return anchor_value
    return anchor_value * (1.0 + tcam) ** years


def build_index_resolver(
    base_index_value: float,
    base_date: date,
    points: List[KnownIndexPoint],
    tcam: Optional[float],
) -> IndexResolver:
    """
    Return resolve(d) -> index value for d.

    `points` must already be filtered and sorted (parse_known_index_points).
    base_index_value at base_date acts as the implicit first point.
    """
    def resolve(d: date) -> float:
        if not points:
            return extrapolate_index(base_index_value, base_date, d, tcam)
        last_known = points[-1]
        if d > last_known.effective_date:
            return extrapolate_index(last_known.index_value, last_known.effective_date, d, tcam)

        latest_value = base_index_value
        latest_date = base_date
        for p in points:
            if p.effective_date <= d and p.effective_date >= latest_date:
                latest_value = p.index_value
                latest_date = p.effective_date
        return latest_value

    return resolve
