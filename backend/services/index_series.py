"""
Index series -> engine index inputs.

The series itself (INSEE ILAT / ILC / ICC quarterly publications) is sourced
elsewhere and handed in as plain points. This module picks the series for a
lease's index type and turns it into base_index_value + known_index_points
dated on the lease anniversaries.
Set DEFAULT_INDEX_TYPE (ILAT, ILC or ICC) to change the fallback series.
"""
from __future__ import annotations

import logging
import os
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from engine.dates import add_years, quarter_of
from models.lease_fields import IndexSeriesPoint, LeaseIndexType, coerce_index_type
from models.rent_schedule import KnownIndexPoint

_LOG = logging.getLogger("uvicorn.error")

DEFAULT_INDEX_TYPE = coerce_index_type(os.environ.get("DEFAULT_INDEX_TYPE", "ILAT")) or LeaseIndexType.ILAT


def _to_points(rows: Sequence[IndexSeriesPoint | Dict[str, Any]]) -> List[IndexSeriesPoint]:
    points = [r if isinstance(r, IndexSeriesPoint) else IndexSeriesPoint.model_validate(r) for r in rows]
    return sorted(points, key=lambda p: (p.year, p.quarter))


def select_index_series(
    series_by_type: Mapping[Any, Sequence[IndexSeriesPoint | Dict[str, Any]]],
    index_type: LeaseIndexType | str | None = None,
) -> List[IndexSeriesPoint]:
    """
    Points of the requested index type, sorted by (year, quarter).

    Falls back to DEFAULT_INDEX_TYPE when the requested type has no data.
    """
    by_type: Dict[LeaseIndexType, Sequence[Any]] = {}
    for key, rows in (series_by_type or {}).items():
        it = coerce_index_type(key)
        if it is not None:
            by_type[it] = rows

    requested = coerce_index_type(index_type) or DEFAULT_INDEX_TYPE
    rows = by_type.get(requested) or []
    if not rows and requested != DEFAULT_INDEX_TYPE:
        _LOG.warning(
            "INDEX_SERIES_FALLBACK requested=%s has no data; using %s",
            requested.value,
            DEFAULT_INDEX_TYPE.value,
        )
        rows = by_type.get(DEFAULT_INDEX_TYPE) or []
    return _to_points(rows)


def build_index_inputs_for_lease(
    effective_date: Optional[date],
    horizon_years: int,
    series: Sequence[IndexSeriesPoint | Dict[str, Any]],
    today: Optional[date] = None,
) -> Tuple[Optional[float], List[KnownIndexPoint]]:
    """
    Return (base_index_value, known_index_points) for a lease.

    Base value is the publication for the quarter containing the effective
    date, or the latest publication when that quarter is not out yet. Known
    points are the same quarter's publication for each year up to
    base year + horizon, dated on the lease anniversary. Only anniversary
    quarters are used, not every quarter.
    """
    points = _to_points(series)
    if not points:
        return None, []

    base_date = effective_date or today or date.today()
    base_year = base_date.year
    base_quarter = quarter_of(base_date)
    by_period = {(p.year, p.quarter): p for p in points}

    base_row = by_period.get((base_year, base_quarter)) or points[-1]
    horizon_end_year = base_year + max(1, int(horizon_years))

    known: List[KnownIndexPoint] = []
    for year in range(base_year, horizon_end_year + 1):
        row = by_period.get((year, base_quarter))
        if row is None:
            continue
        known.append(
            KnownIndexPoint(
                effective_date=add_years(base_date, year - base_year),
                index_value=row.value,
            )
        )
    return base_row.value, known
