"""
Timeline builder: tiles the billable window into calendar-aligned periods.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List

from engine.dates import (
    add_months,
    days_inclusive,
    end_of_month,
    end_of_quarter,
    start_of_month,
    start_of_quarter,
)
from engine.errors import RentScheduleError
from models.rent_schedule import PaymentFrequency

MONTHS_PER_PERIOD = {
    PaymentFrequency.MONTHLY: 1,
    PaymentFrequency.QUARTERLY: 3,
}


@dataclass(frozen=True)
class TimelinePeriod:
    """One calendar period of the schedule, anchor bounds plus the billed slice of it."""
    anchor_start: date
    anchor_end: date
    billable_start: date
    billable_end: date
    total_days: int
    billable_days: int
    months_equivalent: float

    @property
    def proration(self) -> float:
        if self.total_days <= 0:
            return 0.0
        return self.billable_days / self.total_days


def months_per_period(payment_frequency: PaymentFrequency | str) -> int:
    try:
        return MONTHS_PER_PERIOD[PaymentFrequency(payment_frequency)]
    except ValueError as e:
        raise RentScheduleError(
            "payment_frequency must be either 'monthly' or 'quarterly'."
        ) from e


def _align_to_period_start(d: date, payment_frequency: PaymentFrequency) -> date:
    if payment_frequency == PaymentFrequency.MONTHLY:
        return start_of_month(d)
    return start_of_quarter(d)


def _end_of_period(d: date, payment_frequency: PaymentFrequency) -> date:
    if payment_frequency == PaymentFrequency.MONTHLY:
        return end_of_month(d)
    return end_of_quarter(d)


def build_timeline(
    start_date: date,
    horizon_cap_date: date,
    payment_frequency: PaymentFrequency | str,
) -> List[TimelinePeriod]:
    """
    Periods covering [start_date, horizon_cap_date], ordered by start.

    The first anchor is the month or quarter containing start_date, so a lease
    starting mid-period gets a partial first period. The last anchor is clipped
    to horizon_cap_date and its day count uses the clipped anchor.
    Raises RentScheduleError when nothing is billable.
    """
    step = months_per_period(payment_frequency)
    frequency = PaymentFrequency(payment_frequency)
    periods: List[TimelinePeriod] = []

    anchor_start = _align_to_period_start(start_date, frequency)
    while anchor_start <= horizon_cap_date:
        anchor_end = min(_end_of_period(anchor_start, frequency), horizon_cap_date)
        billable_start = max(anchor_start, start_date)
        billable_end = anchor_end
        if billable_start > billable_end:
            break

        total_days = days_inclusive(anchor_start, anchor_end)
        billable_days = days_inclusive(billable_start, billable_end)
        periods.append(
            TimelinePeriod(
                anchor_start=anchor_start,
                anchor_end=anchor_end,
                billable_start=billable_start,
                billable_end=billable_end,
                total_days=total_days,
                billable_days=billable_days,
                months_equivalent=step * (billable_days / total_days),
            )
        )

        if anchor_end >= horizon_cap_date:
            break
        anchor_start = add_months(anchor_start, step)

    if not periods:
        raise RentScheduleError("No billable periods found within the provided horizon.")
    return periods
