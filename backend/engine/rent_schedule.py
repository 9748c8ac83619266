"""
Lease rent schedule: per-period valuation and yearly aggregation.

Takes a ScheduleInput, tiles it into calendar periods, prices each period
(indexed rent, escalated charges/taxes, franchise and incentive concessions)
and rolls the rows into calendar-year totals.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List

from pydantic import ValidationError

from engine.dates import add_years, full_years_since, quarter_of
from engine.errors import RentScheduleError
from engine.index_resolver import (
    IndexResolver,
    build_index_resolver,
    compute_tcam,
    parse_known_index_points,
)
from engine.rounding import round_currency, round_decimal
from engine.timeline import TimelinePeriod, build_timeline, months_per_period
from models.rent_schedule import (
    ComputeLeaseRentScheduleResult,
    ComputeLeaseRentScheduleSummary,
    PaymentFrequency,
    RentSchedulePeriod,
    ScheduleInput,
    YearlyTotalSummary,
)


# float residue left after consuming fractional franchise months
_BALANCE_EPSILON = 1e-9


@dataclass
class _YearBucket:
    base_rent: float = 0.0
    charges: float = 0.0
    taxes: float = 0.0
    franchise: float = 0.0
    incentives: float = 0.0
    net_rent: float = 0.0


def _validate(payload: Dict[str, Any] | ScheduleInput) -> ScheduleInput:
    if isinstance(payload, ScheduleInput):
        data = payload
    else:
        try:
            data = ScheduleInput.model_validate(payload)
        except ValidationError as e:
            raise RentScheduleError(f"Invalid schedule input: {e}") from e

    if data.end_date < data.start_date:
        raise RentScheduleError("end_date must be on or after start_date.")
    if data.base_index_value <= 0:
        raise RentScheduleError("base_index_value must be greater than zero.")
    # payment_frequency is checked by the PaymentFrequency enum and again in build_timeline
    if data.horizon_years <= 0:
        raise RentScheduleError("horizon_years must be greater than zero.")
    return data


def _indexed_amount(amount: float, proration: float, index_factor: float) -> float:
    if proration <= 0:
        return 0.0
    return round_currency(amount * proration * index_factor)


def _escalated_amount(amount: float, growth_rate: float, year_index: int, proration: float) -> float:
    """Charges/taxes: compounded once per full lease year, never indexed."""
    if proration <= 0:
        return 0.0
    base_for_year = amount * (1.0 + growth_rate) ** year_index
    return round_currency(base_for_year * proration)


def _value_period(
    data: ScheduleInput,
    period: TimelinePeriod,
    resolve_index: IndexResolver,
) -> Dict[str, float]:
    proration = period.proration
    index_value = resolve_index(period.billable_start)
    index_factor = index_value / data.base_index_value
    year_index = full_years_since(data.start_date, period.billable_start)
    growth = data.charges_growth_rate
    return {
        "index_value": index_value,
        "index_factor": index_factor,
        "office": _indexed_amount(data.office_rent_ht, proration, index_factor),
        "parking": _indexed_amount(data.parking_rent_ht, proration, index_factor),
        "other": _indexed_amount(data.other_costs_ht, proration, index_factor),
        "charges": _escalated_amount(data.charges_ht, growth, year_index, proration),
        "taxes": _escalated_amount(data.taxes_ht, growth, year_index, proration),
    }


def _accumulate(buckets: Dict[int, _YearBucket], row: RentSchedulePeriod) -> None:
    bucket = buckets.setdefault(row.year, _YearBucket())
    bucket.base_rent += row.office_rent_ht + row.parking_rent_ht + row.other_costs_ht
    bucket.charges += row.charges_ht
    bucket.taxes += row.taxes_ht
    bucket.franchise += row.franchise_ht
    bucket.incentives += row.incentives_ht
    bucket.net_rent += row.net_rent_ht


def _yearly_totals(buckets: Dict[int, _YearBucket]) -> List[YearlyTotalSummary]:
    return [
        YearlyTotalSummary(
            year=year,
            base_rent_ht=round_currency(b.base_rent),
            charges_ht=round_currency(b.charges),
            taxes_ht=round_currency(b.taxes),
            franchise_ht=round_currency(b.franchise),
            incentives_ht=round_currency(b.incentives),
            net_rent_ht=round_currency(b.net_rent),
        )
        for year, b in sorted(buckets.items())
    ]


def compute_deposit(data: ScheduleInput) -> float:
    """
    Deposit = deposit_months x monthly-equivalent of (office + parking + charges + taxes).

    Input amounts are per period, so they are divided by the months per period
    first. A caller passing monthly amounts on a quarterly lease gets a deposit
    three times too small; nothing here can detect that.
    """
    per_period = data.office_rent_ht + data.parking_rent_ht + data.charges_ht + data.taxes_ht
    monthly = per_period / months_per_period(data.payment_frequency)
    return round_currency(max(0.0, data.deposit_months) * monthly)


def compute_lease_rent_schedule(payload: Dict[str, Any] | ScheduleInput) -> ComputeLeaseRentScheduleResult:
    """
    Compute the period-by-period rent schedule and its summary.

    Raises RentScheduleError on invalid input or when the billable window is empty.
    """
    data = _validate(payload)
    horizon_cap_date: date = min(data.end_date, add_years(data.start_date, data.horizon_years))
    timeline = build_timeline(data.start_date, horizon_cap_date, data.payment_frequency)
    period_type = "month" if data.payment_frequency == PaymentFrequency.MONTHLY else "quarter"

    points = parse_known_index_points(data.known_index_points, data.start_date)
    tcam = compute_tcam(data.base_index_value, data.start_date, points)
    resolve_index = build_index_resolver(data.base_index_value, data.start_date, points, tcam)

    franchise_months_remaining = max(0.0, data.franchise_months)
    incentive_balance = max(0.0, data.incentive_amount)
    schedule: List[RentSchedulePeriod] = []
    buckets: Dict[int, _YearBucket] = {}

    for period in timeline:
        values = _value_period(data, period, resolve_index)
        office = values["office"]
        parking = values["parking"]

        franchise = 0.0
        if franchise_months_remaining > _BALANCE_EPSILON and period.months_equivalent > 0:
            months_applied = min(franchise_months_remaining, period.months_equivalent)
            franchise_months_remaining -= months_applied
            monthly_rent = office / period.months_equivalent + parking / period.months_equivalent
            franchise = -round_currency(monthly_rent * months_applied)

        incentives = 0.0
        if incentive_balance > 0:
            incentives = -round_currency(incentive_balance)
            incentive_balance = 0.0

        net = round_currency(
            office
            + parking
            + values["other"]
            + values["charges"]
            + values["taxes"]
            + franchise
            + incentives
        )

        row = RentSchedulePeriod(
            period_start=period.billable_start,
            period_end=period.billable_end,
            period_type=period_type,
            year=period.billable_start.year,
            month=period.billable_start.month if period_type == "month" else None,
            quarter=quarter_of(period.billable_start) if period_type == "quarter" else None,
            index_value=round_decimal(values["index_value"], 4),
            index_factor=round_decimal(values["index_factor"], 6),
            office_rent_ht=office,
            parking_rent_ht=parking,
            other_costs_ht=values["other"],
            charges_ht=values["charges"],
            taxes_ht=values["taxes"],
            franchise_ht=franchise + 0.0,
            incentives_ht=incentives + 0.0,
            net_rent_ht=net,
        )
        schedule.append(row)
        _accumulate(buckets, row)

    summary = ComputeLeaseRentScheduleSummary(
        deposit_ht=compute_deposit(data),
        tcam=round_decimal(tcam, 6) if tcam is not None else None,
        yearly_totals=_yearly_totals(buckets),
    )
    return ComputeLeaseRentScheduleResult(summary=summary, schedule=schedule)
