"""
Extracted lease fields -> ScheduleInput.

Extraction gives annual or quarterly figures; the engine wants amounts per
payment period. This module does that conversion, picks the start date and
index inputs, and returns None when the fields are not enough to build a
schedule. Set DEFAULT_HORIZON_YEARS to change how many years are projected.
"""
from __future__ import annotations

import logging
import os
from datetime import date
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from engine.dates import add_years
from engine.rent_schedule import compute_lease_rent_schedule
from engine.rounding import round_currency, round_decimal
from models.lease_fields import IndexSeriesPoint, LeaseScheduleFields
from models.rent_schedule import ComputeLeaseRentScheduleResult, PaymentFrequency, ScheduleInput
from services.index_series import build_index_inputs_for_lease, select_index_series

_LOG = logging.getLogger("uvicorn.error")


def _env_int(name: str, default: int) -> int:
    try:
        return max(1, int(os.environ.get(name, default)))
    except (TypeError, ValueError):
        return default


DEFAULT_HORIZON_YEARS = _env_int("DEFAULT_HORIZON_YEARS", 3)


def _per_period(
    annual: Optional[float],
    quarterly: Optional[float],
    frequency: PaymentFrequency,
) -> Optional[float]:
    """Quarterly leases prefer the quarterly figure, monthly leases the annual one."""
    if frequency == PaymentFrequency.QUARTERLY:
        if quarterly is not None:
            return quarterly
        if annual is not None:
            return annual / 4
        return None
    if annual is not None:
        return annual / 12
    if quarterly is not None:
        return quarterly / 3
    return None


def derive_base_rent_per_period(
    fields: LeaseScheduleFields,
    frequency: PaymentFrequency,
) -> Tuple[Optional[float], Optional[float]]:
    """Return (office_rent_per_period, parking_rent_per_period), rounded to cents."""
    office = _per_period(
        fields.annual_rent_excl_tax_excl_charges,
        fields.quarterly_rent_excl_tax_excl_charges,
        frequency,
    )
    parking = _per_period(
        fields.annual_parking_rent_excl_charges,
        fields.quarterly_parking_rent_excl_charges,
        frequency,
    )
    return (
        round_currency(office) if office is not None else None,
        round_currency(parking) if parking is not None else None,
    )


def derive_charges_and_taxes_per_period(
    fields: LeaseScheduleFields,
    frequency: PaymentFrequency,
) -> Tuple[Optional[float], Optional[float]]:
    """
    Return (charges_per_period, taxes_per_period), rounded to cents.
    Taxes are property tax + office tax, both given as annual amounts.
    """
    charges = _per_period(
        fields.annual_charges_provision_excl_tax,
        fields.quarterly_charges_provision_excl_tax,
        frequency,
    )
    taxes = None
    if fields.property_tax_amount is not None or fields.office_tax_amount is not None:
        annual_taxes = (fields.property_tax_amount or 0.0) + (fields.office_tax_amount or 0.0)
        taxes = annual_taxes / (4 if frequency == PaymentFrequency.QUARTERLY else 12)
    return (
        round_currency(charges) if charges is not None else None,
        round_currency(taxes) if taxes is not None else None,
    )


def _end_date(start: date, duration_years: float) -> date:
    return add_years(start, max(1, int(duration_years)))


def build_schedule_input(
    fields: LeaseScheduleFields | Dict[str, Any],
    series_by_type: Mapping[Any, Sequence[IndexSeriesPoint | Dict[str, Any]]],
) -> Optional[ScheduleInput]:
    """
    Build the engine input from extracted fields and the available index series.
    Returns None when start date, payment frequency, base index or office rent is missing.
    """
    if not isinstance(fields, LeaseScheduleFields):
        fields = LeaseScheduleFields.model_validate(fields)

    start = fields.effective_date or fields.signature_date or fields.extraction_date
    if start is None:
        return None
    if fields.payment_frequency not in ("monthly", "quarterly"):
        return None
    frequency = PaymentFrequency(fields.payment_frequency)

    horizon_years = DEFAULT_HORIZON_YEARS
    series = select_index_series(series_by_type, fields.indexation_type)
    base_index_value, known_index_points = build_index_inputs_for_lease(start, horizon_years, series)
    if not base_index_value:
        return None

    office, parking = derive_base_rent_per_period(fields, frequency)
    if not office:
        return None
    charges, taxes = derive_charges_and_taxes_per_period(fields, frequency)

    franchise_months = 0
    if fields.rent_free_period_months and fields.rent_free_period_months > 0:
        franchise_months = int(round_decimal(fields.rent_free_period_months, 0))

    duration_years = fields.duration_years if fields.duration_years is not None else horizon_years
    return ScheduleInput(
        start_date=start,
        end_date=_end_date(start, duration_years),
        payment_frequency=frequency,
        base_index_value=base_index_value,
        known_index_points=known_index_points,
        office_rent_ht=office,
        parking_rent_ht=parking or 0.0,
        charges_ht=charges or 0.0,
        taxes_ht=taxes or 0.0,
        franchise_months=franchise_months,
        horizon_years=horizon_years,
    )


def compute_schedule_from_fields(
    fields: LeaseScheduleFields | Dict[str, Any],
    series_by_type: Mapping[Any, Sequence[IndexSeriesPoint | Dict[str, Any]]],
) -> Optional[ComputeLeaseRentScheduleResult]:
    """Build the input and run the engine; None when the fields are insufficient."""
    schedule_input = build_schedule_input(fields, series_by_type)
    if schedule_input is None:
        _LOG.info("SCHEDULE_SKIPPED reason=insufficient_fields")
        return None
    return compute_lease_rent_schedule(schedule_input)
