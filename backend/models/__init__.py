"""Pydantic models. Re-exported so callers can `from models import ScheduleInput`."""

from models.rent_schedule import (
    ComputeLeaseRentScheduleResult,
    ComputeLeaseRentScheduleSummary,
    KnownIndexPoint,
    PaymentFrequency,
    RentSchedulePeriod,
    ScheduleInput,
    YearlyTotalSummary,
)
from models.lease_fields import (
    IndexSeriesPoint,
    LeaseIndexType,
    LeaseScheduleFields,
    ScheduleFromFieldsRequest,
)

__all__ = [
    "ComputeLeaseRentScheduleResult",
    "ComputeLeaseRentScheduleSummary",
    "IndexSeriesPoint",
    "KnownIndexPoint",
    "LeaseIndexType",
    "LeaseScheduleFields",
    "PaymentFrequency",
    "RentSchedulePeriod",
    "ScheduleFromFieldsRequest",
    "ScheduleInput",
    "YearlyTotalSummary",
]
