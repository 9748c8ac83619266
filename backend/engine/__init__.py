"""Lease rent schedule engine."""

from engine.errors import RentScheduleError
from engine.rent_schedule import compute_lease_rent_schedule

__all__ = [
    "RentScheduleError",
    "compute_lease_rent_schedule",
]
