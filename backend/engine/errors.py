from __future__ import annotations


class RentScheduleError(ValueError):
    """Invalid schedule input. The caller must fix the input; nothing is retried."""
