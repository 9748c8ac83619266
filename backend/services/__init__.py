"""Backend services."""

from services.index_series import (
    build_index_inputs_for_lease,
    select_index_series,
)
from services.schedule_input import (
    build_schedule_input,
    compute_schedule_from_fields,
)

__all__ = [
    "build_index_inputs_for_lease",
    "select_index_series",
    "build_schedule_input",
    "compute_schedule_from_fields",
]
