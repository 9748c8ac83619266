"""Rounding used for every amount the engine emits."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def round_decimal(value: float, precision: int) -> float:
    """
    Round half-up to `precision` decimals.

    Goes through the shortest repr of the float so 1.005 rounds to 1.01
    instead of truncating on its binary value.
    """
    quantum = Decimal(1).scaleb(-precision)
    rounded = float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))
    # never emit -0.0
    return rounded + 0.0


def round_currency(value: float) -> float:
    return round_decimal(value, 2)
