"""Monetary rounding applied at the report boundary."""

from decimal import Decimal, ROUND_HALF_UP

import pandas as pd

CENT = Decimal("0.01")


def round_money(value: float | None) -> float:
    """
    Round to 2 decimals, half-up.

    Uses the shortest repr of the float so that 2.675 rounds to 2.68
    rather than inheriting the binary representation error.
    Call only on final values; sums must be accumulated unrounded.
    """
    if value is None or pd.isna(value):
        return 0.0
    return float(Decimal(repr(float(value))).quantize(CENT, rounding=ROUND_HALF_UP))
