# masonry_support/precision.py
"""
Rounding contract for returned numeric fields.

Every value that leaves a calculation stage is rounded to exactly 12 decimal
places. Intermediates inside a stage stay at full float precision; only the
returned fields go through round12().
"""

import math
from typing import Optional

DECIMALS = 12


def round12(value: Optional[float]) -> float:
    """Round to 12 decimal places. None and NaN collapse to 0.0."""
    if value is None:
        return 0.0
    value = float(value)
    if math.isnan(value):
        return 0.0
    return round(value, DECIMALS)


def round_dict(values: dict) -> dict:
    """Apply round12 to every float in a flat result dict (bools and strings pass through)."""
    out = {}
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            out[key] = value
        else:
            out[key] = round12(value)
    return out


def ceil_to(value: float, step: float) -> float:
    """Round up to the next multiple of step (5 mm increments throughout)."""
    return math.ceil(value / step) * step


def floor_to(value: float, step: float) -> float:
    return math.floor(value / step) * step
