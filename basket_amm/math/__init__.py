"""Mathematical utilities for basket accounting.

This package provides integer fixed-point primitives:
- 1e18 accounting unit, 1e8 ratio scale, amplification precision
- helpers with explicit rounding direction
"""

from basket_amm.math.fixed_point import (
    A_PRECISION,
    ONE_18,
    RATIO_SCALE,
    div_precisely,
    div_up,
    mul_truncate,
    weight_of,
)

__all__ = [
    "ONE_18",
    "RATIO_SCALE",
    "A_PRECISION",
    "mul_truncate",
    "div_up",
    "div_precisely",
    "weight_of",
]
