"""Fixed-point helpers for basket accounting.

All engine values are integers. Three scales are in use:

- ``ONE_18``: fees, weights, prices and normalized balances (18 decimals)
- ``RATIO_SCALE``: asset ratios, so ``normalized = raw * ratio // RATIO_SCALE``
- ``A_PRECISION``: the amplification coefficient is stored multiplied by 100

Every helper states its rounding direction in its name. Callers pick the
direction that favours the pool.
"""

from __future__ import annotations

__all__ = [
    # Constants
    "ONE_18",
    "RATIO_SCALE",
    "A_PRECISION",
    # Functions
    "mul_truncate",
    "div_up",
    "div_precisely",
    "weight_of",
]

# =============================================================================
# Constants
# =============================================================================

ONE_18 = 10**18

# A ratio of 10^8 maps an 18-decimal 1:1 asset onto the accounting unit unchanged
RATIO_SCALE = 10**8

# A=100 is stored as 10_000
A_PRECISION = 100


# =============================================================================
# Functions
# =============================================================================


def mul_truncate(x: int, y: int) -> int:
    """Multiply two 1e18-scaled values, rounding down: ``x * y // 1e18``."""
    return (x * y) // ONE_18


def div_up(numerator: int, denominator: int) -> int:
    """Integer division rounding up.

    Raises:
        ZeroDivisionError: If denominator is zero
    """
    if denominator == 0:
        raise ZeroDivisionError("div_up by zero")
    if numerator == 0:
        return 0
    return (numerator - 1) // denominator + 1


def div_precisely(x: int, y: int) -> int:
    """Divide keeping 18 decimals of precision: ``x * 1e18 // y``."""
    if y == 0:
        raise ZeroDivisionError("div_precisely by zero")
    return (x * ONE_18) // y


def weight_of(balance: int, total: int) -> int:
    """Share of ``balance`` in ``total`` as a 1e18-scaled fraction (rounded down)."""
    if total == 0:
        return 0
    return (balance * ONE_18) // total
