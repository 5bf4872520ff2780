"""Ratio normalization between raw asset units and the accounting unit.

Each asset carries a ``ratio`` scaled by ``RATIO_SCALE`` (1e8). For a plain
token with ``d`` decimals the ratio is ``10**(26 - d)``, so an 18-decimal
token has ratio 1e8 and a 6-decimal token (USDC) has ratio 1e20. Assets that
are not 1:1 with the accounting unit fold their exchange rate into the ratio.

Rounding policy: every boundary favours the pool.

- ``normalize``: value coming in, rounded down
- ``normalize_up``: value going out for an exact-output request, rounded up
- ``denormalize``: output owed to the caller, rounded down
- ``denormalize_up``: input owed by the caller, rounded up
"""

from basket_amm.errors import InvalidConfiguration
from basket_amm.math.fixed_point import ONE_18, RATIO_SCALE


def _check_ratio(ratio: int) -> None:
    if ratio <= 0:
        raise InvalidConfiguration(f"Ratio must be positive, got {ratio}")


def normalize(raw_amount: int, ratio: int) -> int:
    """Convert a raw amount to normalized units, rounding down.

    Args:
        raw_amount: Amount in the asset's native units
        ratio: Asset ratio (scaled by 1e8)

    Returns:
        Amount in 18-decimal accounting units

    Raises:
        InvalidConfiguration: If ratio <= 0
    """
    _check_ratio(ratio)
    return (raw_amount * ratio) // RATIO_SCALE


def normalize_up(raw_amount: int, ratio: int) -> int:
    """Convert a raw amount to normalized units, rounding up."""
    _check_ratio(ratio)
    product = raw_amount * ratio
    if product == 0:
        return 0
    return (product - 1) // RATIO_SCALE + 1


def denormalize(units: int, ratio: int) -> int:
    """Convert normalized units back to raw units, rounding down.

    Used for amounts paid out to the caller.
    """
    _check_ratio(ratio)
    return (units * RATIO_SCALE) // ratio


def denormalize_up(units: int, ratio: int) -> int:
    """Convert normalized units back to raw units, rounding up.

    Used for amounts the caller must pay in.
    """
    _check_ratio(ratio)
    scaled = units * RATIO_SCALE
    if scaled == 0:
        return 0
    return (scaled - 1) // ratio + 1


def ratio_for(decimals: int, exchange_rate: int = ONE_18) -> int:
    """Build an asset ratio from its decimals and exchange rate.

    Args:
        decimals: Token decimals (0..26)
        exchange_rate: Value of one whole token in accounting units, 1e18-scaled.
            1e18 for 1:1 assets; e.g. 3e18 for an asset redeemable for 3 units.

    Returns:
        Ratio scaled by 1e8

    Raises:
        InvalidConfiguration: If decimals are out of range or the rate is not positive
    """
    if decimals < 0 or decimals > 26:
        raise InvalidConfiguration(f"Decimals must be in [0, 26], got {decimals}")
    if exchange_rate <= 0:
        raise InvalidConfiguration(f"Exchange rate must be positive, got {exchange_rate}")
    return (10 ** (26 - decimals) * exchange_rate) // ONE_18
