"""Fee helpers for basket pools.

Stateless functions consumed by the pool logic. Fees are 1e18-scaled rates;
collected fees are denominated in basket-token units and stay inside the
basket's value. A ``gov_fee_share`` fraction of each fee is recorded in
``pending_fees`` and later minted to governance by the sweep.
"""

from __future__ import annotations

from dataclasses import dataclass

from basket_amm.constants import MAX_FEE, MAX_GOV_FEE_SHARE, MAX_RECOL_FEE
from basket_amm.errors import InvalidConfiguration
from basket_amm.math.fixed_point import ONE_18, div_up, mul_truncate


@dataclass(frozen=True)
class FeeSchedule:
    """Fee configuration of a basket.

    Attributes:
        swap_fee: Rate charged on swaps (e.g. 6e14 for 0.06%)
        redeem_fee: Rate charged on redemptions
        gov_fee_share: Fraction of each fee accrued to governance
        recol_fee: Rate withheld from mints, swaps and redemptions while the
            basket is under-collateralised (price below 1)
    """

    swap_fee: int
    redeem_fee: int
    gov_fee_share: int
    recol_fee: int = 0

    def __post_init__(self) -> None:
        validate_fees(self.swap_fee, self.redeem_fee, self.gov_fee_share, self.recol_fee)


def validate_fees(swap_fee: int, redeem_fee: int, gov_fee_share: int, recol_fee: int = 0) -> None:
    """Check fee rates against protocol bounds.

    Raises:
        InvalidConfiguration: If any rate is negative or above its cap
    """
    if swap_fee < 0 or swap_fee > MAX_FEE:
        raise InvalidConfiguration("Swap rate oob")
    if redeem_fee < 0 or redeem_fee > MAX_FEE:
        raise InvalidConfiguration("Redemption rate oob")
    if gov_fee_share < 0 or gov_fee_share > MAX_GOV_FEE_SHARE:
        raise InvalidConfiguration("Gov fee rate oob")
    if recol_fee < 0 or recol_fee > MAX_RECOL_FEE:
        raise InvalidConfiguration("Recol rate oob")


def apply_fee(raw_amount: int, fee_rate: int) -> tuple[int, int]:
    """Split an amount into net amount and fee.

    The fee rounds down, so ``net + fee == raw_amount`` always holds.

    Args:
        raw_amount: Amount before fee
        fee_rate: 1e18-scaled rate

    Returns:
        Tuple of (net_amount, fee_amount)
    """
    fee = mul_truncate(raw_amount, fee_rate)
    return raw_amount - fee, fee


def gross_up_fee(net_amount: int, fee_rate: int) -> int:
    """Fee needed on top of ``net_amount`` so that the fee is ``fee_rate`` of the total.

    ``fee = net * rate / (1 - rate)``, rounded up.
    """
    if fee_rate == 0:
        return 0
    return div_up(net_amount * fee_rate, ONE_18 - fee_rate)


def governance_share(fee_amount: int, gov_fee_share: int) -> int:
    """Portion of a collected fee owed to governance (rounded down)."""
    return mul_truncate(fee_amount, gov_fee_share)


def accrue_governance(pending_fees: int, fee_amount: int, gov_fee_share: int) -> int:
    """Return ``pending_fees`` after crediting the governance share of a fee."""
    return pending_fees + governance_share(fee_amount, gov_fee_share)
