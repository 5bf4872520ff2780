"""Tests for the pure computation layer shared by quotes and mutations."""

import pytest

from basket_amm.errors import WeightLimitExceeded
from basket_amm.fees import FeeSchedule
from basket_amm.models.assets import Asset
from basket_amm.models.state import WeightLimits
from basket_amm.pool.logic import (
    InvariantConfig,
    check_weights,
    compute_mint,
    compute_price,
    compute_swap,
    normalized_balances,
    recol_deduction,
    total_value,
)

UNIT = 10**18
LIMITS = WeightLimits(min=5 * 10**16, max=65 * 10**16)
FEES = FeeSchedule(swap_fee=6 * 10**14, redeem_fee=3 * 10**14, gov_fee_share=10**17)


def _assets(*balances: int) -> tuple[Asset, ...]:
    return tuple(
        Asset(asset_id=f"A{i}", ratio=10**8, vault_balance=balance)
        for i, balance in enumerate(balances)
    )


class TestViews:
    def test_total_value_matches_recomputation(self):
        assets = (
            Asset(asset_id="DAI", ratio=10**8, vault_balance=5 * UNIT),
            Asset(asset_id="USDC", ratio=10**20, vault_balance=7 * 10**6),
        )
        balances = normalized_balances(assets, [a.vault_balance for a in assets])
        assert balances == [5 * UNIT, 7 * UNIT]
        assert total_value(balances) == sum(a.normalized_balance for a in assets) == 12 * UNIT

    def test_check_weights_bounds_inclusive(self):
        check_weights([65, 30, 5], LIMITS)
        with pytest.raises(WeightLimitExceeded):
            check_weights([66, 30, 4], LIMITS)

    def test_empty_basket_passes(self):
        check_weights([0, 0, 0], LIMITS)

    def test_price(self):
        assert compute_price(_assets(UNIT, UNIT), 10_000, 2 * UNIT) == (UNIT, 2 * UNIT)


class TestComputeIsPure:
    def test_mint_does_not_touch_inputs(self):
        assets = _assets(UNIT * 10**6, UNIT * 10**6, UNIT * 10**6)
        config = InvariantConfig(supply=3 * UNIT * 10**6, a=10_000, limits=LIMITS)
        first = compute_mint(assets, 0, 1_000 * UNIT, config)
        second = compute_mint(assets, 0, 1_000 * UNIT, config)
        assert first == second
        assert assets[0].vault_balance == UNIT * 10**6

    def test_swap_reports_governance_share(self):
        assets = _assets(UNIT * 10**6, UNIT * 10**6, UNIT * 10**6)
        config = InvariantConfig(supply=3 * UNIT * 10**6, a=10_000, limits=LIMITS)
        result = compute_swap(assets, 0, 1, 1_000 * UNIT, config, FEES)
        assert result.gov_fee == result.fee * 10**17 // 10**18
        assert result.vault_balances[0] == UNIT * 10**6 + 1_000 * UNIT
        assert result.vault_balances[1] == UNIT * 10**6 - result.output


class TestRecolDeduction:
    """The recol fee is withheld only while D is below the supply."""

    def test_applies_below_supply(self):
        config = InvariantConfig(supply=100 * UNIT, a=10_000, limits=LIMITS, recol_fee=5 * 10**13)
        assert recol_deduction(1_000 * UNIT, 99 * UNIT, config) == 5 * 10**16

    @pytest.mark.parametrize("d0", [100 * UNIT, 101 * UNIT])
    def test_not_applied_at_or_above_supply(self, d0):
        config = InvariantConfig(supply=100 * UNIT, a=10_000, limits=LIMITS, recol_fee=5 * 10**13)
        assert recol_deduction(1_000 * UNIT, d0, config) == 0

    def test_unseeded_basket(self):
        config = InvariantConfig(supply=0, a=10_000, limits=LIMITS, recol_fee=5 * 10**13)
        assert recol_deduction(1_000 * UNIT, 0, config) == 0
