"""Tests for BasketPool.swap."""

import pytest

from basket_amm.errors import (
    AssetStatusInvalid,
    InvalidAsset,
    InvalidQuantity,
    PoolPaused,
    SlippageExceeded,
    WeightLimitExceeded,
)
from basket_amm.models.assets import AssetStatus
from tests.helpers import ALICE, DAI, GOVERNOR, SEED, UNIT, USDC, USDT, seeded_basket


class TestSwap:
    def test_swap_output_near_par(self, basket):
        """A small swap in a balanced basket returns the input minus about the fee."""
        out = basket.swap(DAI, USDC, 1_000 * UNIT, 0, ALICE)
        assert 999 * UNIT < out < 1_000 * UNIT

    def test_balances_move(self, basket):
        out = basket.swap(DAI, USDC, 1_000 * UNIT, 0, ALICE)
        assert basket.state.vault_balances == [SEED + 1_000 * UNIT, SEED - out, SEED]

    def test_supply_unchanged_and_fee_accrues(self, basket):
        basket.swap(DAI, USDC, 1_000 * UNIT, 0, ALICE)
        assert basket.total_supply == 3 * SEED
        # 0.06% of roughly 1000 units, 10% of it to governance
        assert 5 * 10**16 < basket.pending_fees < 7 * 10**16

    def test_fee_stays_in_basket(self, basket):
        _, d_before = basket.get_price()
        basket.swap(DAI, USDC, 1_000 * UNIT, 0, ALICE)
        _, d_after = basket.get_price()
        assert d_after > d_before

    def test_price_strictly_increases(self, basket):
        price_before, _ = basket.get_price()
        basket.swap(USDT, DAI, 20_000 * UNIT, 0, ALICE)
        price_after, _ = basket.get_price()
        assert price_after > price_before

    def test_quote_matches_execution(self, basket):
        quote = basket.get_swap_output(USDC, USDT, 7_777 * UNIT)
        assert basket.swap(USDC, USDT, 7_777 * UNIT, quote, ALICE) == quote

    def test_zero_fee_swap_keeps_pending(self):
        pool = seeded_basket(swap_fee=0)
        pool.swap(DAI, USDC, 1_000 * UNIT, 0, ALICE)
        assert pool.pending_fees == 0

    def test_six_decimal_output(self):
        pool = seeded_basket(
            amounts=[SEED, 1_000_000 * 10**6, 1_000_000 * 10**6], decimals=[18, 6, 6]
        )
        out = pool.swap(DAI, USDC, 1_000 * UNIT, 0, ALICE)
        assert 999 * 10**6 < out < 1_000 * 10**6

    def test_same_asset(self, basket):
        with pytest.raises(InvalidAsset, match="Invalid pair"):
            basket.swap(DAI, DAI, UNIT, 0, ALICE)

    def test_zero_amount(self, basket):
        with pytest.raises(InvalidQuantity):
            basket.swap(DAI, USDC, 0, 0, ALICE)

    def test_slippage(self, basket):
        quote = basket.get_swap_output(DAI, USDC, 1_000 * UNIT)
        state = basket.state
        with pytest.raises(SlippageExceeded):
            basket.swap(DAI, USDC, 1_000 * UNIT, quote + 1, ALICE)
        assert basket.state == state

    def test_weight_limit(self, basket):
        """Draining USDC below 5% reverts and leaves the basket untouched."""
        state = basket.state
        with pytest.raises(WeightLimitExceeded):
            basket.get_swap_output(DAI, USDC, 900_000 * UNIT)
        with pytest.raises(WeightLimitExceeded):
            basket.swap(DAI, USDC, 900_000 * UNIT, 0, ALICE)
        assert basket.state == state

    def test_oversized_input_is_a_weight_error(self, basket):
        """An input dwarfing the basket fails on weight before the curve is solved."""
        state = basket.state
        with pytest.raises(WeightLimitExceeded, match="above"):
            basket.get_swap_output(DAI, USDC, 10**13 * UNIT)
        with pytest.raises(WeightLimitExceeded, match="above"):
            basket.swap(DAI, USDC, 10**13 * UNIT, 0, ALICE)
        assert basket.state == state

    def test_broken_input_rejected(self, basket):
        basket.set_asset_status(DAI, AssetStatus.BROKEN_ABOVE_PEG, caller=GOVERNOR)
        with pytest.raises(AssetStatusInvalid):
            basket.swap(DAI, USDC, UNIT, 0, ALICE)

    def test_broken_output_allowed(self, basket):
        basket.set_asset_status(DAI, AssetStatus.BROKEN_BELOW_PEG, caller=GOVERNOR)
        assert basket.swap(USDC, DAI, 1_000 * UNIT, 0, ALICE) > 0

    def test_paused(self, basket):
        basket.pause(caller=GOVERNOR)
        with pytest.raises(PoolPaused):
            basket.get_swap_output(DAI, USDC, UNIT)
        with pytest.raises(PoolPaused):
            basket.swap(DAI, USDC, UNIT, 0, ALICE)
