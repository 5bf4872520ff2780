"""Randomized property tests for basket and feeder pools.

Each test drives a seeded pool through a reproducible random sequence of
operations and checks a property after every step.
"""

import random

import pytest

from basket_amm.errors import BasketError
from tests.helpers import (
    ALICE,
    BASE_ASSETS,
    BUSD,
    DAI,
    MUSD,
    UNIT,
    USDC,
    feeder_scenario,
    seeded_basket,
)

SEEDS = [1, 7, 42, 1234]
STEPS = 40


def random_op(rng: random.Random, assets=BASE_ASSETS) -> tuple[str, tuple]:
    """Pick an operation and its arguments (amounts in whole units)."""
    kind = rng.choice(["mint", "swap", "redeem"])
    amount = rng.randint(1, 200_000) * UNIT
    if kind == "swap":
        return kind, (rng.choice(assets), rng.choice(assets), amount)
    return kind, (rng.choice(assets), amount)


def quote(pool, kind: str, args: tuple) -> int:
    if kind == "mint":
        return pool.get_mint_output(*args)
    if kind == "swap":
        return pool.get_swap_output(*args)
    return pool.get_redeem_output(*args)


def execute(pool, kind: str, args: tuple) -> int:
    return getattr(pool, kind)(*args, 0, ALICE)


def price(pool) -> int:
    return pool.get_price()[0]


class TestPriceMonotonic:
    """The basket token price never decreases."""

    @pytest.mark.parametrize("seed", SEEDS)
    def test_random_sequence(self, seed):
        rng = random.Random(seed)
        pool = seeded_basket()
        last = price(pool)
        for _ in range(STEPS):
            kind, args = random_op(rng)
            try:
                execute(pool, kind, args)
            except BasketError:
                continue
            current = price(pool)
            assert current >= last - 1
            last = current


class TestQuoteParity:
    """A quote predicts the executed output, or the error execution raises."""

    @pytest.mark.parametrize("seed", SEEDS)
    def test_base_basket(self, seed):
        rng = random.Random(seed)
        pool = seeded_basket()
        for _ in range(STEPS):
            kind, args = random_op(rng)
            state = pool.state
            try:
                expected = quote(pool, kind, args)
            except BasketError as err:
                with pytest.raises(type(err)):
                    execute(pool, kind, args)
                assert pool.state == state
                continue
            assert execute(pool, kind, args) == expected

    @pytest.mark.parametrize("seed", SEEDS)
    def test_feeder_with_routing(self, seed):
        """Routed feeder operations quote exactly across both pools."""
        rng = random.Random(seed)
        base, feeder = feeder_scenario()
        assets = [MUSD, BUSD, DAI, USDC]
        for _ in range(STEPS):
            kind, args = random_op(rng, assets)
            states = (base.state, feeder.state)
            try:
                expected = quote(feeder, kind, args)
            except BasketError as err:
                with pytest.raises(type(err)):
                    execute(feeder, kind, args)
                assert (base.state, feeder.state) == states
                continue
            assert execute(feeder, kind, args) == expected


class TestRoundTrip:
    """Minting then redeeming the same asset never returns more than was deposited."""

    @pytest.mark.parametrize("amount", [1_000 * UNIT, 50_000 * UNIT, 200_000 * UNIT])
    @pytest.mark.parametrize("asset", BASE_ASSETS)
    def test_mint_then_redeem(self, asset, amount):
        pool = seeded_basket()
        lp = pool.mint(asset, amount, 0, ALICE)
        output = pool.redeem(asset, lp, 0, ALICE)
        assert output <= amount
        assert amount - output <= amount * 5 // 10_000

    def test_swap_there_and_back(self):
        """A swap and its reverse lose at least the fees."""
        pool = seeded_basket()
        received = pool.swap(DAI, USDC, 10_000 * UNIT, 0, ALICE)
        returned = pool.swap(USDC, DAI, received, 0, ALICE)
        assert returned < 10_000 * UNIT
