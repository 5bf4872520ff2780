"""Factory functions for creating pools in tests.

Usage:
    from tests.helpers import make_basket, seeded_basket

    pool = seeded_basket()  # three 18-decimal assets, 1M units each
"""

from collections.abc import Sequence

from basket_amm.constants import (
    DEFAULT_GOV_FEE_SHARE,
    DEFAULT_MAX_WEIGHT,
    DEFAULT_MIN_WEIGHT,
    DEFAULT_REDEEM_FEE,
    DEFAULT_SWAP_FEE,
)
from basket_amm.fees import FeeSchedule
from basket_amm.models.assets import Asset
from basket_amm.models.state import AmpData, BasketState, WeightLimits
from basket_amm.normalizer import ratio_for
from basket_amm.pool.basket import BasketPool
from basket_amm.pool.feeder import FeederPool
from basket_amm.ratio_provider import RatioProvider
from tests.helpers.constants import BASE_ASSETS, BUSD, FEEDER, GOVERNOR, MUSD, SEED, T0


class FakeClock:
    """Settable clock for amplification ramp tests."""

    def __init__(self, now: int = T0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


def make_state(
    asset_ids: Sequence[str] = BASE_ASSETS,
    decimals: Sequence[int] | None = None,
    a: int = 100,
    min_weight: int = DEFAULT_MIN_WEIGHT,
    max_weight: int = DEFAULT_MAX_WEIGHT,
    swap_fee: int = DEFAULT_SWAP_FEE,
    redeem_fee: int = DEFAULT_REDEEM_FEE,
    gov_fee_share: int = DEFAULT_GOV_FEE_SHARE,
    recol_fee: int = 0,
) -> BasketState:
    """Create an unseeded basket state."""
    decimals = decimals or [18] * len(asset_ids)
    return BasketState(
        assets=tuple(
            Asset(asset_id=asset_id, ratio=ratio_for(dec))
            for asset_id, dec in zip(asset_ids, decimals, strict=True)
        ),
        amp=AmpData.fixed(a),
        limits=WeightLimits(min=min_weight, max=max_weight),
        fees=FeeSchedule(
            swap_fee=swap_fee,
            redeem_fee=redeem_fee,
            gov_fee_share=gov_fee_share,
            recol_fee=recol_fee,
        ),
    )


def make_basket(
    pool_id: str = MUSD,
    clock: FakeClock | None = None,
    ratio_provider: RatioProvider | None = None,
    **state_kwargs,
) -> BasketPool:
    """Create an unseeded base basket governed by GOVERNOR."""
    return BasketPool(
        pool_id,
        make_state(**state_kwargs),
        GOVERNOR,
        ratio_provider=ratio_provider,
        clock=clock or FakeClock(),
    )


def seed(pool: BasketPool, amounts: Sequence[int]) -> int:
    """Seed a pool with a multi-asset deposit; returns basket tokens minted."""
    return pool.mint_multi(list(range(len(amounts))), list(amounts), 0, "seeder")


def seeded_basket(amounts: Sequence[int] | None = None, **kwargs) -> BasketPool:
    """Create a base basket seeded with ``amounts`` (default SEED of each asset)."""
    pool = make_basket(**kwargs)
    seed(pool, amounts or [SEED] * len(pool.assets))
    return pool


def make_feeder(
    base: BasketPool,
    a: int = 300,
    min_weight: int = 2 * 10**17,
    max_weight: int = 8 * 10**17,
    swap_fee: int = 8 * 10**14,
    redeem_fee: int = 6 * 10**14,
    gov_fee_share: int = 10**17,
    feeder_asset: str = BUSD,
    feeder_decimals: int = 18,
    clock: FakeClock | None = None,
) -> FeederPool:
    """Create an unseeded feeder pool on top of ``base``."""
    state = make_state(
        asset_ids=(base.token_id, feeder_asset),
        decimals=(18, feeder_decimals),
        a=a,
        min_weight=min_weight,
        max_weight=max_weight,
        swap_fee=swap_fee,
        redeem_fee=redeem_fee,
        gov_fee_share=gov_fee_share,
    )
    return FeederPool(FEEDER, state, GOVERNOR, base, clock=clock or FakeClock())


def feeder_scenario(
    feeder_seed: Sequence[int] = (400_000 * 10**18, 600_000 * 10**18),
) -> tuple[BasketPool, FeederPool]:
    """Base basket (swap 6e14, redeem 3e14) and a seeded feeder (A=300, [20%, 80%])."""
    base = seeded_basket(swap_fee=6 * 10**14, redeem_fee=3 * 10**14)
    feeder = make_feeder(base)
    seed(feeder, feeder_seed)
    return base, feeder
