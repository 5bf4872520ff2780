"""Test helpers module for shared test utilities.

- constants: asset identifiers, actors and common amounts
- factories: basket and feeder pool factories
- reference: independent Decimal model of the stableswap curve
"""

from tests.helpers.constants import (
    ALICE,
    BASE_ASSETS,
    BOB,
    BUSD,
    DAI,
    FEEDER,
    GOVERNOR,
    MUSD,
    SEED,
    T0,
    UNIT,
    USDC,
    USDT,
)
from tests.helpers.factories import (
    FakeClock,
    feeder_scenario,
    make_basket,
    make_feeder,
    make_state,
    seed,
    seeded_basket,
)
from tests.helpers.reference import ReferenceBasket, ref_balance, ref_d

__all__ = [
    # Constants
    "ALICE",
    "BASE_ASSETS",
    "BOB",
    "BUSD",
    "DAI",
    "FEEDER",
    "GOVERNOR",
    "MUSD",
    "SEED",
    "T0",
    "UNIT",
    "USDC",
    "USDT",
    # Factories
    "FakeClock",
    "feeder_scenario",
    "make_basket",
    "make_feeder",
    "make_state",
    "seed",
    "seeded_basket",
    # Reference model
    "ReferenceBasket",
    "ref_balance",
    "ref_d",
]
