"""Pytest configuration and fixtures."""

import pytest

from basket_amm.pool.basket import BasketPool
from basket_amm.pool.feeder import FeederPool
from tests.helpers import FakeClock, feeder_scenario, make_basket, seeded_basket


@pytest.fixture
def clock() -> FakeClock:
    """Settable clock shared by the pools of a test."""
    return FakeClock()


@pytest.fixture
def empty_basket(clock: FakeClock) -> BasketPool:
    """Unseeded three-asset basket (A=100, default fees and limits)."""
    return make_basket(clock=clock)


@pytest.fixture
def basket(clock: FakeClock) -> BasketPool:
    """Three-asset basket seeded with 1M units of each asset."""
    return seeded_basket(clock=clock)


@pytest.fixture
def feeder_pools() -> tuple[BasketPool, FeederPool]:
    """Seeded base basket and a feeder seeded at 40% / 60%."""
    return feeder_scenario()
