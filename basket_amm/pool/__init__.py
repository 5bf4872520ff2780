"""Basket and feeder pools."""

from basket_amm.pool.basket import BasketPool, validate_weight_limits
from basket_amm.pool.compositor import FeederCompositor
from basket_amm.pool.feeder import FeederPool

__all__ = ["BasketPool", "FeederCompositor", "FeederPool", "validate_weight_limits"]
