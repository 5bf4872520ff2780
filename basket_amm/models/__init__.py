"""Basket data models."""

from basket_amm.models.assets import Asset, AssetStatus
from basket_amm.models.parsing import (
    AssetParams,
    BasketParams,
    FeederParams,
    PoolsFile,
    build_asset,
    build_state,
)
from basket_amm.models.state import AmpData, BasketState, WeightLimits
from basket_amm.models.types import Uint256, validate_uint256

__all__ = [
    "AmpData",
    "Asset",
    "AssetParams",
    "AssetStatus",
    "BasketParams",
    "BasketState",
    "FeederParams",
    "PoolsFile",
    "Uint256",
    "WeightLimits",
    "build_asset",
    "build_state",
    "validate_uint256",
]
