"""Pydantic models for pool configuration and builders for pool state.

Configuration arrives as JSON (the registry file or API payloads). It is
validated here and then turned into the frozen dataclasses the engine runs on.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from basket_amm.constants import (
    DEFAULT_GOV_FEE_SHARE,
    DEFAULT_MAX_WEIGHT,
    DEFAULT_MIN_WEIGHT,
    DEFAULT_RECOL_FEE,
    DEFAULT_REDEEM_FEE,
    DEFAULT_SWAP_FEE,
    MAX_A,
)
from basket_amm.fees import FeeSchedule
from basket_amm.math.fixed_point import ONE_18
from basket_amm.models.assets import Asset, AssetStatus
from basket_amm.models.state import AmpData, BasketState, WeightLimits
from basket_amm.models.types import Identifier, PoolId, Uint256
from basket_amm.normalizer import ratio_for


class AssetParams(BaseModel):
    """One basket member as written in configuration."""

    model_config = ConfigDict(extra="forbid")

    asset_id: Identifier
    decimals: int = Field(default=18, ge=0, le=26)
    exchange_rate: Uint256 = str(ONE_18)
    vault_balance: Uint256 = "0"
    status: AssetStatus = AssetStatus.NORMAL


class BasketParams(BaseModel):
    """A base basket.

    ``token_id`` names the basket token when it is held by a feeder pool;
    it defaults to the pool id.
    """

    model_config = ConfigDict(extra="forbid")

    pool_id: PoolId
    token_id: PoolId | None = None
    governor: Identifier
    assets: list[AssetParams] = Field(min_length=2)
    a: int = Field(gt=0, lt=MAX_A)
    min_weight: Uint256 = str(DEFAULT_MIN_WEIGHT)
    max_weight: Uint256 = str(DEFAULT_MAX_WEIGHT)
    swap_fee: Uint256 = str(DEFAULT_SWAP_FEE)
    redeem_fee: Uint256 = str(DEFAULT_REDEEM_FEE)
    gov_fee_share: Uint256 = str(DEFAULT_GOV_FEE_SHARE)
    recol_fee: Uint256 = str(DEFAULT_RECOL_FEE)
    total_supply: Uint256 = "0"
    pending_fees: Uint256 = "0"
    paused: bool = False

    @model_validator(mode="after")
    def _unique_assets(self) -> BasketParams:
        ids = [asset.asset_id for asset in self.assets]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate asset ids in pool {self.pool_id}")
        return self

    @property
    def basket_token_id(self) -> str:
        return self.token_id or self.pool_id


class FeederParams(BasketParams):
    """A feeder pool: leg 0 is the base basket token, leg 1 the external asset."""

    base_pool: PoolId
    assets: list[AssetParams] = Field(min_length=2, max_length=2)


class PoolsFile(BaseModel):
    """Top-level layout of the pools configuration file."""

    model_config = ConfigDict(extra="forbid")

    bases: list[BasketParams] = Field(default_factory=list)
    feeders: list[FeederParams] = Field(default_factory=list)


def build_asset(params: AssetParams) -> Asset:
    """Turn validated asset params into an Asset."""
    return Asset(
        asset_id=params.asset_id,
        ratio=ratio_for(params.decimals, int(params.exchange_rate)),
        vault_balance=int(params.vault_balance),
        status=params.status,
    )


def build_state(params: BasketParams) -> BasketState:
    """Turn validated basket params into a BasketState.

    Raises:
        InvalidConfiguration: If fees, limits or ratios are out of bounds
    """
    return BasketState(
        assets=tuple(build_asset(asset) for asset in params.assets),
        amp=AmpData.fixed(params.a),
        limits=WeightLimits(min=int(params.min_weight), max=int(params.max_weight)),
        fees=FeeSchedule(
            swap_fee=int(params.swap_fee),
            redeem_fee=int(params.redeem_fee),
            gov_fee_share=int(params.gov_fee_share),
            recol_fee=int(params.recol_fee),
        ),
        total_supply=int(params.total_supply),
        pending_fees=int(params.pending_fees),
        paused=params.paused,
    )
