"""Request and response models for the basket HTTP API.

Amounts are uint256 decimal strings in both directions.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from basket_amm.models.assets import AssetStatus
from basket_amm.models.state import BasketState
from basket_amm.models.types import Identifier, Uint256


class _Request(BaseModel):
    model_config = ConfigDict(extra="forbid")


class MintQuoteRequest(_Request):
    asset: Identifier
    amount: Uint256


class MintRequest(MintQuoteRequest):
    min_output: Uint256 = "0"
    recipient: Identifier


class SwapQuoteRequest(_Request):
    input_asset: Identifier
    output_asset: Identifier
    amount: Uint256


class SwapRequest(SwapQuoteRequest):
    min_output: Uint256 = "0"
    recipient: Identifier


class RedeemQuoteRequest(_Request):
    asset: Identifier
    amount: Uint256 = Field(description="Basket tokens to burn")


class RedeemRequest(RedeemQuoteRequest):
    min_output: Uint256 = "0"
    recipient: Identifier


class RedeemProportionatelyRequest(_Request):
    amount: Uint256
    min_outputs: list[Uint256]
    recipient: Identifier


class SweepRequest(_Request):
    recipient: Identifier | None = None


class AmountResponse(BaseModel):
    amount: str

    @classmethod
    def of(cls, value: int) -> AmountResponse:
        return cls(amount=str(value))


class AmountsResponse(BaseModel):
    amounts: list[str]

    @classmethod
    def of(cls, values: list[int]) -> AmountsResponse:
        return cls(amounts=[str(value) for value in values])


class AssetView(BaseModel):
    asset_id: str
    ratio: str
    vault_balance: str
    status: AssetStatus


class PoolView(BaseModel):
    """Public snapshot of a pool."""

    pool_id: str
    token_id: str
    base_pool: str | None = None
    assets: list[AssetView]
    a: int
    min_weight: str
    max_weight: str
    swap_fee: str
    redeem_fee: str
    gov_fee_share: str
    recol_fee: str
    total_supply: str
    pending_fees: str
    price: str
    invariant: str
    paused: bool

    @classmethod
    def build(
        cls,
        pool_id: str,
        token_id: str,
        state: BasketState,
        a: int,
        price: int,
        invariant: int,
        base_pool: str | None = None,
    ) -> PoolView:
        return cls(
            pool_id=pool_id,
            token_id=token_id,
            base_pool=base_pool,
            assets=[
                AssetView(
                    asset_id=asset.asset_id,
                    ratio=str(asset.ratio),
                    vault_balance=str(asset.vault_balance),
                    status=asset.status,
                )
                for asset in state.assets
            ],
            a=a,
            min_weight=str(state.limits.min),
            max_weight=str(state.limits.max),
            swap_fee=str(state.fees.swap_fee),
            redeem_fee=str(state.fees.redeem_fee),
            gov_fee_share=str(state.fees.gov_fee_share),
            recol_fee=str(state.fees.recol_fee),
            total_supply=str(state.total_supply),
            pending_fees=str(state.pending_fees),
            price=str(price),
            invariant=str(invariant),
            paused=state.paused,
        )
