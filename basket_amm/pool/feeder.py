"""Feeder pool: a two-asset basket pairing a base basket token with one external asset.

Leg 0 holds the base basket's token, leg 1 the feeder asset. Operations that
name a constituent of the base basket are routed through the
``FeederCompositor``; everything else is a plain two-asset basket operation.
The feeder references its base; the base never references its feeders.
"""

from __future__ import annotations

from collections.abc import Sequence

from basket_amm.errors import InvalidAsset, InvalidConfiguration
from basket_amm.models.assets import Asset
from basket_amm.models.parsing import FeederParams, build_state
from basket_amm.models.state import BasketState
from basket_amm.pool.basket import AssetRef, BasketPool, Clock
from basket_amm.pool.compositor import FeederCompositor
from basket_amm.ratio_provider import RatioProvider

BASE_LEG = 0
FEEDER_LEG = 1


class FeederPool(BasketPool):
    """Two-asset pool whose leg 0 is the token of ``base``."""

    def __init__(
        self,
        pool_id: str,
        state: BasketState,
        governor: str,
        base: BasketPool,
        *,
        token_id: str | None = None,
        ratio_provider: RatioProvider | None = None,
        clock: Clock | None = None,
    ) -> None:
        if len(state.assets) != 2:
            raise InvalidConfiguration("A feeder pool has exactly two assets")
        if state.assets[BASE_LEG].asset_id != base.token_id:
            raise InvalidConfiguration(
                f"Leg 0 must be the base token {base.token_id}, got {state.assets[BASE_LEG].asset_id}"
            )
        super().__init__(
            pool_id,
            state,
            governor,
            token_id=token_id,
            ratio_provider=ratio_provider,
            clock=clock,
        )
        self.base = base
        self.compositor = FeederCompositor(self, base)

    @classmethod
    def from_feeder_params(
        cls,
        params: FeederParams,
        base: BasketPool,
        *,
        ratio_provider: RatioProvider | None = None,
        clock: Clock | None = None,
    ) -> FeederPool:
        return cls(
            params.pool_id,
            build_state(params),
            params.governor,
            base,
            token_id=params.basket_token_id,
            ratio_provider=ratio_provider,
            clock=clock,
        )

    def is_constituent(self, asset: AssetRef) -> bool:
        """True if ``asset`` names a base-basket asset that is not a feeder leg."""
        if not isinstance(asset, str):
            return False
        if any(leg.asset_id == asset for leg in self.state.assets):
            return False
        return any(member.asset_id == asset for member in self.base.assets)

    # -------------------------------------------------------------------------
    # Routed operations
    # -------------------------------------------------------------------------

    def mint(self, asset: AssetRef, input_amount: int, min_output: int, recipient: str) -> int:
        if self.is_constituent(asset):
            return self.compositor.mint(asset, input_amount, min_output, recipient)
        return super().mint(asset, input_amount, min_output, recipient)

    def get_mint_output(self, asset: AssetRef, input_amount: int) -> int:
        if self.is_constituent(asset):
            return self.compositor.get_mint_output(asset, input_amount)
        return super().get_mint_output(asset, input_amount)

    def swap(
        self,
        input_asset: AssetRef,
        output_asset: AssetRef,
        amount: int,
        min_output: int,
        recipient: str,
    ) -> int:
        route = self._route(input_asset, output_asset)
        if route == "from_constituent":
            return self.compositor.swap_from_constituent(input_asset, amount, min_output, recipient)
        if route == "to_constituent":
            return self.compositor.swap_to_constituent(output_asset, amount, min_output, recipient)
        return super().swap(input_asset, output_asset, amount, min_output, recipient)

    def get_swap_output(self, input_asset: AssetRef, output_asset: AssetRef, amount: int) -> int:
        route = self._route(input_asset, output_asset)
        if route == "from_constituent":
            return self.compositor.get_swap_from_constituent_output(input_asset, amount)
        if route == "to_constituent":
            return self.compositor.get_swap_to_constituent_output(output_asset, amount)
        return super().get_swap_output(input_asset, output_asset, amount)

    def redeem(self, asset: AssetRef, lp_amount: int, min_output: int, recipient: str) -> int:
        if self.is_constituent(asset):
            return self.compositor.redeem(asset, lp_amount, min_output, recipient)
        return super().redeem(asset, lp_amount, min_output, recipient)

    def get_redeem_output(self, asset: AssetRef, lp_amount: int) -> int:
        if self.is_constituent(asset):
            return self.compositor.get_redeem_output(asset, lp_amount)
        return super().get_redeem_output(asset, lp_amount)

    def mint_multi(
        self,
        assets: Sequence[AssetRef],
        input_amounts: Sequence[int],
        min_output: int,
        recipient: str,
    ) -> int:
        self._reject_constituents(assets)
        return super().mint_multi(assets, input_amounts, min_output, recipient)

    def get_mint_multi_output(self, assets: Sequence[AssetRef], input_amounts: Sequence[int]) -> int:
        self._reject_constituents(assets)
        return super().get_mint_multi_output(assets, input_amounts)

    def redeem_exact(
        self,
        assets: Sequence[AssetRef],
        amounts: Sequence[int],
        max_lp_input: int,
        recipient: str,
    ) -> int:
        self._reject_constituents(assets)
        return super().redeem_exact(assets, amounts, max_lp_input, recipient)

    def get_redeem_exact_output(self, assets: Sequence[AssetRef], amounts: Sequence[int]) -> int:
        self._reject_constituents(assets)
        return super().get_redeem_exact_output(assets, amounts)

    def add_asset(self, asset_id: str, **kwargs: object) -> int:
        raise InvalidConfiguration("Feeder pools cannot add assets")

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _route(self, input_asset: AssetRef, output_asset: AssetRef) -> str:
        """Classify a swap as local, from a constituent, or to a constituent.

        Raises:
            InvalidAsset: For constituent <-> constituent and constituent <-> leg 0
        """
        input_is_constituent = self.is_constituent(input_asset)
        output_is_constituent = self.is_constituent(output_asset)
        if input_is_constituent and output_is_constituent:
            raise InvalidAsset("Invalid pair")
        if input_is_constituent:
            if self.resolve(output_asset) != FEEDER_LEG:
                raise InvalidAsset("Invalid pair")
            return "from_constituent"
        if output_is_constituent:
            if self.resolve(input_asset) != FEEDER_LEG:
                raise InvalidAsset("Invalid pair")
            return "to_constituent"
        return "local"

    def _reject_constituents(self, assets: Sequence[AssetRef]) -> None:
        for asset in assets:
            if self.is_constituent(asset):
                raise InvalidAsset(f"Base asset {asset} not supported in multi-asset operations")

    def _refreshed_asset(self, provider: RatioProvider, index: int, asset: Asset) -> Asset:
        # A provider may quote a redemption price for the base token; without one
        # leg 0 keeps its configured ratio
        try:
            return super()._refreshed_asset(provider, index, asset)
        except InvalidAsset:
            if index != BASE_LEG:
                raise
            return asset
