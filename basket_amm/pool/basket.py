"""Basket pool: mutable state and the public operation surface.

A ``BasketPool`` owns a ``BasketState`` and exposes mint, swap and redeem
operations, their quotes, and governance setters. Every mutation runs inside
a transaction: the pool guard is held, ratios are refreshed from the ratio
provider, the pure logic layer computes the result, the new state is
committed and the basket invariants are re-validated. Any error restores the
pre-call state.

Assets are addressed either by index or by ``asset_id``.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import replace

import structlog

from basket_amm.constants import D_TOLERANCE, FEEDER_MAX_MIN_WEIGHT, FEEDER_MIN_MAX_WEIGHT
from basket_amm.errors import (
    InsufficientLiquidity,
    InvalidAsset,
    InvalidConfiguration,
    InvalidQuantity,
    InvariantViolation,
    PoolPaused,
    SlippageExceeded,
    Unauthorized,
    WeightLimitExceeded,
)
from basket_amm.fees import FeeSchedule
from basket_amm.invariant import compute_d
from basket_amm.math.fixed_point import ONE_18
from basket_amm.models.assets import Asset, AssetStatus
from basket_amm.models.parsing import BasketParams, build_state
from basket_amm.models.state import BasketState, WeightLimits
from basket_amm.normalizer import ratio_for
from basket_amm.pool import logic
from basket_amm.pool.amplification import current_a, start_ramp, stop_ramp
from basket_amm.pool.guard import ReentrancyGuard, solver_errors, transaction
from basket_amm.ratio_provider import RatioProvider, resolve_ratio

logger = structlog.get_logger()

AssetRef = int | str
Clock = Callable[[], int]


def _wall_clock() -> int:
    return int(time.time())


def validate_weight_limits(asset_count: int, min_weight: int, max_weight: int) -> WeightLimits:
    """Check weight limits against the bounds for a basket of ``asset_count`` assets.

    Two-asset (feeder) pools need ``min <= 30%`` and ``max >= 70%``. Larger
    baskets need ``min <= 1 / (2N)`` and ``max >= 1 / (N - 1)``.

    Raises:
        InvalidConfiguration: If a bound is violated or ``min >= max``
    """
    if asset_count == 2:
        min_bound = FEEDER_MAX_MIN_WEIGHT
        max_bound = FEEDER_MIN_MAX_WEIGHT
    else:
        min_bound = ONE_18 // (asset_count * 2)
        max_bound = ONE_18 // (asset_count - 1)

    if min_weight < 0 or min_weight > min_bound:
        raise InvalidConfiguration("Min weight oob")
    if max_weight < max_bound or max_weight > ONE_18:
        raise InvalidConfiguration("Max weight oob")
    return WeightLimits(min=min_weight, max=max_weight)


class BasketPool:
    """A basket of near-equal-value assets backing a basket token.

    Args:
        pool_id: Pool identifier
        state: Initial state
        governor: Identity allowed to call governance setters
        token_id: Identifier of the basket token (defaults to ``pool_id``)
        ratio_provider: Optional source of live decimals and exchange rates
        clock: Returns the current unix time; used by the amplification ramp
    """

    def __init__(
        self,
        pool_id: str,
        state: BasketState,
        governor: str,
        *,
        token_id: str | None = None,
        ratio_provider: RatioProvider | None = None,
        clock: Clock | None = None,
    ) -> None:
        if len(state.assets) < 2:
            raise InvalidConfiguration("A basket needs at least two assets")
        validate_weight_limits(len(state.assets), state.limits.min, state.limits.max)

        self.pool_id = pool_id
        self.token_id = token_id or pool_id
        self.governor = governor
        self.state = state
        self.ratio_provider = ratio_provider
        self.guard = ReentrancyGuard(pool_id)
        self._clock = clock or _wall_clock

    @classmethod
    def from_params(
        cls,
        params: BasketParams,
        *,
        ratio_provider: RatioProvider | None = None,
        clock: Clock | None = None,
    ) -> BasketPool:
        """Build a pool from validated configuration."""
        return cls(
            params.pool_id,
            build_state(params),
            params.governor,
            token_id=params.basket_token_id,
            ratio_provider=ratio_provider,
            clock=clock,
        )

    # =========================================================================
    # Views
    # =========================================================================

    @property
    def assets(self) -> tuple[Asset, ...]:
        return self.state.assets

    @property
    def total_supply(self) -> int:
        return self.state.total_supply

    @property
    def pending_fees(self) -> int:
        return self.state.pending_fees

    @property
    def paused(self) -> bool:
        return self.state.paused

    def now(self) -> int:
        return int(self._clock())

    def get_a(self) -> int:
        """Current amplification, scaled by A_PRECISION."""
        return current_a(self.state.amp, self.now())

    def get_price(self) -> tuple[int, int]:
        """Return (price, D) where price = D * 1e18 / effective supply."""
        state = self._live_state()
        with solver_errors():
            return logic.compute_price(state.assets, self.get_a(), state.effective_supply)

    def resolve(self, asset: AssetRef) -> int:
        """Map an index or asset id to an index.

        Raises:
            InvalidAsset: If the asset is not a member of the basket
        """
        if isinstance(asset, int) and not isinstance(asset, bool):
            if 0 <= asset < len(self.state.assets):
                return asset
            raise InvalidAsset(f"Asset index {asset} out of range")
        return self.state.index_of(asset)

    # =========================================================================
    # Quotes
    # =========================================================================

    def get_mint_output(self, asset: AssetRef, input_amount: int) -> int:
        """Basket tokens that ``mint`` would return."""
        state = self._live_state()
        return self._compute_mint(state, [asset], [input_amount]).lp_out

    def get_mint_multi_output(self, assets: Sequence[AssetRef], input_amounts: Sequence[int]) -> int:
        state = self._live_state()
        return self._compute_mint(state, assets, input_amounts).lp_out

    def get_swap_output(self, input_asset: AssetRef, output_asset: AssetRef, amount: int) -> int:
        """Output that ``swap`` would return."""
        state = self._live_state()
        return self._compute_swap(state, input_asset, output_asset, amount).output

    def get_redeem_output(self, asset: AssetRef, lp_amount: int) -> int:
        state = self._live_state()
        return self._compute_redeem(state, asset, lp_amount).output

    def get_redeem_proportionately_output(self, lp_amount: int) -> list[int]:
        state = self._live_state()
        return self._compute_redeem_proportionately(state, lp_amount).outputs

    def get_redeem_exact_output(self, assets: Sequence[AssetRef], amounts: Sequence[int]) -> int:
        """Basket tokens that ``redeem_exact`` would burn."""
        state = self._live_state()
        return self._compute_redeem_exact(state, assets, amounts).lp_burned

    # =========================================================================
    # Mutations
    # =========================================================================

    def mint(self, asset: AssetRef, input_amount: int, min_output: int, recipient: str) -> int:
        """Deposit one asset and mint basket tokens to ``recipient``.

        Raises:
            PoolPaused, AssetStatusInvalid, InvalidQuantity, WeightLimitExceeded,
            SlippageExceeded
        """
        with transaction(self):
            return self._mint([asset], [input_amount], min_output, recipient)

    def mint_multi(
        self,
        assets: Sequence[AssetRef],
        input_amounts: Sequence[int],
        min_output: int,
        recipient: str,
    ) -> int:
        """Deposit several assets at once and mint basket tokens."""
        with transaction(self):
            return self._mint(assets, input_amounts, min_output, recipient)

    def swap(
        self,
        input_asset: AssetRef,
        output_asset: AssetRef,
        amount: int,
        min_output: int,
        recipient: str,
    ) -> int:
        """Swap ``amount`` of one asset for another.

        Raises:
            PoolPaused, InvalidAsset, AssetStatusInvalid, InsufficientLiquidity,
            WeightLimitExceeded, SlippageExceeded, ConvergenceFailure
        """
        with transaction(self):
            return self._swap(input_asset, output_asset, amount, min_output, recipient)

    def redeem(self, asset: AssetRef, lp_amount: int, min_output: int, recipient: str) -> int:
        """Burn basket tokens for a single asset."""
        with transaction(self):
            return self._redeem(asset, lp_amount, min_output, recipient)

    def redeem_proportionately(
        self, lp_amount: int, min_outputs: Sequence[int], recipient: str
    ) -> list[int]:
        """Burn basket tokens for a pro-rata share of every asset."""
        with transaction(self):
            state = self._begin()
            if len(min_outputs) != len(state.assets):
                raise InvalidQuantity("Invalid array length")
            result = self._compute_redeem_proportionately(state, lp_amount)
            for i, (output, minimum) in enumerate(zip(result.outputs, min_outputs)):
                if output < minimum:
                    raise SlippageExceeded(f"Output of asset {i} is {output}, below {minimum}")
            after = replace(
                state.with_balances(result.vault_balances),
                total_supply=state.total_supply - lp_amount,
                pending_fees=state.pending_fees + result.gov_fee,
            )
            self._commit(state, after, check_weights=False)

        logger.info(
            "basket_redeem_proportionately",
            pool_id=self.pool_id,
            lp_amount=lp_amount,
            outputs=result.outputs,
            fee=result.fee,
            recipient=recipient,
        )
        return result.outputs

    def redeem_exact(
        self,
        assets: Sequence[AssetRef],
        amounts: Sequence[int],
        max_lp_input: int,
        recipient: str,
    ) -> int:
        """Withdraw exact asset amounts, burning at most ``max_lp_input`` basket tokens."""
        with transaction(self):
            state = self._begin()
            result = self._compute_redeem_exact(state, assets, amounts)
            if result.lp_burned > max_lp_input:
                raise SlippageExceeded(f"Burn of {result.lp_burned} exceeds max {max_lp_input}")
            after = replace(
                state.with_balances(result.vault_balances),
                total_supply=state.total_supply - result.lp_burned,
                pending_fees=state.pending_fees + result.gov_fee,
            )
            self._commit(state, after)

        logger.info(
            "basket_redeem_exact",
            pool_id=self.pool_id,
            amounts=list(amounts),
            lp_burned=result.lp_burned,
            fee=result.fee,
            recipient=recipient,
        )
        return result.lp_burned

    def sweep_governance_fees(self, recipient: str | None = None) -> int:
        """Mint pending governance fees to the governor (or ``recipient``).

        The effective supply is unchanged. Returns the amount minted, 0 when
        nothing is pending.
        """
        with transaction(self):
            pending = self.state.pending_fees
            if pending == 0:
                return 0
            self.state = replace(
                self.state,
                total_supply=self.state.total_supply + pending,
                pending_fees=0,
            )

        logger.info(
            "basket_fees_swept",
            pool_id=self.pool_id,
            amount=pending,
            recipient=recipient or self.governor,
        )
        return pending

    def burn_surplus(self, *, caller: str) -> int:
        """Burn the caller's basket tokens until the price is back at exactly 1.

        Only possible while the basket is under-collateralised (D below the
        effective supply). Returns the amount burned.

        Raises:
            InvalidQuantity: If there is no surplus supply to burn
            InsufficientLiquidity: If the surplus exceeds the total supply
        """
        with transaction(self):
            state = self._begin()
            surplus = state.effective_supply - self._invariant(state)
            if surplus <= 0:
                raise InvalidQuantity("No surplus")
            if surplus > state.total_supply:
                raise InsufficientLiquidity(f"Surplus {surplus} exceeds supply {state.total_supply}")
            self.state = replace(state, total_supply=state.total_supply - surplus)

        logger.info("basket_surplus_burned", pool_id=self.pool_id, amount=surplus, caller=caller)
        return surplus

    # =========================================================================
    # Governance
    # =========================================================================

    def mint_deficit(self, *, caller: str) -> int:
        """Accrue value above the effective supply to governance.

        While the basket is over-collateralised the difference between D and
        the effective supply is added to the pending governance fees, which
        resets the price to exactly 1. Returns the amount accrued.

        Raises:
            Unauthorized: If ``caller`` is not the governor
            InvalidQuantity: If the basket is not over-collateralised
        """
        self._authorize(caller)
        with transaction(self):
            state = self._begin()
            deficit = self._invariant(state) - state.effective_supply
            if deficit <= 0:
                raise InvalidQuantity("No deficit")
            self.state = replace(state, pending_fees=state.pending_fees + deficit)

        logger.info("basket_deficit_minted", pool_id=self.pool_id, amount=deficit)
        return deficit

    def set_recol_fee(self, recol_fee: int, *, caller: str) -> None:
        self._authorize(caller)
        with transaction(self):
            fees = replace(self.state.fees, recol_fee=recol_fee)
            self.state = replace(self.state, fees=fees)
        logger.info("basket_recol_fee_set", pool_id=self.pool_id, recol_fee=recol_fee)

    def set_weight_limits(self, min_weight: int, max_weight: int, *, caller: str) -> None:
        self._authorize(caller)
        with transaction(self):
            limits = validate_weight_limits(len(self.state.assets), min_weight, max_weight)
            self.state = replace(self.state, limits=limits)
        logger.info("basket_weight_limits_set", pool_id=self.pool_id, min=min_weight, max=max_weight)

    def set_fees(self, swap_fee: int, redeem_fee: int, gov_fee_share: int, *, caller: str) -> None:
        """Replace the fee schedule.

        Raises:
            Unauthorized: If ``caller`` is not the governor
            InvalidConfiguration: If a rate is out of bounds
        """
        self._authorize(caller)
        with transaction(self):
            fees = FeeSchedule(
                swap_fee=swap_fee,
                redeem_fee=redeem_fee,
                gov_fee_share=gov_fee_share,
                recol_fee=self.state.fees.recol_fee,
            )
            self.state = replace(self.state, fees=fees)
        logger.info(
            "basket_fees_set",
            pool_id=self.pool_id,
            swap_fee=swap_fee,
            redeem_fee=redeem_fee,
            gov_fee_share=gov_fee_share,
        )

    def set_asset_status(self, asset: AssetRef, status: AssetStatus, *, caller: str) -> None:
        self._authorize(caller)
        with transaction(self):
            index = self.resolve(asset)
            updated = replace(self.state.assets[index], status=status)
            self.state = self.state.replace_asset(index, updated)
        logger.info(
            "basket_asset_status_set",
            pool_id=self.pool_id,
            asset_id=updated.asset_id,
            status=status.value,
        )

    def start_ramp_a(self, target_a: int, ramp_end_time: int, *, caller: str) -> None:
        """Start ramping A (unscaled ``target_a``) until ``ramp_end_time``."""
        self._authorize(caller)
        with transaction(self):
            now = self.now()
            amp = start_ramp(self.state.amp, target_a, ramp_end_time, now)
            self.state = replace(self.state, amp=amp)
        logger.info(
            "basket_ramp_started",
            pool_id=self.pool_id,
            initial_a=amp.initial_a,
            target_a=amp.target_a,
            ramp_end_time=ramp_end_time,
        )

    def stop_ramp_a(self, *, caller: str) -> None:
        self._authorize(caller)
        with transaction(self):
            amp = stop_ramp(self.state.amp, self.now())
            self.state = replace(self.state, amp=amp)
        logger.info("basket_ramp_stopped", pool_id=self.pool_id, a=amp.target_a)

    def pause(self, *, caller: str) -> None:
        """Block minting and swapping. Redemptions stay available."""
        self._authorize(caller)
        with transaction(self):
            if self.state.paused:
                raise InvalidConfiguration("Pool already paused")
            self.state = replace(self.state, paused=True)
        logger.info("basket_paused", pool_id=self.pool_id)

    def unpause(self, *, caller: str) -> None:
        self._authorize(caller)
        with transaction(self):
            if not self.state.paused:
                raise InvalidConfiguration("Pool not paused")
            self.state = replace(self.state, paused=False)
        logger.info("basket_unpaused", pool_id=self.pool_id)

    def add_asset(
        self,
        asset_id: str,
        *,
        decimals: int = 18,
        exchange_rate: int = ONE_18,
        caller: str,
    ) -> int:
        """Append a new asset to an unseeded basket and return its index.

        Raises:
            Unauthorized: If ``caller`` is not the governor
            InvalidConfiguration: If the basket already holds value, the asset exists
                or the weight limits do not fit the larger basket
        """
        self._authorize(caller)
        with transaction(self):
            state = self.state
            if state.effective_supply > 0 or any(state.vault_balances):
                raise InvalidConfiguration("Cannot add assets to a seeded basket")
            if any(asset.asset_id == asset_id for asset in state.assets):
                raise InvalidConfiguration(f"Asset {asset_id} already in basket")
            validate_weight_limits(len(state.assets) + 1, state.limits.min, state.limits.max)
            asset = Asset(asset_id=asset_id, ratio=ratio_for(decimals, exchange_rate))
            self.state = replace(state, assets=state.assets + (asset,))
            index = len(self.state.assets) - 1
        logger.info("basket_asset_added", pool_id=self.pool_id, asset_id=asset_id, index=index)
        return index

    # =========================================================================
    # Unguarded operation bodies (called inside a transaction)
    # =========================================================================

    def _mint(
        self,
        assets: Sequence[AssetRef],
        input_amounts: Sequence[int],
        min_output: int,
        recipient: str,
    ) -> int:
        state = self._begin()
        result = self._compute_mint(state, assets, input_amounts)
        if result.lp_out < min_output:
            raise SlippageExceeded(f"Mint output {result.lp_out} below minimum {min_output}")
        after = replace(
            state.with_balances(result.vault_balances),
            total_supply=state.total_supply + result.lp_out,
        )
        self._commit(state, after)

        logger.info(
            "basket_mint",
            pool_id=self.pool_id,
            assets=[str(asset) for asset in assets],
            amounts=list(input_amounts),
            lp_out=result.lp_out,
            recipient=recipient,
        )
        return result.lp_out

    def _swap(
        self,
        input_asset: AssetRef,
        output_asset: AssetRef,
        amount: int,
        min_output: int,
        recipient: str,
    ) -> int:
        state = self._begin()
        result = self._compute_swap(state, input_asset, output_asset, amount)
        if result.output < min_output:
            raise SlippageExceeded(f"Swap output {result.output} below minimum {min_output}")
        after = replace(
            state.with_balances(result.vault_balances),
            pending_fees=state.pending_fees + result.gov_fee,
        )
        self._commit(state, after)

        logger.info(
            "basket_swap",
            pool_id=self.pool_id,
            input_asset=str(input_asset),
            output_asset=str(output_asset),
            amount_in=amount,
            amount_out=result.output,
            fee=result.fee,
            recipient=recipient,
        )
        return result.output

    def _redeem(self, asset: AssetRef, lp_amount: int, min_output: int, recipient: str) -> int:
        state = self._begin()
        result = self._compute_redeem(state, asset, lp_amount)
        if result.output < min_output:
            raise SlippageExceeded(f"Redeem output {result.output} below minimum {min_output}")
        after = replace(
            state.with_balances(result.vault_balances),
            total_supply=state.total_supply - lp_amount,
            pending_fees=state.pending_fees + result.gov_fee,
        )
        self._commit(state, after)

        logger.info(
            "basket_redeem",
            pool_id=self.pool_id,
            asset=str(asset),
            lp_amount=lp_amount,
            amount_out=result.output,
            fee=result.fee,
            recipient=recipient,
        )
        return result.output

    # =========================================================================
    # Shared computation
    # =========================================================================

    def _compute_mint(
        self, state: BasketState, assets: Sequence[AssetRef], input_amounts: Sequence[int]
    ) -> logic.MintResult:
        self._require_active(state)
        indices = [self.resolve(asset) for asset in assets]
        with solver_errors():
            return logic.compute_mint_multi(
                state.assets, indices, input_amounts, self._config(state)
            )

    def _compute_swap(
        self, state: BasketState, input_asset: AssetRef, output_asset: AssetRef, amount: int
    ) -> logic.SwapResult:
        self._require_active(state)
        input_index = self.resolve(input_asset)
        output_index = self.resolve(output_asset)
        with solver_errors():
            return logic.compute_swap(
                state.assets, input_index, output_index, amount, self._config(state), state.fees
            )

    def _compute_redeem(
        self, state: BasketState, asset: AssetRef, lp_amount: int
    ) -> logic.RedeemResult:
        index = self.resolve(asset)
        with solver_errors():
            return logic.compute_redeem(
                state.assets, index, lp_amount, state.total_supply, self._config(state), state.fees
            )

    def _compute_redeem_proportionately(
        self, state: BasketState, lp_amount: int
    ) -> logic.ProportionalRedeemResult:
        return logic.compute_redeem_proportionately(
            state.assets, lp_amount, state.total_supply, self._config(state), state.fees
        )

    def _compute_redeem_exact(
        self, state: BasketState, assets: Sequence[AssetRef], amounts: Sequence[int]
    ) -> logic.RedeemExactResult:
        indices = [self.resolve(asset) for asset in assets]
        with solver_errors():
            return logic.compute_redeem_exact(
                state.assets, indices, amounts, state.total_supply, self._config(state), state.fees
            )

    # =========================================================================
    # Internals
    # =========================================================================

    def _authorize(self, caller: str) -> None:
        if caller != self.governor:
            logger.warning("basket_unauthorized", pool_id=self.pool_id, caller=caller)
            raise Unauthorized(f"{caller} is not the governor of {self.pool_id}")

    def _require_active(self, state: BasketState) -> None:
        if state.paused:
            raise PoolPaused(f"Pool {self.pool_id} is paused")

    def _config(self, state: BasketState) -> logic.InvariantConfig:
        return logic.InvariantConfig(
            supply=state.effective_supply,
            a=current_a(state.amp, self.now()),
            limits=state.limits,
            recol_fee=state.fees.recol_fee,
        )

    def _invariant(self, state: BasketState) -> int:
        with solver_errors():
            return compute_d(state.normalized_balances, current_a(state.amp, self.now()))

    def _refreshed_asset(self, provider: RatioProvider, index: int, asset: Asset) -> Asset:
        """Asset at ``index`` with its ratio re-read from ``provider``.

        Raises:
            InvalidAsset: If the provider has no data for the asset
        """
        return replace(asset, ratio=resolve_ratio(provider, asset.asset_id))

    def _live_state(self) -> BasketState:
        """Current state with ratios refreshed from the provider (not stored)."""
        provider = self.ratio_provider
        if provider is None:
            return self.state
        assets = tuple(
            self._refreshed_asset(provider, i, asset) for i, asset in enumerate(self.state.assets)
        )
        return replace(self.state, assets=assets)

    def _begin(self) -> BasketState:
        """Refresh ratios into the stored state and return it."""
        self.state = self._live_state()
        return self.state

    def _commit(self, before: BasketState, after: BasketState, *, check_weights: bool = True) -> None:
        self.state = after
        self._check_invariants(before, after, check_weights=check_weights)

    def _check_invariants(
        self, before: BasketState, after: BasketState, *, check_weights: bool
    ) -> None:
        """Re-validate a committed state against the basket invariants.

        Raises:
            InvariantViolation: If weights are out of bounds, pending fees
                decreased, or the basket price decreased by more than the
                solver's rounding noise
        """
        if check_weights:
            try:
                logic.check_weights(after.normalized_balances, after.limits)
            except WeightLimitExceeded as err:
                raise InvariantViolation(str(err)) from err

        if after.pending_fees < before.pending_fees:
            raise InvariantViolation("Pending fees decreased")

        supply_before = before.effective_supply
        supply_after = after.effective_supply
        if supply_before == 0 or supply_after == 0:
            return

        a = current_a(after.amp, self.now())
        d_before = compute_d(before.normalized_balances, a)
        d_after = compute_d(after.normalized_balances, a)
        if (d_after + D_TOLERANCE) * supply_before < d_before * supply_after:
            raise InvariantViolation(
                f"Basket price decreased: D {d_before} -> {d_after}, "
                f"supply {supply_before} -> {supply_after}"
            )
