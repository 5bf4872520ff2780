"""Pure basket computations shared by quotes and mutations.

Every function takes the current assets and invariant configuration and
returns a result describing the post-operation vault balances. Nothing here
mutates state, so a quote and the mutation it predicts run exactly the same
code and fail with exactly the same errors.

All inputs and outputs at this layer are raw asset units; normalization to
18-decimal accounting units happens inside.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from basket_amm.constants import INITIAL_PRICE, MIN_DEPOSIT
from basket_amm.errors import (
    AssetStatusInvalid,
    InsufficientLiquidity,
    InvalidAsset,
    InvalidQuantity,
    WeightLimitExceeded,
)
from basket_amm.fees import FeeSchedule, apply_fee, governance_share, gross_up_fee
from basket_amm.invariant import compute_balance_for_d, compute_d
from basket_amm.math.fixed_point import div_precisely, mul_truncate, weight_of
from basket_amm.models.assets import Asset
from basket_amm.models.state import WeightLimits
from basket_amm.normalizer import denormalize, normalize, normalize_up


@dataclass(frozen=True)
class InvariantConfig:
    """Parameters of the curve at the time of the operation.

    Attributes:
        supply: Effective LP supply (total supply plus pending governance fees)
        a: Current amplification, scaled by A_PRECISION
        limits: Weight limits
        recol_fee: Rate withheld while D is below the effective supply
    """

    supply: int
    a: int
    limits: WeightLimits
    recol_fee: int = 0


@dataclass(frozen=True)
class MintResult:
    lp_out: int
    vault_balances: list[int]


@dataclass(frozen=True)
class SwapResult:
    """Swap output.

    ``fee`` is in basket-token units; ``gov_fee`` is the part of it owed to
    governance.
    """

    output: int
    fee: int
    gov_fee: int
    vault_balances: list[int]


@dataclass(frozen=True)
class RedeemResult:
    output: int
    lp_burned: int
    fee: int
    gov_fee: int
    vault_balances: list[int]


@dataclass(frozen=True)
class ProportionalRedeemResult:
    outputs: list[int]
    lp_burned: int
    fee: int
    gov_fee: int
    vault_balances: list[int]


@dataclass(frozen=True)
class RedeemExactResult:
    lp_burned: int
    fee: int
    gov_fee: int
    vault_balances: list[int]


# =============================================================================
# Views
# =============================================================================


def normalized_balances(assets: Sequence[Asset], vault_balances: Sequence[int]) -> list[int]:
    """Normalize raw vault balances with each asset's ratio."""
    return [normalize(balance, asset.ratio) for asset, balance in zip(assets, vault_balances)]


def total_value(balances: Sequence[int]) -> int:
    """Sum of normalized balances; the basis of every weight."""
    return sum(balances)


def check_weights(balances: Sequence[int], limits: WeightLimits) -> None:
    """Require every asset weight to be within limits.

    An empty basket has no weights and passes.

    Raises:
        WeightLimitExceeded: If some weight is outside [min, max]
    """
    total = total_value(balances)
    if total == 0:
        return
    for i, balance in enumerate(balances):
        weight = weight_of(balance, total)
        if not limits.contains(weight):
            raise WeightLimitExceeded(
                f"Weight of asset {i} is {weight}, outside [{limits.min}, {limits.max}]"
            )


def compute_price(assets: Sequence[Asset], a: int, supply: int) -> tuple[int, int]:
    """Price of one basket token and the current invariant.

    Returns:
        Tuple of (price 1e18-scaled, D). An unseeded basket is priced at 1.
    """
    d = compute_d([asset.normalized_balance for asset in assets], a)
    if supply == 0:
        return INITIAL_PRICE, d
    return div_precisely(d, supply), d


# =============================================================================
# Mint
# =============================================================================


def _require_normal(asset: Asset) -> None:
    if not asset.is_normal:
        raise AssetStatusInvalid(f"Asset {asset.asset_id} is {asset.status.value}")


def _lp_for_growth(supply: int, d0: int, d1: int) -> int:
    if supply == 0 or d0 == 0:
        return d1 - d0
    return supply * (d1 - d0) // d0


def recol_deduction(amount: int, d0: int, config: InvariantConfig) -> int:
    """Part of ``amount`` withheld while the basket is under-collateralised.

    The withheld value stays in the basket and lifts its price back towards 1.
    """
    if d0 >= config.supply:
        return 0
    return mul_truncate(amount, config.recol_fee)


def compute_mint_multi(
    assets: Sequence[Asset],
    indices: Sequence[int],
    raw_inputs: Sequence[int],
    config: InvariantConfig,
) -> MintResult:
    """Mint against deposits of one or more assets.

    No fee is charged unless the basket is under-collateralised, in which case
    the recol fee is withheld from the minted amount. The weight check runs on
    the post-deposit balances before the new invariant is solved.

    Raises:
        InvalidQuantity: Empty or mismatched arguments, or deposit below minimum
        InvalidAsset: Duplicate asset
        AssetStatusInvalid: A deposited asset is not NORMAL
        WeightLimitExceeded: A post-deposit weight is out of bounds
    """
    if not indices or len(indices) != len(raw_inputs):
        raise InvalidQuantity("Input array mismatch")
    if len(set(indices)) != len(indices):
        raise InvalidAsset("Duplicate asset")

    vault = [asset.vault_balance for asset in assets]
    deposit = 0
    for index, raw in zip(indices, raw_inputs):
        if raw < 0:
            raise InvalidQuantity(f"Negative input {raw}")
        if raw == 0:
            continue
        _require_normal(assets[index])
        deposit += normalize(raw, assets[index].ratio)
        vault[index] += raw

    if deposit <= MIN_DEPOSIT:
        raise InvalidQuantity("Qty < min deposit")

    before = [asset.normalized_balance for asset in assets]
    d0 = compute_d(before, config.a)

    after = normalized_balances(assets, vault)
    check_weights(after, config.limits)
    d1 = compute_d(after, config.a)

    lp_out = _lp_for_growth(config.supply, d0, d1)
    lp_out -= recol_deduction(lp_out, d0, config)
    return MintResult(lp_out=lp_out, vault_balances=vault)


def compute_mint(
    assets: Sequence[Asset],
    index: int,
    raw_input: int,
    config: InvariantConfig,
) -> MintResult:
    """Mint against a single-asset deposit."""
    return compute_mint_multi(assets, [index], [raw_input], config)


# =============================================================================
# Swap
# =============================================================================


def compute_swap(
    assets: Sequence[Asset],
    input_index: int,
    output_index: int,
    raw_input: int,
    config: InvariantConfig,
    fees: FeeSchedule,
) -> SwapResult:
    """Swap one basket asset for another.

    The fee is the swap rate applied to the growth of the invariant caused by
    the deposit. The output balance is solved so that the invariant ends at
    ``D0 + fee`` (plus the recol fee when under-collateralised), which keeps
    the fee inside the basket.

    Raises:
        InvalidAsset: Input and output are the same asset
        InvalidQuantity: Input is zero
        AssetStatusInvalid: Input asset is not NORMAL
        InsufficientLiquidity: The output would drain the asset
        WeightLimitExceeded: A post-swap weight is out of bounds
    """
    if input_index == output_index:
        raise InvalidAsset("Invalid pair")
    if raw_input <= 0:
        raise InvalidQuantity("Invalid swap quantity")
    asset_in = assets[input_index]
    asset_out = assets[output_index]
    _require_normal(asset_in)

    x = [asset.normalized_balance for asset in assets]
    d0 = compute_d(x, config.a)

    x[input_index] += normalize(raw_input, asset_in.ratio)
    # The solver cannot converge on balances far outside the weight limits
    input_weight = weight_of(x[input_index], total_value(x))
    if input_weight > config.limits.max:
        raise WeightLimitExceeded(
            f"Weight of asset {input_index} is {input_weight}, above {config.limits.max}"
        )
    d1 = compute_d(x, config.a)
    fee = mul_truncate(d1 - d0, fees.swap_fee)
    recol = recol_deduction(d1 - d0, d0, config)

    y = compute_balance_for_d(x, config.a, d0 + fee + recol, output_index)
    if y + 1 >= x[output_index]:
        raise InsufficientLiquidity("Swap output exceeds available balance")
    output = denormalize(x[output_index] - y - 1, asset_out.ratio)

    vault = [asset.vault_balance for asset in assets]
    vault[input_index] += raw_input
    vault[output_index] -= output
    check_weights(normalized_balances(assets, vault), config.limits)

    return SwapResult(
        output=output,
        fee=fee,
        gov_fee=governance_share(fee, fees.gov_fee_share),
        vault_balances=vault,
    )


# =============================================================================
# Redeem
# =============================================================================


def _check_burn(lp_amount: int, total_supply: int) -> None:
    if lp_amount <= 0:
        raise InvalidQuantity("Qty==0")
    if lp_amount > total_supply:
        raise InsufficientLiquidity(f"Burn of {lp_amount} exceeds supply {total_supply}")


def compute_redeem(
    assets: Sequence[Asset],
    index: int,
    lp_amount: int,
    total_supply: int,
    config: InvariantConfig,
    fees: FeeSchedule,
) -> RedeemResult:
    """Redeem basket tokens for a single asset.

    The redemption fee is taken in basket tokens; only ``lp_amount - fee``
    worth of invariant leaves the basket.

    Raises:
        InvalidQuantity: Zero burn
        InsufficientLiquidity: Burn exceeds supply or would drain the asset
        WeightLimitExceeded: A post-redeem weight is out of bounds
    """
    _check_burn(lp_amount, total_supply)
    _, fee = apply_fee(lp_amount, fees.redeem_fee)

    x = [asset.normalized_balance for asset in assets]
    d0 = compute_d(x, config.a)
    recol = recol_deduction(lp_amount, d0, config)
    d_final = d0 * (config.supply - lp_amount + fee + recol) // config.supply + 1

    y = compute_balance_for_d(x, config.a, d_final, index)
    if y + 1 >= x[index]:
        raise InsufficientLiquidity("Redemption exceeds available balance")
    output = denormalize(x[index] - y - 1, assets[index].ratio)

    vault = [asset.vault_balance for asset in assets]
    vault[index] -= output
    check_weights(normalized_balances(assets, vault), config.limits)

    return RedeemResult(
        output=output,
        lp_burned=lp_amount,
        fee=fee,
        gov_fee=governance_share(fee, fees.gov_fee_share),
        vault_balances=vault,
    )


def compute_redeem_proportionately(
    assets: Sequence[Asset],
    lp_amount: int,
    total_supply: int,
    config: InvariantConfig,
    fees: FeeSchedule,
) -> ProportionalRedeemResult:
    """Redeem basket tokens for a pro-rata share of every asset.

    Composition is unchanged, so neither the solver nor the weight check is
    involved. Each non-zero output is reduced by one unit of rounding.
    """
    _check_burn(lp_amount, total_supply)
    _, fee = apply_fee(lp_amount, fees.redeem_fee)
    share = lp_amount - fee

    outputs = []
    vault = []
    for asset in assets:
        out = asset.vault_balance * share // config.supply
        if out > 0:
            out -= 1
        outputs.append(out)
        vault.append(asset.vault_balance - out)

    return ProportionalRedeemResult(
        outputs=outputs,
        lp_burned=lp_amount,
        fee=fee,
        gov_fee=governance_share(fee, fees.gov_fee_share),
        vault_balances=vault,
    )


def compute_redeem_exact(
    assets: Sequence[Asset],
    indices: Sequence[int],
    raw_outputs: Sequence[int],
    total_supply: int,
    config: InvariantConfig,
    fees: FeeSchedule,
) -> RedeemExactResult:
    """Burn the basket tokens needed to withdraw exact amounts of assets.

    Outputs are normalized rounding up and the burn rounds up, so the caller
    always pays at least the exact cost.

    Raises:
        InvalidQuantity: Empty or mismatched arguments, or nothing requested
        InvalidAsset: Duplicate asset
        InsufficientLiquidity: An output exceeds its balance or the burn exceeds supply
        WeightLimitExceeded: A post-redeem weight is out of bounds
    """
    if not indices or len(indices) != len(raw_outputs):
        raise InvalidQuantity("Input array mismatch")
    if len(set(indices)) != len(indices):
        raise InvalidAsset("Duplicate asset")
    if any(raw < 0 for raw in raw_outputs):
        raise InvalidQuantity("Negative output requested")
    if sum(raw_outputs) == 0:
        raise InvalidQuantity("Nothing to redeem")
    if config.supply == 0:
        raise InsufficientLiquidity("Basket is empty")

    x = [asset.normalized_balance for asset in assets]
    d0 = compute_d(x, config.a)

    vault = [asset.vault_balance for asset in assets]
    for index, raw in zip(indices, raw_outputs):
        units = normalize_up(raw, assets[index].ratio)
        if raw >= vault[index] or units >= x[index]:
            raise InsufficientLiquidity(f"Cannot withdraw {raw} of asset {index}")
        x[index] -= units
        vault[index] -= raw

    check_weights(normalized_balances(assets, vault), config.limits)
    d_final = compute_d(x, config.a)

    lp = config.supply - d_final * config.supply // d0
    if d0 < config.supply:
        lp += gross_up_fee(lp, config.recol_fee)
    fee = gross_up_fee(lp, fees.redeem_fee)
    lp_burned = lp + fee + 1
    if lp_burned > total_supply:
        raise InsufficientLiquidity(f"Burn of {lp_burned} exceeds supply {total_supply}")

    return RedeemExactResult(
        lp_burned=lp_burned,
        fee=fee,
        gov_fee=governance_share(fee, fees.gov_fee_share),
        vault_balances=vault,
    )

