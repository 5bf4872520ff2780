"""Basket state dataclasses.

``BasketState`` is the whole persisted layout of a pool. Every field is an
immutable value, so a snapshot is simply a reference to the current state and
a rollback is a reassignment.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from basket_amm.errors import InvalidAsset, InvalidConfiguration
from basket_amm.fees import FeeSchedule
from basket_amm.math.fixed_point import A_PRECISION, ONE_18
from basket_amm.models.assets import Asset


@dataclass(frozen=True)
class WeightLimits:
    """Allowed range of each asset's share of the basket value (1e18-scaled)."""

    min: int
    max: int

    def __post_init__(self) -> None:
        if self.min < 0 or self.min >= self.max or self.max > ONE_18:
            raise InvalidConfiguration(f"Invalid weight limits [{self.min}, {self.max}]")

    def contains(self, weight: int) -> bool:
        return self.min <= weight <= self.max


@dataclass(frozen=True)
class AmpData:
    """Amplification ramp window.

    Attributes:
        initial_a: A at ramp start, scaled by A_PRECISION
        target_a: A at ramp end, scaled by A_PRECISION
        ramp_start_time: Unix seconds
        ramp_end_time: Unix seconds
    """

    initial_a: int
    target_a: int
    ramp_start_time: int = 0
    ramp_end_time: int = 0

    @classmethod
    def fixed(cls, a: int) -> AmpData:
        """Build a non-ramping AmpData from an unscaled A."""
        scaled = a * A_PRECISION
        return cls(initial_a=scaled, target_a=scaled)


@dataclass(frozen=True)
class BasketState:
    """Complete state of a basket or feeder pool."""

    assets: tuple[Asset, ...]
    amp: AmpData
    limits: WeightLimits
    fees: FeeSchedule
    total_supply: int = 0
    pending_fees: int = 0
    paused: bool = False

    @property
    def effective_supply(self) -> int:
        """Supply including governance fees not yet swept."""
        return self.total_supply + self.pending_fees

    @property
    def vault_balances(self) -> list[int]:
        return [asset.vault_balance for asset in self.assets]

    @property
    def normalized_balances(self) -> list[int]:
        return [asset.normalized_balance for asset in self.assets]

    def index_of(self, asset_id: str) -> int:
        for i, asset in enumerate(self.assets):
            if asset.asset_id == asset_id:
                return i
        raise InvalidAsset(f"Unknown asset {asset_id}")

    def with_balances(self, vault_balances: list[int]) -> BasketState:
        assets = tuple(
            asset.with_balance(balance)
            for asset, balance in zip(self.assets, vault_balances, strict=True)
        )
        return replace(self, assets=assets)

    def replace_asset(self, index: int, asset: Asset) -> BasketState:
        assets = list(self.assets)
        assets[index] = asset
        return replace(self, assets=tuple(assets))
