"""Ratio provider boundary.

Pools may be given a provider that reports each asset's current decimals and
exchange rate. Ratios are refreshed from it at the start of every operation.
Providers are read-only collaborators; a provider that calls back into a
mutating pool operation is rejected by the pool's re-entrancy guard.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from basket_amm.errors import InvalidAsset
from basket_amm.math.fixed_point import ONE_18
from basket_amm.normalizer import ratio_for


@runtime_checkable
class RatioProvider(Protocol):
    """Source of per-asset conversion data."""

    def ratio(self, asset_id: str) -> int:
        """Exchange rate of one whole token in accounting units (1e18-scaled)."""
        ...

    def decimals(self, asset_id: str) -> int:
        """Token decimals."""
        ...


class StaticRatioProvider:
    """In-memory provider, mainly for tests and fixed configurations.

    Rates can be changed with ``set_rate`` to model rebasing or
    interest-bearing assets.
    """

    def __init__(self, decimals: dict[str, int], rates: dict[str, int] | None = None) -> None:
        self._decimals = dict(decimals)
        self._rates = dict(rates or {})

    def ratio(self, asset_id: str) -> int:
        if asset_id not in self._decimals:
            raise InvalidAsset(f"No ratio for asset {asset_id}")
        return self._rates.get(asset_id, ONE_18)

    def decimals(self, asset_id: str) -> int:
        if asset_id not in self._decimals:
            raise InvalidAsset(f"No decimals for asset {asset_id}")
        return self._decimals[asset_id]

    def set_rate(self, asset_id: str, rate: int) -> None:
        self._rates[asset_id] = rate


def resolve_ratio(provider: RatioProvider, asset_id: str) -> int:
    """Build an asset ratio (1e8-scaled) from provider data."""
    return ratio_for(provider.decimals(asset_id), provider.ratio(asset_id))
