"""Pool registry: named base baskets and feeder pools.

Pools are loaded from a JSON file validated by ``PoolsFile``. Bases are built
first so each feeder can be attached to its base by id.
"""

from __future__ import annotations

import json
from pathlib import Path

import structlog

from basket_amm.errors import InvalidConfiguration
from basket_amm.models.parsing import PoolsFile
from basket_amm.pool.basket import BasketPool, Clock
from basket_amm.pool.feeder import FeederPool
from basket_amm.ratio_provider import RatioProvider

logger = structlog.get_logger()


class PoolRegistry:
    """Registry of basket and feeder pools keyed by pool id."""

    def __init__(self, pools: list[BasketPool] | None = None) -> None:
        self._pools: dict[str, BasketPool] = {}
        if pools:
            for pool in pools:
                self.add(pool)

    def add(self, pool: BasketPool) -> None:
        """Add a pool.

        Raises:
            InvalidConfiguration: If a pool with the same id is already registered
        """
        if pool.pool_id in self._pools:
            raise InvalidConfiguration(f"Duplicate pool id {pool.pool_id}")
        self._pools[pool.pool_id] = pool
        logger.debug("pool_registered", pool_id=pool.pool_id, assets=len(pool.assets))

    def get(self, pool_id: str) -> BasketPool | None:
        return self._pools.get(pool_id)

    @property
    def pool_ids(self) -> list[str]:
        return list(self._pools)

    @property
    def pool_count(self) -> int:
        return len(self._pools)

    def __contains__(self, pool_id: object) -> bool:
        return pool_id in self._pools

    @classmethod
    def from_config(
        cls,
        config: PoolsFile,
        *,
        ratio_provider: RatioProvider | None = None,
        clock: Clock | None = None,
    ) -> PoolRegistry:
        """Build every pool described by ``config``.

        Raises:
            InvalidConfiguration: If a feeder names an unknown base or a
                parameter is out of bounds
        """
        registry = cls()
        for params in config.bases:
            registry.add(BasketPool.from_params(params, ratio_provider=ratio_provider, clock=clock))

        for params in config.feeders:
            base = registry.get(params.base_pool)
            if base is None or isinstance(base, FeederPool):
                raise InvalidConfiguration(
                    f"Feeder {params.pool_id} references unknown base {params.base_pool}"
                )
            registry.add(
                FeederPool.from_feeder_params(
                    params, base, ratio_provider=ratio_provider, clock=clock
                )
            )

        logger.info(
            "pools_loaded",
            bases=len(config.bases),
            feeders=len(config.feeders),
        )
        return registry


def load_registry(path: str | Path) -> PoolRegistry:
    """Load a registry from a JSON pools file."""
    with open(path) as f:
        data = json.load(f)
    return PoolRegistry.from_config(PoolsFile.model_validate(data))
