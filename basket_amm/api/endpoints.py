"""API endpoints for basket and feeder pools.

Handlers are ``async`` and call the engine directly, so every operation runs
on the event loop thread and pools are never touched concurrently.
"""

import os

import structlog
from fastapi import APIRouter, Depends, HTTPException

from basket_amm.api.schemas import (
    AmountResponse,
    AmountsResponse,
    MintQuoteRequest,
    MintRequest,
    PoolView,
    RedeemProportionatelyRequest,
    RedeemQuoteRequest,
    RedeemRequest,
    SwapQuoteRequest,
    SwapRequest,
    SweepRequest,
)
from basket_amm.pool.basket import BasketPool
from basket_amm.pool.feeder import FeederPool
from basket_amm.registry import PoolRegistry, load_registry

logger = structlog.get_logger()

router = APIRouter()

_registry: PoolRegistry | None = None


def get_registry() -> PoolRegistry:
    """Dependency provider for the pool registry.

    Loads pools from the file named by BASKET_POOLS_FILE on first use; with
    no file configured the registry is empty. Override in tests:
        app.dependency_overrides[get_registry] = lambda: registry
    """
    global _registry
    if _registry is None:
        path = os.environ.get("BASKET_POOLS_FILE")
        _registry = load_registry(path) if path else PoolRegistry()
    return _registry


def _get_pool(pool_id: str, registry: PoolRegistry) -> BasketPool:
    pool = registry.get(pool_id)
    if pool is None:
        raise HTTPException(status_code=404, detail=f"Unknown pool {pool_id}")
    return pool


def _view(pool: BasketPool) -> PoolView:
    price, invariant = pool.get_price()
    return PoolView.build(
        pool.pool_id,
        pool.token_id,
        pool.state,
        a=pool.get_a(),
        price=price,
        invariant=invariant,
        base_pool=pool.base.pool_id if isinstance(pool, FeederPool) else None,
    )


@router.get("/pools")
async def list_pools(registry: PoolRegistry = Depends(get_registry)) -> list[PoolView]:
    """Snapshot of every registered pool."""
    return [_view(_get_pool(pool_id, registry)) for pool_id in registry.pool_ids]


@router.get("/pools/{pool_id}")
async def get_pool(pool_id: str, registry: PoolRegistry = Depends(get_registry)) -> PoolView:
    return _view(_get_pool(pool_id, registry))


# =============================================================================
# Quotes
# =============================================================================


@router.post("/pools/{pool_id}/quote/mint")
async def quote_mint(
    pool_id: str, request: MintQuoteRequest, registry: PoolRegistry = Depends(get_registry)
) -> AmountResponse:
    pool = _get_pool(pool_id, registry)
    return AmountResponse.of(pool.get_mint_output(request.asset, int(request.amount)))


@router.post("/pools/{pool_id}/quote/swap")
async def quote_swap(
    pool_id: str, request: SwapQuoteRequest, registry: PoolRegistry = Depends(get_registry)
) -> AmountResponse:
    pool = _get_pool(pool_id, registry)
    output = pool.get_swap_output(request.input_asset, request.output_asset, int(request.amount))
    return AmountResponse.of(output)


@router.post("/pools/{pool_id}/quote/redeem")
async def quote_redeem(
    pool_id: str, request: RedeemQuoteRequest, registry: PoolRegistry = Depends(get_registry)
) -> AmountResponse:
    pool = _get_pool(pool_id, registry)
    return AmountResponse.of(pool.get_redeem_output(request.asset, int(request.amount)))


# =============================================================================
# Mutations
# =============================================================================


@router.post("/pools/{pool_id}/mint")
async def mint(
    pool_id: str, request: MintRequest, registry: PoolRegistry = Depends(get_registry)
) -> AmountResponse:
    """Deposit an asset and mint basket tokens.

    Error Handling:
        - Invalid request schema: 422 (Pydantic)
        - Engine errors: mapped by the application's BasketError handler
    """
    pool = _get_pool(pool_id, registry)
    lp_out = pool.mint(
        request.asset, int(request.amount), int(request.min_output), request.recipient
    )
    return AmountResponse.of(lp_out)


@router.post("/pools/{pool_id}/swap")
async def swap(
    pool_id: str, request: SwapRequest, registry: PoolRegistry = Depends(get_registry)
) -> AmountResponse:
    pool = _get_pool(pool_id, registry)
    output = pool.swap(
        request.input_asset,
        request.output_asset,
        int(request.amount),
        int(request.min_output),
        request.recipient,
    )
    return AmountResponse.of(output)


@router.post("/pools/{pool_id}/redeem")
async def redeem(
    pool_id: str, request: RedeemRequest, registry: PoolRegistry = Depends(get_registry)
) -> AmountResponse:
    pool = _get_pool(pool_id, registry)
    output = pool.redeem(
        request.asset, int(request.amount), int(request.min_output), request.recipient
    )
    return AmountResponse.of(output)


@router.post("/pools/{pool_id}/redeem-proportionately")
async def redeem_proportionately(
    pool_id: str,
    request: RedeemProportionatelyRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> AmountsResponse:
    pool = _get_pool(pool_id, registry)
    outputs = pool.redeem_proportionately(
        int(request.amount),
        [int(minimum) for minimum in request.min_outputs],
        request.recipient,
    )
    return AmountsResponse.of(outputs)


@router.post("/pools/{pool_id}/sweep")
async def sweep(
    pool_id: str, request: SweepRequest, registry: PoolRegistry = Depends(get_registry)
) -> AmountResponse:
    pool = _get_pool(pool_id, registry)
    return AmountResponse.of(pool.sweep_governance_fees(request.recipient))
