"""Re-entrancy guard and all-or-nothing transactions over pools."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from typing import Protocol

import structlog

from basket_amm.errors import InsufficientLiquidity, ReentrancyDetected
from basket_amm.models.state import BasketState
from basket_amm.safe_int import SafeIntError

logger = structlog.get_logger()


class ReentrancyGuard:
    """Per-pool flag held for the duration of a mutating operation."""

    def __init__(self, pool_id: str) -> None:
        self._pool_id = pool_id
        self._entered = False

    @property
    def entered(self) -> bool:
        return self._entered

    @contextmanager
    def hold(self) -> Iterator[None]:
        """Hold the guard, raising ReentrancyDetected if it is already held."""
        if self._entered:
            raise ReentrancyDetected(f"Pool {self._pool_id} is already in an operation")
        self._entered = True
        try:
            yield
        finally:
            self._entered = False


class GuardedPool(Protocol):
    pool_id: str
    state: BasketState
    guard: ReentrancyGuard


@contextmanager
def transaction(*pools: GuardedPool) -> Iterator[None]:
    """Run a block with every pool guarded and snapshotted.

    On any error each pool's state is restored to its snapshot before the error
    propagates. Solver arithmetic errors surface as InsufficientLiquidity.
    """
    with ExitStack() as stack:
        for pool in pools:
            stack.enter_context(pool.guard.hold())
        snapshots = [(pool, pool.state) for pool in pools]
        try:
            with solver_errors():
                yield
        except Exception as err:
            logger.warning(
                "pool_operation_rejected",
                pool_ids=[pool.pool_id for pool in pools],
                error=type(err).__name__,
                detail=str(err),
            )
            _restore(snapshots)
            raise


def _restore(snapshots: list[tuple[GuardedPool, BasketState]]) -> None:
    for pool, state in snapshots:
        if pool.state is not state:
            logger.debug("pool_rollback", pool_id=pool.pool_id)
        pool.state = state


@contextmanager
def solver_errors() -> Iterator[None]:
    """Surface solver arithmetic errors as InsufficientLiquidity (quote path)."""
    try:
        yield
    except SafeIntError as err:
        raise InsufficientLiquidity(str(err)) from err
