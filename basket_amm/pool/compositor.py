"""Routing of feeder operations through the base basket.

Each routed operation is two hops, one on the base basket and one on the
feeder, run in a single transaction spanning both pools. Quotes compose the
two pools' quotes in the same order, so they match execution exactly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from basket_amm.pool.guard import transaction

if TYPE_CHECKING:
    from basket_amm.pool.basket import BasketPool
    from basket_amm.pool.feeder import FeederPool

logger = structlog.get_logger()

BASE_LEG = 0
FEEDER_LEG = 1


class FeederCompositor:
    """Cascades feeder operations on base-basket constituents into the base basket."""

    def __init__(self, feeder: FeederPool, base: BasketPool) -> None:
        self.feeder = feeder
        self.base = base

    def mint(self, constituent: str, amount: int, min_output: int, recipient: str) -> int:
        """Mint base tokens with a constituent, then mint feeder tokens with them."""
        with transaction(self.feeder, self.base):
            base_tokens = self.base._mint([constituent], [amount], 0, self.feeder.pool_id)
            lp_out = self.feeder._mint([BASE_LEG], [base_tokens], min_output, recipient)
        logger.info(
            "feeder_mint_via_base",
            pool_id=self.feeder.pool_id,
            constituent=constituent,
            amount_in=amount,
            base_tokens=base_tokens,
            lp_out=lp_out,
        )
        return lp_out

    def get_mint_output(self, constituent: str, amount: int) -> int:
        base_tokens = self.base.get_mint_output(constituent, amount)
        return self.feeder.get_mint_output(BASE_LEG, base_tokens)

    def swap_from_constituent(
        self, constituent: str, amount: int, min_output: int, recipient: str
    ) -> int:
        """Constituent -> base token (base mint) -> feeder asset (feeder swap)."""
        with transaction(self.feeder, self.base):
            base_tokens = self.base._mint([constituent], [amount], 0, self.feeder.pool_id)
            output = self.feeder._swap(BASE_LEG, FEEDER_LEG, base_tokens, min_output, recipient)
        logger.info(
            "feeder_swap_via_base",
            pool_id=self.feeder.pool_id,
            input_asset=constituent,
            amount_in=amount,
            base_tokens=base_tokens,
            amount_out=output,
        )
        return output

    def get_swap_from_constituent_output(self, constituent: str, amount: int) -> int:
        base_tokens = self.base.get_mint_output(constituent, amount)
        return self.feeder.get_swap_output(BASE_LEG, FEEDER_LEG, base_tokens)

    def swap_to_constituent(
        self, constituent: str, amount: int, min_output: int, recipient: str
    ) -> int:
        """Feeder asset -> base token (feeder swap) -> constituent (base redeem)."""
        with transaction(self.feeder, self.base):
            base_tokens = self.feeder._swap(FEEDER_LEG, BASE_LEG, amount, 0, self.base.pool_id)
            output = self.base._redeem(constituent, base_tokens, min_output, recipient)
        logger.info(
            "feeder_swap_via_base",
            pool_id=self.feeder.pool_id,
            output_asset=constituent,
            amount_in=amount,
            base_tokens=base_tokens,
            amount_out=output,
        )
        return output

    def get_swap_to_constituent_output(self, constituent: str, amount: int) -> int:
        base_tokens = self.feeder.get_swap_output(FEEDER_LEG, BASE_LEG, amount)
        return self.base.get_redeem_output(constituent, base_tokens)

    def redeem(self, constituent: str, lp_amount: int, min_output: int, recipient: str) -> int:
        """Redeem feeder tokens to the base token, then redeem that for a constituent."""
        with transaction(self.feeder, self.base):
            base_tokens = self.feeder._redeem(BASE_LEG, lp_amount, 0, self.base.pool_id)
            output = self.base._redeem(constituent, base_tokens, min_output, recipient)
        logger.info(
            "feeder_redeem_via_base",
            pool_id=self.feeder.pool_id,
            constituent=constituent,
            lp_amount=lp_amount,
            base_tokens=base_tokens,
            amount_out=output,
        )
        return output

    def get_redeem_output(self, constituent: str, lp_amount: int) -> int:
        base_tokens = self.feeder.get_redeem_output(BASE_LEG, lp_amount)
        return self.base.get_redeem_output(constituent, base_tokens)
