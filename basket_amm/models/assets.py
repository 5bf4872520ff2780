"""Asset dataclasses for basket pools."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from basket_amm.normalizer import normalize


class AssetStatus(str, Enum):
    """Per-asset health flag set by governance.

    Anything other than NORMAL blocks new exposure (mint-in, swap-in);
    redemptions and swap-out remain allowed.
    """

    NORMAL = "normal"
    BROKEN_BELOW_PEG = "broken_below_peg"
    BROKEN_ABOVE_PEG = "broken_above_peg"
    BLACKLISTED = "blacklisted"


@dataclass(frozen=True)
class Asset:
    """A basket member.

    Attributes:
        asset_id: Identifier (token address or symbol)
        ratio: Raw -> normalized scalar, scaled by 1e8
        vault_balance: Raw units held by the basket
        status: Health flag
    """

    asset_id: str
    ratio: int
    vault_balance: int = 0
    status: AssetStatus = AssetStatus.NORMAL

    @property
    def normalized_balance(self) -> int:
        """Vault balance in 18-decimal accounting units."""
        return normalize(self.vault_balance, self.ratio)

    @property
    def is_normal(self) -> bool:
        return self.status is AssetStatus.NORMAL

    def with_balance(self, vault_balance: int) -> Asset:
        return replace(self, vault_balance=vault_balance)
