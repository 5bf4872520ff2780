"""Basket error classes.

Every engine failure aborts the whole call; the pool restores its pre-call
snapshot before the error reaches the caller. Quotes raise the same classes
as the mutation they predict.
"""


class BasketError(Exception):
    """Base error for basket and feeder pool operations."""

    pass


class InvalidAsset(BasketError):
    """Index or identifier is not a member of the basket, or the pair is invalid."""

    pass


class InvalidQuantity(BasketError):
    """Amount is zero, below the minimum deposit, or argument lengths mismatch."""

    pass


class WeightLimitExceeded(BasketError):
    """A post-operation asset weight falls outside [min_weight, max_weight]."""

    pass


class SlippageExceeded(BasketError):
    """Output below the caller's minimum (or input above the caller's maximum)."""

    pass


class InsufficientLiquidity(BasketError):
    """The basket cannot provide the requested output or burn."""

    pass


class AssetStatusInvalid(BasketError):
    """Asset is not Normal and cannot take new exposure."""

    pass


class PoolPaused(BasketError):
    """Pool is paused by governance; minting and swapping are disabled."""

    pass


class ConvergenceFailure(BasketError):
    """Newton iteration did not converge within the iteration bound."""

    pass


class Unauthorized(BasketError):
    """Caller is not the pool governor."""

    pass


class ReentrancyDetected(BasketError):
    """A mutating operation was entered while another is in progress on the pool."""

    pass


class InvalidConfiguration(BasketError):
    """Governance parameter is out of bounds."""

    pass


class InvariantViolation(BasketError):
    """Post-operation state failed a basket invariant."""

    pass
