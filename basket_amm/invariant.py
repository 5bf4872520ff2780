"""Amplified (StableSwap) invariant solver.

Pure integer functions over normalized balances. The invariant D satisfies

    Ann * S + D = Ann * D + D^(n+1) / (n^n * P)

with ``S = sum(x)``, ``P = prod(x)`` and ``Ann = A * n``. This is the
Balancer parameterization (``A * n``, not ``A * n^n``), with A
stored scaled by ``A_PRECISION``.

Both solvers use Newton-Raphson and stop when two successive estimates differ
by at most one unit. Exceeding ``MAX_ITERATIONS`` is fatal: a stale D would
corrupt every later weight and price check.
"""

from collections.abc import Sequence

from basket_amm.constants import MAX_ITERATIONS, MIN_SOLVED_BALANCE
from basket_amm.errors import ConvergenceFailure, InsufficientLiquidity, InvalidAsset
from basket_amm.math.fixed_point import A_PRECISION
from basket_amm.safe_int import S

__all__ = ["compute_d", "compute_balance_for_d"]


def compute_d(balances: Sequence[int], a: int) -> int:
    """Calculate the invariant D using Newton-Raphson iteration.

    Algorithm:
        1. Initial guess: D = sum(balances)
        2. Iterate until |D_new - D_old| <= 1
        3. Max iterations: 255

    Args:
        balances: Normalized balances (18 decimals)
        a: Amplification coefficient scaled by A_PRECISION

    Returns:
        The invariant D (0 for an empty basket)

    Raises:
        InsufficientLiquidity: If some balance is zero while others are not
        ConvergenceFailure: If iteration doesn't converge
    """
    n_coins = len(balances)
    total = sum(balances)
    if n_coins == 0 or total == 0:
        return 0

    for i, bal in enumerate(balances):
        if bal <= 0:
            raise InsufficientLiquidity(f"Balance at index {i} must be positive")

    sum_balances = S(total)
    d_prev = sum_balances
    amp_times_n = S(a) * n_coins

    for _ in range(MAX_ITERATIONS):
        # d_p = D^(n+1) / (n^n * prod(balances)), built one balance at a time
        d_p = d_prev
        for bal in balances:
            d_p = (d_p * d_prev) // (S(bal) * n_coins)

        numerator = ((amp_times_n * sum_balances) // A_PRECISION + d_p * n_coins) * d_prev
        denominator = ((amp_times_n - A_PRECISION) * d_prev) // A_PRECISION + d_p * (n_coins + 1)

        d_new = numerator // denominator

        if d_new.abs_diff(d_prev) <= 1:
            return d_new.value

        d_prev = d_new

    raise ConvergenceFailure(f"Invariant did not converge after {MAX_ITERATIONS} iterations")


def compute_balance_for_d(
    balances: Sequence[int],
    a: int,
    target_d: int,
    index: int,
) -> int:
    """Solve for ``balances[index]`` so that the invariant equals ``target_d``.

    All other balances are held fixed; the current value at ``index`` is
    ignored. Newton iterates on

        y^2 + (b - D) * y = c

    where ``b = S' + D / Ann`` and ``c = D^(n+1) / (Ann * n^n * P')`` over the
    other balances. The per-balance divisions building ``c`` round down; the
    final division by ``Ann * n`` and each iterate round up, which keeps the
    solved balance within rounding noise of the exact one. Callers subtract
    one further unit from any output derived from it.

    Args:
        balances: Normalized balances (18 decimals)
        a: Amplification coefficient scaled by A_PRECISION
        target_d: The invariant to reproduce
        index: Index of the balance to solve for

    Returns:
        The solved balance

    Raises:
        InvalidAsset: If index is out of range
        InsufficientLiquidity: If another balance is zero or the solution drains the basket
        ConvergenceFailure: If iteration doesn't converge
    """
    n_coins = len(balances)
    if index < 0 or index >= n_coins:
        raise InvalidAsset(f"Index {index} out of range for {n_coins} assets")

    d = S(target_d)
    amp_times_n = S(a) * n_coins

    c = d
    sum_others = S(0)
    for j, bal in enumerate(balances):
        if j == index:
            continue
        if bal <= 0:
            raise InsufficientLiquidity(f"Balance at index {j} must be positive")
        sum_others = sum_others + bal
        c = (c * d) // (S(bal) * n_coins)

    c = (c * d * A_PRECISION).ceiling_div(amp_times_n * n_coins)
    b = sum_others + (d * A_PRECISION) // amp_times_n

    token_balance = d
    for _ in range(MAX_ITERATIONS):
        prev_token_balance = token_balance

        numerator = token_balance * token_balance + c
        shifted = token_balance * 2 + b
        if shifted <= d:
            raise ConvergenceFailure("Denominator became non-positive")
        token_balance = numerator.ceiling_div(shifted - d)

        if token_balance.abs_diff(prev_token_balance) <= 1:
            if token_balance < MIN_SOLVED_BALANCE:
                raise InsufficientLiquidity(
                    f"Solved balance {token_balance.value} would drain the basket"
                )
            return token_balance.value

    raise ConvergenceFailure(f"Balance did not converge after {MAX_ITERATIONS} iterations")
