"""Protocol constants for basket and feeder pools.

Centralizes parameter bounds used by governance setters and pool logic.
"""

from basket_amm.math.fixed_point import ONE_18

# Swap and redemption fees are capped at 1%
MAX_FEE = 10**16

# At most half of each collected fee may be diverted to governance
MAX_GOV_FEE_SHARE = 5 * 10**17

# Recollateralisation fee is capped at 0.5%
MAX_RECOL_FEE = 5 * 10**15

# Single-asset deposits must be worth more than this many normalized units
MIN_DEPOSIT = 10**6

# Solved balances below this are treated as draining the basket
MIN_SOLVED_BALANCE = 10**8

# Newton iteration bound for both invariant solvers
MAX_ITERATIONS = 255

# Post-operation price check tolerates this much solver noise in D
D_TOLERANCE = 2

# Amplification ramp bounds (A unscaled)
MAX_A = 10**6
MIN_RAMP_TIME = 24 * 60 * 60
MAX_A_CHANGE_FACTOR = 10

# Feeder pool weight limit bounds
FEEDER_MAX_MIN_WEIGHT = 3 * 10**17
FEEDER_MIN_MAX_WEIGHT = 7 * 10**17

# Defaults for a freshly created basket
DEFAULT_MIN_WEIGHT = 5 * 10**16
DEFAULT_MAX_WEIGHT = 65 * 10**16
DEFAULT_SWAP_FEE = 6 * 10**14
DEFAULT_REDEEM_FEE = 3 * 10**14
DEFAULT_GOV_FEE_SHARE = 10**17
DEFAULT_RECOL_FEE = 5 * 10**13

# Price of an unseeded basket
INITIAL_PRICE = ONE_18
