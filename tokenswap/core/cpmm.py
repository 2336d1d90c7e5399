"""
Constant Product Market Maker (CPMM) arithmetic.

Pure integer functions for swap pricing, share issuance and redemption.
Results must be bit-for-bit reproducible: every division truncates, and every
intermediate value is checked against the signed 128-bit range that the
ledgers store amounts in.

Algorithm Design:
- Type: Fixed-Point Integer Arithmetic / Deterministic Rounding
- Time Complexity: O(1) per swap, O(log y) for the integer square root
- Space Complexity: O(1) auxiliary
- Invariant: After each swap, x' * y' >= x * y (the fee stays in the pool)
"""

from typing import Tuple

from ..state.balances import Amount, I128_MAX, I128_MIN
from .errors import AmountOverflowError, DivisionByZero, NegativeInput, ValidationError

BPS_DENOMINATOR = 10_000
DEFAULT_FEE_BPS = 30


def checked_i128(value: int, name: str = "value") -> int:
    """Return `value` unchanged, or raise if it leaves the i128 range."""
    if value < I128_MIN or value > I128_MAX:
        raise AmountOverflowError(f"{name} overflows i128: {value}")
    return value


def _checked_div(numerator: int, denominator: int, name: str) -> int:
    if denominator == 0:
        raise DivisionByZero(f"{name}: division by zero")
    # Operands are non-negative here, so floor division is truncation toward zero.
    return numerator // denominator


def validate_fee_bps(fee_bps: int) -> int:
    if isinstance(fee_bps, bool) or not isinstance(fee_bps, int) or not (0 <= fee_bps <= BPS_DENOMINATOR):
        raise ValidationError(f"fee_bps must be an int in [0, {BPS_DENOMINATOR}]: {fee_bps!r}")
    return fee_bps


def get_amount_out(amount_in: Amount, reserve_in: Amount, reserve_out: Amount, fee_bps: int) -> Amount:
    """
    Output amount for an exact-in swap.

    Formula:
        fee_factor = 10_000 - fee_bps
        amount_in_with_fee = amount_in * fee_factor
        amount_out = floor(amount_in_with_fee * reserve_out
                           / (reserve_in * 10_000 + amount_in_with_fee))

    The fee is never paid out: it enlarges the input reserve, which is why the
    constant product cannot decrease.

    Raises:
        DivisionByZero: If the denominator is zero (empty input reserve and
            zero effective input)
        AmountOverflowError: If an intermediate product leaves i128
    """
    fee_factor = BPS_DENOMINATOR - fee_bps
    amount_in_with_fee = checked_i128(amount_in * fee_factor, "amount_in_with_fee")
    numerator = checked_i128(amount_in_with_fee * reserve_out, "numerator")
    denominator = checked_i128(
        checked_i128(reserve_in * BPS_DENOMINATOR, "reserve_in_scaled") + amount_in_with_fee,
        "denominator",
    )
    return _checked_div(numerator, denominator, "get_amount_out")


def integer_sqrt(y: int) -> int:
    """
    Floor of the square root of `y`, by Newton's method.

    Starts from x = y, z = (y + 1) // 2 and iterates x = z, z = (y // z + z) // 2
    while z < x. The first deposit into a pool mints exactly this many shares,
    so the iteration is kept as-is rather than delegated to `math.isqrt`
    (they agree for every y >= 0).

    Raises:
        NegativeInput: If y < 0
    """
    if y < 0:
        raise NegativeInput(f"negative sqrt: {y}")
    if y == 0:
        return 0
    x = y
    z = (y + 1) // 2
    while z < x:
        x = z
        z = (y // z + z) // 2
    return x


def compute_shares_to_mint(
    amount_a: Amount,
    amount_b: Amount,
    reserve_a: Amount,
    reserve_b: Amount,
    total_shares: Amount,
) -> Amount:
    """
    Shares minted for a deposit of (amount_a, amount_b).

    For the first deposit (total_shares == 0):
        shares = isqrt(amount_a * amount_b)
    which implicitly fixes the pool's opening exchange rate.

    For subsequent deposits:
        shares = min(floor(amount_a * total_shares / reserve_a),
                     floor(amount_b * total_shares / reserve_b))
    so an unbalanced deposit is credited only for its scarcer side.

    Raises:
        DivisionByZero: If a reserve is zero while shares are outstanding
    """
    if total_shares == 0:
        return integer_sqrt(checked_i128(amount_a * amount_b, "amount_a * amount_b"))

    shares_a = _checked_div(checked_i128(amount_a * total_shares, "amount_a * total_shares"), reserve_a, "shares_a")
    shares_b = _checked_div(checked_i128(amount_b * total_shares, "amount_b * total_shares"), reserve_b, "shares_b")
    return min(shares_a, shares_b)


def compute_redemption(
    shares: Amount,
    reserve_a: Amount,
    reserve_b: Amount,
    total_shares: Amount,
) -> Tuple[Amount, Amount]:
    """
    Reserve amounts paid out for burning `shares`.

    Formula:
        amount_a = floor(shares * reserve_a / total_shares)
        amount_b = floor(shares * reserve_b / total_shares)

    Truncation rounds in the pool's favor: a provider never receives more than
    the exact proportional claim.
    """
    amount_a = _checked_div(checked_i128(shares * reserve_a, "shares * reserve_a"), total_shares, "amount_a")
    amount_b = _checked_div(checked_i128(shares * reserve_b, "shares * reserve_b"), total_shares, "amount_b")
    return amount_a, amount_b


def constant_product(reserve_a: Amount, reserve_b: Amount) -> int:
    """k = reserve_a * reserve_b (unchecked; Python ints do not overflow)."""
    return reserve_a * reserve_b
