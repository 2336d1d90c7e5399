"""Exception taxonomy for the token ledger and liquidity pool.

Contracts raise these at the failing step and never catch them. The host's
transaction boundary (``tokenswap.integration.host``) is the only place they
are intercepted: it rolls the whole invocation back and re-raises.

Every class carries a stable ``code`` (for logs and clients) and a
``user_message`` suitable for showing to an end user.
"""

from __future__ import annotations

from typing import Tuple


class TokenSwapError(Exception):
    """Base class for every failure signal raised by a contract or the host."""

    code = "error"
    user_message = "The operation could not be completed."


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------


class InitializationError(TokenSwapError):
    code = "initialization"
    user_message = "The contract is not in the expected lifecycle state."


class AlreadyInitialized(InitializationError):
    code = "already_initialized"
    user_message = "The contract has already been initialized."


class NotInitialized(InitializationError):
    code = "not_initialized"
    user_message = "The contract has not been initialized yet."


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


class AuthorizationError(TokenSwapError):
    code = "unauthorized"
    user_message = "The transaction was not authorized by the required account."


class ReentrancyError(AuthorizationError):
    code = "reentrancy"
    user_message = "A contract tried to call back into itself during an operation."


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ValidationError(TokenSwapError, ValueError):
    code = "invalid_argument"
    user_message = "One of the supplied values is not valid."


class NonPositiveAmount(ValidationError):
    code = "amount_not_positive"
    user_message = "The amount must be greater than zero."


class ExpirationNotInFuture(ValidationError):
    code = "expiration_not_in_future"
    user_message = "The approval expiration must be a future ledger."


class NegativeInput(ValidationError):
    code = "negative_input"
    user_message = "Square root of a negative value is undefined."


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


class LedgerError(TokenSwapError):
    code = "ledger"
    user_message = "The token ledger rejected the operation."


class InsufficientBalance(LedgerError):
    code = "insufficient_balance"
    user_message = "Insufficient token balance for this operation."


class InsufficientAllowance(LedgerError):
    code = "insufficient_allowance"
    user_message = "Insufficient token allowance. Please approve the contract to spend your tokens."


# ---------------------------------------------------------------------------
# Pool
# ---------------------------------------------------------------------------


class PoolError(TokenSwapError):
    code = "pool"
    user_message = "The liquidity pool rejected the operation."


class InsufficientShares(PoolError):
    code = "insufficient_shares_minted"
    user_message = "The deposit would mint fewer shares than the requested minimum."


class SlippageExceeded(PoolError):
    code = "slippage_exceeded"
    user_message = "Slippage tolerance exceeded. Try increasing slippage or reducing the swap amount."


class PoolEmpty(PoolError):
    code = "pool_empty"
    user_message = "The liquidity pool has no funds. Please add liquidity first."


class InsufficientShareBalance(PoolError):
    code = "insufficient_share_balance"
    user_message = "You do not hold enough pool shares for this withdrawal."


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------


class SwapArithmeticError(TokenSwapError, ArithmeticError):
    code = "arithmetic"
    user_message = "The operation produced an arithmetic fault."


class DivisionByZero(SwapArithmeticError):
    code = "division_by_zero"
    user_message = "The operation divided by an empty reserve."


class AmountOverflowError(SwapArithmeticError):
    code = "overflow"
    user_message = "The amount is outside the supported 128-bit range."


# ---------------------------------------------------------------------------
# Host checks
# ---------------------------------------------------------------------------


class InvariantViolation(TokenSwapError):
    """Raised when a committed state fails one or more consistency checks."""

    code = "invariant_violation"
    user_message = "Internal consistency check failed; the transaction was reverted."

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")


_UNKNOWN = ("unknown", "An unexpected error occurred. Please try again.")


def describe_error(exc: BaseException) -> Tuple[str, str]:
    """Map any exception to ``(code, user_message)``."""
    if isinstance(exc, TokenSwapError):
        return exc.code, exc.user_message
    return _UNKNOWN
