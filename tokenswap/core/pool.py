"""
Constant-product liquidity pool contract.

Holds reserves of two tokens and issues proportional shares against them.
The pool moves funds only through the token ledgers' own `transfer` /
`transfer_from`; it never edits ledger state.

Invariants:
- total_shares == sum(provider shares)
- reserve_a * reserve_b does not decrease across a swap with amount_in > 0
- reserve_x <= ledger balance of the pool in token x (equal unless someone
  transferred tokens to the pool directly)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..state.balances import Address, Amount
from ..state.shares import ShareTable
from .clients import TokenClient
from .cpmm import (
    DEFAULT_FEE_BPS,
    checked_i128,
    compute_redemption,
    compute_shares_to_mint,
    get_amount_out,
    validate_fee_bps,
)
from .errors import (
    AlreadyInitialized,
    InsufficientShareBalance,
    InsufficientShares,
    NotInitialized,
    PoolEmpty,
    SlippageExceeded,
    ValidationError,
)
from .token import require_amount, require_positive
from .types import ContractEnv, LiquidityEvent, SwapEvent


@dataclass
class PoolState:
    """
    Storage of one pool. `admin is None` means not initialized.

    Attributes:
        admin: Pool administrator
        token_a: Ledger address of the first token
        token_b: Ledger address of the second token
        fee_bps: Swap fee in basis points, charged on the input side
        reserve_a: Tracked pool holdings of token_a
        reserve_b: Tracked pool holdings of token_b
        total_shares: Outstanding shares
        shares: Per-provider share balances
    """

    admin: Optional[Address] = None
    token_a: Optional[Address] = None
    token_b: Optional[Address] = None
    fee_bps: Optional[int] = None
    reserve_a: Amount = 0
    reserve_b: Amount = 0
    total_shares: Amount = 0
    shares: ShareTable = field(default_factory=ShareTable)

    def verify_invariants(self) -> List[str]:
        violations = []
        if self.reserve_a < 0 or self.reserve_b < 0:
            violations.append("reserves_non_negative")
        if not self.shares.verify_non_negative():
            violations.append("shares_non_negative")
        if self.total_shares != self.shares.total():
            violations.append("total_shares_equals_provider_shares")
        return violations


class LiquidityPoolContract:
    """Two-token constant-product pool with a single basis-point fee."""

    EXPORTS = frozenset(
        {
            "initialize",
            "add_liquidity",
            "remove_liquidity",
            "swap_a_for_b",
            "swap_b_for_a",
        }
    )
    VIEWS = frozenset(
        {
            "get_price_a_to_b",
            "get_price_b_to_a",
            "get_reserves",
            "total_shares",
            "get_shares",
            "get_tokens",
            "get_fee",
        }
    )

    def __init__(self, env: ContractEnv, address: Address) -> None:
        self.env = env
        self.address = address
        self.state = PoolState()

    def initialize(self, admin: Address, token_a: Address, token_b: Address, fee_bps: int) -> None:
        if self.state.admin is not None:
            raise AlreadyInitialized("already initialized")
        validate_fee_bps(fee_bps)
        if token_a == token_b:
            raise ValidationError(f"pool tokens must differ: {token_a}")

        self.state.admin = admin
        self.state.token_a = token_a
        self.state.token_b = token_b
        self.state.fee_bps = fee_bps
        self.state.reserve_a = 0
        self.state.reserve_b = 0
        self.state.total_shares = 0

    # ------------------------------------------------------------------
    # Liquidity
    # ------------------------------------------------------------------

    def add_liquidity(self, provider: Address, amount_a: Amount, amount_b: Amount, min_shares: Amount) -> Amount:
        """
        Deposit both tokens and mint shares.

        The first deposit mints isqrt(amount_a * amount_b) shares; later
        deposits are credited for their scarcer side only.

        Raises:
            InsufficientShares: If fewer than `min_shares` would be minted
        """
        self.env.require_auth(provider)
        amount_a = require_positive(amount_a, "amount_a")
        amount_b = require_positive(amount_b, "amount_b")
        min_shares = require_amount(min_shares, "min_shares")
        token_a, token_b = self.get_tokens()
        me = self.env.current_contract_address()
        state = self.state

        shares = compute_shares_to_mint(amount_a, amount_b, state.reserve_a, state.reserve_b, state.total_shares)
        if shares < min_shares:
            raise InsufficientShares(f"insufficient shares minted: {shares} < {min_shares}")

        TokenClient(self.env, token_a).transfer_from(me, provider, me, amount_a)
        TokenClient(self.env, token_b).transfer_from(me, provider, me, amount_b)

        state.reserve_a = checked_i128(state.reserve_a + amount_a, "reserve_a")
        state.reserve_b = checked_i128(state.reserve_b + amount_b, "reserve_b")
        state.total_shares = checked_i128(state.total_shares + shares, "total_shares")
        state.shares.add(provider, shares)

        self.env.publish(
            ("add_liq", provider),
            LiquidityEvent(provider=provider, amount_a=amount_a, amount_b=amount_b, shares=shares),
        )
        return shares

    def remove_liquidity(
        self,
        provider: Address,
        shares: Amount,
        min_amount_a: Amount,
        min_amount_b: Amount,
    ) -> Tuple[Amount, Amount]:
        """
        Burn shares and pay out the proportional reserves (rounded down).

        Pool state is reduced before the payout transfers are made.

        Raises:
            InsufficientShareBalance: If the provider holds fewer than `shares`
            SlippageExceeded: If either payout is below its minimum
        """
        self.env.require_auth(provider)
        shares = require_positive(shares, "shares")
        min_amount_a = require_amount(min_amount_a, "min_amount_a")
        min_amount_b = require_amount(min_amount_b, "min_amount_b")
        token_a, token_b = self.get_tokens()
        state = self.state

        me = self.env.current_contract_address()
        provider_shares = state.shares.get(provider)
        if provider_shares < shares:
            raise InsufficientShareBalance(f"insufficient shares: {provider_shares} < {shares}")

        amount_a, amount_b = compute_redemption(shares, state.reserve_a, state.reserve_b, state.total_shares)
        if amount_a < min_amount_a or amount_b < min_amount_b:
            raise SlippageExceeded(
                f"slippage exceeded: ({amount_a}, {amount_b}) < ({min_amount_a}, {min_amount_b})"
            )

        state.reserve_a -= amount_a
        state.reserve_b -= amount_b
        state.total_shares -= shares
        state.shares.subtract(provider, shares)

        TokenClient(self.env, token_a).transfer(me, provider, amount_a)
        TokenClient(self.env, token_b).transfer(me, provider, amount_b)

        self.env.publish(
            ("rem_liq", provider),
            LiquidityEvent(provider=provider, amount_a=amount_a, amount_b=amount_b, shares=shares),
        )
        return amount_a, amount_b

    # ------------------------------------------------------------------
    # Swaps
    # ------------------------------------------------------------------

    def swap_a_for_b(self, user: Address, amount_in: Amount, min_amount_out: Amount) -> Amount:
        return self._swap(user, amount_in, min_amount_out, a_to_b=True)

    def swap_b_for_a(self, user: Address, amount_in: Amount, min_amount_out: Amount) -> Amount:
        return self._swap(user, amount_in, min_amount_out, a_to_b=False)

    def _swap(self, user: Address, amount_in: Amount, min_amount_out: Amount, *, a_to_b: bool) -> Amount:
        self.env.require_auth(user)
        amount_in = require_positive(amount_in, "amount_in")
        min_amount_out = require_amount(min_amount_out, "min_amount_out")
        token_a, token_b = self.get_tokens()
        state = self.state

        if state.reserve_a == 0 or state.reserve_b == 0:
            raise PoolEmpty("pool has no liquidity")
        me = self.env.current_contract_address()

        if a_to_b:
            token_in, token_out = token_a, token_b
            reserve_in, reserve_out = state.reserve_a, state.reserve_b
        else:
            token_in, token_out = token_b, token_a
            reserve_in, reserve_out = state.reserve_b, state.reserve_a

        amount_out = get_amount_out(amount_in, reserve_in, reserve_out, self.get_fee())
        if amount_out < min_amount_out:
            raise SlippageExceeded(f"slippage exceeded: {amount_out} < {min_amount_out}")

        # Pull the input first, then book both reserves, then pay out: the
        # pricing formula assumes amount_in is already in the pool.
        TokenClient(self.env, token_in).transfer_from(me, user, me, amount_in)

        new_reserve_in = checked_i128(reserve_in + amount_in, "reserve_in")
        new_reserve_out = reserve_out - amount_out
        if a_to_b:
            state.reserve_a, state.reserve_b = new_reserve_in, new_reserve_out
        else:
            state.reserve_b, state.reserve_a = new_reserve_in, new_reserve_out

        TokenClient(self.env, token_out).transfer(me, user, amount_out)

        self.env.publish(
            ("swap", user),
            SwapEvent(user=user, token_in=token_in, token_out=token_out, amount_in=amount_in, amount_out=amount_out),
        )
        return amount_out

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def get_price_a_to_b(self, amount_in: Amount) -> Amount:
        return self._quote(amount_in, self.state.reserve_a, self.state.reserve_b)

    def get_price_b_to_a(self, amount_in: Amount) -> Amount:
        return self._quote(amount_in, self.state.reserve_b, self.state.reserve_a)

    def _quote(self, amount_in: Amount, reserve_in: Amount, reserve_out: Amount) -> Amount:
        amount_in = require_amount(amount_in, "amount_in")
        if reserve_in == 0 or reserve_out == 0 or amount_in <= 0:
            return 0
        return get_amount_out(amount_in, reserve_in, reserve_out, self.get_fee())

    def get_reserves(self) -> Tuple[Amount, Amount]:
        return self.state.reserve_a, self.state.reserve_b

    def total_shares(self) -> Amount:
        return self.state.total_shares

    def get_shares(self, provider: Address) -> Amount:
        return self.state.shares.get(provider)

    def get_tokens(self) -> Tuple[Address, Address]:
        if self.state.token_a is None or self.state.token_b is None:
            raise NotInitialized("pool not initialized")
        return self.state.token_a, self.state.token_b

    def get_fee(self) -> int:
        return DEFAULT_FEE_BPS if self.state.fee_bps is None else self.state.fee_bps

    def verify_invariants(self) -> List[str]:
        violations = self.state.verify_invariants()
        if self.state.token_a is None or self.state.token_b is None:
            return violations
        held_a = TokenClient(self.env, self.state.token_a).balance(self.address)
        held_b = TokenClient(self.env, self.state.token_b).balance(self.address)
        if self.state.reserve_a > held_a or self.state.reserve_b > held_b:
            violations.append("reserves_backed_by_ledger")
        return violations
