"""
Fungible token ledger contract.

Balances, allowances with a ledger-sequence expiration, total supply and
metadata for one token. Every mutating operation runs inside the host's
transaction: a raised error discards all of its writes.

Invariants:
- total_supply == sum(balances)
- balances >= 0
- allowances only decrease by spending, or are overwritten by `approve`
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..state.allowances import AllowanceTable
from ..state.balances import Address, Amount, BalanceTable, is_amount
from .cpmm import checked_i128
from .errors import (
    AlreadyInitialized,
    ExpirationNotInFuture,
    InsufficientAllowance,
    InsufficientBalance,
    NonPositiveAmount,
    NotInitialized,
    ValidationError,
)
from .types import ContractEnv

DEFAULT_DECIMALS = 7
DEFAULT_NAME = "Stellar Swap Token"
DEFAULT_SYMBOL = "SST"

_U32_MAX = 0xFFFFFFFF


def require_amount(value: object, name: str = "amount") -> Amount:
    if not is_amount(value):
        raise ValidationError(f"{name} must be an int in the i128 range: {value!r}")
    return value  # type: ignore[return-value]


def require_positive(value: object, name: str = "amount") -> Amount:
    amount = require_amount(value, name)
    if amount <= 0:
        raise NonPositiveAmount(f"{name} must be positive: {amount}")
    return amount


@dataclass
class TokenState:
    """Storage of one token ledger. `admin is None` means not initialized."""

    admin: Optional[Address] = None
    name: Optional[str] = None
    symbol: Optional[str] = None
    decimals: Optional[int] = None
    total_supply: Amount = 0
    balances: BalanceTable = field(default_factory=BalanceTable)
    allowances: AllowanceTable = field(default_factory=AllowanceTable)

    def verify_invariants(self) -> List[str]:
        violations = []
        if not self.balances.verify_non_negative():
            violations.append("balances_non_negative")
        if self.total_supply != self.balances.total():
            violations.append("supply_equals_balances")
        return violations


class TokenContract:
    """SEP-41 style token ledger."""

    EXPORTS = frozenset(
        {
            "initialize",
            "mint",
            "burn",
            "burn_from",
            "transfer",
            "transfer_from",
            "approve",
            "set_admin",
        }
    )
    VIEWS = frozenset({"balance", "allowance", "decimals", "name", "symbol", "total_supply", "admin"})

    def __init__(self, env: ContractEnv, address: Address) -> None:
        self.env = env
        self.address = address
        self.state = TokenState()

    # ------------------------------------------------------------------
    # Lifecycle / admin
    # ------------------------------------------------------------------

    def initialize(self, admin: Address, decimal: int, name: str, symbol: str) -> None:
        if self.state.admin is not None:
            raise AlreadyInitialized("already initialized")
        if isinstance(decimal, bool) or not isinstance(decimal, int) or not (0 <= decimal <= _U32_MAX):
            raise ValidationError(f"decimals must be a u32: {decimal!r}")
        if not isinstance(name, str) or not isinstance(symbol, str):
            raise ValidationError("name and symbol must be strings")
        self.state.admin = admin
        self.state.name = name
        self.state.symbol = symbol
        self.state.decimals = decimal
        self.state.total_supply = 0

    def set_admin(self, new_admin: Address) -> None:
        admin = self.admin()
        self.env.require_auth(admin)
        self.state.admin = new_admin
        self.env.publish(("set_admin", admin), new_admin)

    # ------------------------------------------------------------------
    # Supply
    # ------------------------------------------------------------------

    def mint(self, to: Address, amount: Amount) -> None:
        admin = self.admin()
        self.env.require_auth(admin)
        amount = require_positive(amount)

        state = self.state
        state.balances.set(to, checked_i128(state.balances.get(to) + amount, "balance"))
        state.total_supply = checked_i128(state.total_supply + amount, "total_supply")

        self.env.publish(("mint", to), amount)

    def burn(self, from_: Address, amount: Amount) -> None:
        self.env.require_auth(from_)
        amount = require_positive(amount)

        self._debit(from_, amount)
        self.state.total_supply -= amount

        self.env.publish(("burn", from_), amount)

    def burn_from(self, spender: Address, from_: Address, amount: Amount) -> None:
        self.env.require_auth(spender)
        amount = require_positive(amount)

        self._spend_allowance(from_, spender, amount)
        self._debit(from_, amount)
        self.state.total_supply -= amount

        self.env.publish(("burn", from_), amount)

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------

    def transfer(self, from_: Address, to: Address, amount: Amount) -> None:
        self.env.require_auth(from_)
        amount = require_positive(amount)

        self._move(from_, to, amount)

        self.env.publish(("transfer", from_, to), amount)

    def transfer_from(self, spender: Address, from_: Address, to: Address, amount: Amount) -> None:
        self.env.require_auth(spender)
        amount = require_positive(amount)

        self._spend_allowance(from_, spender, amount)
        self._move(from_, to, amount)

        self.env.publish(("transfer", from_, to), amount)

    def approve(self, from_: Address, spender: Address, amount: Amount, expiration_sequence: int) -> None:
        self.env.require_auth(from_)
        amount = require_amount(amount)
        if amount < 0:
            raise ValidationError(f"allowance must be non-negative: {amount}")
        if isinstance(expiration_sequence, bool) or not isinstance(expiration_sequence, int):
            raise ValidationError(f"expiration_sequence must be an int: {expiration_sequence!r}")
        current = self.env.sequence
        if expiration_sequence <= current:
            raise ExpirationNotInFuture(
                f"expiration_sequence must be in the future: {expiration_sequence} <= {current}"
            )

        allowances = self.state.allowances
        allowances.purge_expired(current)
        allowances.set(from_, spender, amount, expiration_sequence)

        self.env.publish(("approve", from_, spender), (amount, expiration_sequence))

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def balance(self, id: Address) -> Amount:
        return self.state.balances.get(id)

    def allowance(self, from_: Address, spender: Address) -> Amount:
        return self.state.allowances.get(from_, spender, self.env.sequence)

    def decimals(self) -> int:
        return DEFAULT_DECIMALS if self.state.decimals is None else self.state.decimals

    def name(self) -> str:
        return DEFAULT_NAME if self.state.name is None else self.state.name

    def symbol(self) -> str:
        return DEFAULT_SYMBOL if self.state.symbol is None else self.state.symbol

    def total_supply(self) -> Amount:
        return self.state.total_supply

    def admin(self) -> Address:
        if self.state.admin is None:
            raise NotInitialized("token not initialized")
        return self.state.admin

    def verify_invariants(self) -> List[str]:
        return self.state.verify_invariants()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _spend_allowance(self, from_: Address, spender: Address, amount: Amount) -> None:
        allowance = self.allowance(from_, spender)
        if allowance < amount:
            raise InsufficientAllowance(f"insufficient allowance: {allowance} < {amount}")
        self.state.allowances.spend(from_, spender, amount, self.env.sequence)

    def _debit(self, from_: Address, amount: Amount) -> None:
        balance = self.state.balances.get(from_)
        if balance < amount:
            raise InsufficientBalance(f"insufficient balance: {balance} < {amount}")
        self.state.balances.set(from_, balance - amount)

    def _move(self, from_: Address, to: Address, amount: Amount) -> None:
        self._debit(from_, amount)
        balances = self.state.balances
        balances.set(to, checked_i128(balances.get(to) + amount, "balance"))
