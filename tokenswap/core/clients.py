"""
Typed call wrappers around `ContractEnv.invoke` / `ContractEnv.view`.

The pool uses `TokenClient` for its cross-contract calls; applications and
tests use both clients against a host. A call made from inside a running
contract joins that contract's transaction.
"""

from __future__ import annotations

from typing import Tuple

from ..state.balances import Address, Amount
from .types import ContractEnv


class TokenClient:
    def __init__(self, env: ContractEnv, address: Address) -> None:
        self.env = env
        self.address = address

    def initialize(self, admin: Address, decimal: int, name: str, symbol: str) -> None:
        self.env.invoke(self.address, "initialize", admin, decimal, name, symbol)

    def mint(self, to: Address, amount: Amount) -> None:
        self.env.invoke(self.address, "mint", to, amount)

    def burn(self, from_: Address, amount: Amount) -> None:
        self.env.invoke(self.address, "burn", from_, amount)

    def burn_from(self, spender: Address, from_: Address, amount: Amount) -> None:
        self.env.invoke(self.address, "burn_from", spender, from_, amount)

    def transfer(self, from_: Address, to: Address, amount: Amount) -> None:
        self.env.invoke(self.address, "transfer", from_, to, amount)

    def transfer_from(self, spender: Address, from_: Address, to: Address, amount: Amount) -> None:
        self.env.invoke(self.address, "transfer_from", spender, from_, to, amount)

    def approve(self, from_: Address, spender: Address, amount: Amount, expiration_sequence: int) -> None:
        self.env.invoke(self.address, "approve", from_, spender, amount, expiration_sequence)

    def set_admin(self, new_admin: Address) -> None:
        self.env.invoke(self.address, "set_admin", new_admin)

    def balance(self, id: Address) -> Amount:
        return self.env.view(self.address, "balance", id)

    def allowance(self, from_: Address, spender: Address) -> Amount:
        return self.env.view(self.address, "allowance", from_, spender)

    def decimals(self) -> int:
        return self.env.view(self.address, "decimals")

    def name(self) -> str:
        return self.env.view(self.address, "name")

    def symbol(self) -> str:
        return self.env.view(self.address, "symbol")

    def total_supply(self) -> Amount:
        return self.env.view(self.address, "total_supply")

    def admin(self) -> Address:
        return self.env.view(self.address, "admin")


class PoolClient:
    def __init__(self, env: ContractEnv, address: Address) -> None:
        self.env = env
        self.address = address

    def initialize(self, admin: Address, token_a: Address, token_b: Address, fee_bps: int) -> None:
        self.env.invoke(self.address, "initialize", admin, token_a, token_b, fee_bps)

    def add_liquidity(self, provider: Address, amount_a: Amount, amount_b: Amount, min_shares: Amount) -> Amount:
        return self.env.invoke(self.address, "add_liquidity", provider, amount_a, amount_b, min_shares)

    def remove_liquidity(
        self, provider: Address, shares: Amount, min_amount_a: Amount, min_amount_b: Amount
    ) -> Tuple[Amount, Amount]:
        return self.env.invoke(self.address, "remove_liquidity", provider, shares, min_amount_a, min_amount_b)

    def swap_a_for_b(self, user: Address, amount_in: Amount, min_amount_out: Amount) -> Amount:
        return self.env.invoke(self.address, "swap_a_for_b", user, amount_in, min_amount_out)

    def swap_b_for_a(self, user: Address, amount_in: Amount, min_amount_out: Amount) -> Amount:
        return self.env.invoke(self.address, "swap_b_for_a", user, amount_in, min_amount_out)

    def get_price_a_to_b(self, amount_in: Amount) -> Amount:
        return self.env.view(self.address, "get_price_a_to_b", amount_in)

    def get_price_b_to_a(self, amount_in: Amount) -> Amount:
        return self.env.view(self.address, "get_price_b_to_a", amount_in)

    def get_reserves(self) -> Tuple[Amount, Amount]:
        return self.env.view(self.address, "get_reserves")

    def total_shares(self) -> Amount:
        return self.env.view(self.address, "total_shares")

    def get_shares(self, provider: Address) -> Amount:
        return self.env.view(self.address, "get_shares", provider)

    def get_tokens(self) -> Tuple[Address, Address]:
        return self.env.view(self.address, "get_tokens")

    def get_fee(self) -> int:
        return self.env.view(self.address, "get_fee")
