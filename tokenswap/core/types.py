"""Shared types for the contracts: the host capability surface and event payloads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Tuple

from ..state.balances import Address, Amount


class ContractEnv(Protocol):
    """
    What a contract may ask of its hosting platform.

    Contracts never touch another contract's state: cross-contract effects go
    through `invoke`, which runs inside the caller's transaction.
    """

    @property
    def sequence(self) -> int: ...

    def current_contract_address(self) -> Address: ...

    def require_auth(self, address: Address) -> None: ...

    def publish(self, topics: Tuple[Any, ...], data: Any) -> None: ...

    def invoke(self, contract: Address, function: str, *args: Any) -> Any: ...

    def view(self, contract: Address, function: str, *args: Any) -> Any: ...


@dataclass(frozen=True)
class SwapEvent:
    user: Address
    token_in: Address
    token_out: Address
    amount_in: Amount
    amount_out: Amount


@dataclass(frozen=True)
class LiquidityEvent:
    provider: Address
    amount_a: Amount
    amount_b: Amount
    shares: Amount
