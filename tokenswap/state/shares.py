"""
Liquidity share tracking for a single pool.

Shares are a proportional claim on the pool's reserves. They are not a token:
they live only in the pool's own state.
"""

from __future__ import annotations

from typing import Dict

from .balances import Address, Amount


class ShareTable:
    """
    Provider share table mapping address -> share count.

    Notes:
    - Share balances are always non-negative.
    - Zero balances are omitted to keep the table sparse.
    """

    def __init__(self) -> None:
        self._shares: Dict[Address, Amount] = {}

    def get(self, provider: Address) -> Amount:
        """Get share balance for provider. Returns 0 if not found."""
        return self._shares.get(provider, 0)

    def set(self, provider: Address, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Share balance cannot be negative: {amount}")
        if amount == 0:
            self._shares.pop(provider, None)
        else:
            self._shares[provider] = amount

    def add(self, provider: Address, delta: int) -> None:
        """Add delta to a share balance (delta may be negative)."""
        current = self.get(provider)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient share balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(provider, new_balance)

    def subtract(self, provider: Address, delta: Amount) -> None:
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(provider, -delta)

    def total(self) -> Amount:
        return sum(self._shares.values())

    def verify_non_negative(self) -> bool:
        return all(amount >= 0 for amount in self._shares.values())

    def __len__(self) -> int:
        return len(self._shares)

    def __repr__(self) -> str:
        return f"ShareTable({len(self._shares)} entries)"
