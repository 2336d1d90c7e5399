"""
Spending allowances with a ledger-sequence expiration bound.

An allowance is live while the current ledger sequence is <= its
`expiration_sequence`. Expired entries always read as zero; the ledger
drops them (`purge_expired`) whenever a new approval is written.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from .balances import Address, Amount


@dataclass(frozen=True)
class Allowance:
    amount: Amount
    expiration_sequence: int

    def is_live(self, sequence: int) -> bool:
        return sequence <= self.expiration_sequence


class AllowanceTable:
    """Mutable mapping (owner, spender) -> Allowance."""

    def __init__(self) -> None:
        self._entries: Dict[Tuple[Address, Address], Allowance] = {}

    def get(self, owner: Address, spender: Address, sequence: int) -> Amount:
        """Live allowance amount at `sequence`; 0 if absent or expired."""
        entry = self._entries.get((owner, spender))
        if entry is None or not entry.is_live(sequence):
            return 0
        return entry.amount

    def set(self, owner: Address, spender: Address, amount: Amount, expiration_sequence: int) -> None:
        if amount < 0:
            raise ValueError(f"Allowance cannot be negative: {amount}")
        self._entries[(owner, spender)] = Allowance(amount=amount, expiration_sequence=expiration_sequence)

    def spend(self, owner: Address, spender: Address, amount: Amount, sequence: int) -> None:
        """Decrease a live allowance, keeping its expiration bound."""
        entry = self._entries.get((owner, spender))
        current = 0 if entry is None or not entry.is_live(sequence) else entry.amount
        if amount < 0 or current < amount:
            raise ValueError(f"Insufficient allowance: {current} < {amount}")
        if entry is not None:
            self._entries[(owner, spender)] = Allowance(
                amount=current - amount, expiration_sequence=entry.expiration_sequence
            )

    def purge_expired(self, sequence: int) -> int:
        """Drop entries that can no longer be spent. Returns the number removed."""
        stale = [key for key, entry in self._entries.items() if not entry.is_live(sequence)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"AllowanceTable({len(self._entries)} entries)"
