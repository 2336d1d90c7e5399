"""
Per-token balance tracking.

Implements BalanceTable[Address] -> Amount for a single token ledger.
"""

from typing import Dict


# Type aliases
Address = str  # account public key (hex) or contract id
Amount = int  # signed 128-bit range; balances are never negative

I128_MIN = -(1 << 127)
I128_MAX = (1 << 127) - 1


def is_amount(value: object) -> bool:
    """True for a plain int (bools excluded) inside the signed 128-bit range."""
    return isinstance(value, int) and not isinstance(value, bool) and I128_MIN <= value <= I128_MAX


class BalanceTable:
    """
    Sparse balance table mapping address -> amount.

    Zero balances are dropped so that `len()` counts funded accounts only.
    Iteration order is insertion order; callers that hash or serialize must
    sort explicitly.
    """

    def __init__(self):
        self._balances: Dict[Address, Amount] = {}

    def get(self, address: Address) -> Amount:
        """Get balance for address. Returns 0 if not found."""
        return self._balances.get(address, 0)

    def set(self, address: Address, amount: Amount) -> None:
        """
        Set balance for address.

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop(address, None)
        else:
            self._balances[address] = amount

    def total(self) -> Amount:
        """Sum of all balances."""
        return sum(self._balances.values())

    def verify_non_negative(self) -> bool:
        return all(amount >= 0 for amount in self._balances.values())

    def __len__(self) -> int:
        return len(self._balances)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
