"""
State tables for TokenSwap ledgers and pools
"""

from .balances import BalanceTable
from .allowances import Allowance, AllowanceTable
from .shares import ShareTable

__all__ = [
    "BalanceTable",
    "Allowance",
    "AllowanceTable",
    "ShareTable",
]
