"""
Core contracts and pricing math
"""

from .cpmm import (
    get_amount_out,
    integer_sqrt,
    compute_shares_to_mint,
    compute_redemption,
)
from .token import TokenContract, TokenState
from .pool import LiquidityPoolContract, PoolState
from .clients import TokenClient, PoolClient
from .types import ContractEnv, LiquidityEvent, SwapEvent

__all__ = [
    "get_amount_out",
    "integer_sqrt",
    "compute_shares_to_mint",
    "compute_redemption",
    "TokenContract",
    "TokenState",
    "LiquidityPoolContract",
    "PoolState",
    "TokenClient",
    "PoolClient",
    "ContractEnv",
    "LiquidityEvent",
    "SwapEvent",
]
