"""
TokenSwap: a fungible-token ledger and a constant-product liquidity pool.
"""
