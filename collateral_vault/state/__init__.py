"""
State tables for the collateral vault.

- `positions`: immutable per-account collateral/debt book used by the kernel.
- `balances`: mutable single-asset balance table used by the in-memory
  transfer interfaces.
"""

from .balances import BalanceTable
from .positions import EMPTY_POSITION, Account, Amount, Position, PositionBook

__all__ = [
    "Account",
    "Amount",
    "BalanceTable",
    "EMPTY_POSITION",
    "Position",
    "PositionBook",
]
