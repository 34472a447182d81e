"""`integration`: the stateful shell around the vault kernel.

- `Ledger`: executes kernel steps and settles their transfers,
- `assets`: collateral / debt-token interfaces and in-memory implementations,
- `config`: `VAULT_*` environment configuration and `create_ledger()`.
"""

from .assets import CollateralAsset, DebtToken, NativeAsset, Token, TransferError
from .config import LedgerConfig, create_ledger, load_config
from .ledger import Ledger

__all__ = [
    "CollateralAsset",
    "DebtToken",
    "Ledger",
    "LedgerConfig",
    "NativeAsset",
    "Token",
    "TransferError",
    "create_ledger",
    "load_config",
]
