"""collateral_vault: a collateralized-lending ledger.

Accounts deposit a native collateral asset, borrow a debt token against it at
a minimum collateral ratio, repay, withdraw, and can be liquidated by anyone
once their ratio falls to the liquidation threshold. An owner maintains the
price and can pause user operations.

Layout:
- `core`: pure, integer-only transition kernel (`step`, guards, invariants),
- `state`: position book and balance table,
- `integration`: the `Ledger` shell, assets and configuration,
- `cli`: YAML scenario runner.
"""

from .core import (
    UNBOUNDED,
    Action,
    ActionParams,
    Bounded,
    Effect,
    InsufficientBalanceError,
    InvalidAmountError,
    NotEligibleForLiquidationError,
    PausedError,
    RatioTooLowError,
    ReentrantCallError,
    StepResult,
    TransferFailedError,
    UnauthorizedError,
    Unbounded,
    VaultError,
    VaultInvariantError,
    VaultParams,
    VaultState,
    initial_state,
    step,
    step_or_raise,
)
from .integration import (
    Ledger,
    LedgerConfig,
    NativeAsset,
    Token,
    TransferError,
    create_ledger,
    load_config,
)
from .state import Position, PositionBook

__version__ = "0.1.0"

__all__ = [
    "Action",
    "ActionParams",
    "Bounded",
    "Effect",
    "InsufficientBalanceError",
    "InvalidAmountError",
    "Ledger",
    "LedgerConfig",
    "NativeAsset",
    "NotEligibleForLiquidationError",
    "PausedError",
    "Position",
    "PositionBook",
    "RatioTooLowError",
    "ReentrantCallError",
    "StepResult",
    "Token",
    "TransferError",
    "TransferFailedError",
    "UNBOUNDED",
    "UnauthorizedError",
    "Unbounded",
    "VaultError",
    "VaultInvariantError",
    "VaultParams",
    "VaultState",
    "create_ledger",
    "initial_state",
    "load_config",
    "step",
    "step_or_raise",
]
