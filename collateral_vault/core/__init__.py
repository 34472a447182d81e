"""`core`: pure-Python collateralized-lending kernel.

- deterministic, integer-only transitions,
- immutable state (frozen dataclasses),
- fail-closed guards and invariant checks.

Public API:
- `initial_state(owner, price, params) -> VaultState`
- `step(state, params) -> StepResult`
- `step_or_raise(state, params) -> StepResult` (raises on rejection)
"""

from .engine import step, step_or_raise
from .errors import (
    InsufficientBalanceError,
    InvalidAmountError,
    NotEligibleForLiquidationError,
    PausedError,
    RatioTooLowError,
    ReentrantCallError,
    TransferFailedError,
    UnauthorizedError,
    VaultError,
    VaultInvariantError,
)
from .math import (
    borrowable_amount,
    collateral_ratio,
    format_units,
    liquidation_payout,
    parse_units,
    ratio_at_least,
    ratio_at_most,
)
from .state import initial_state, state_to_dict
from .types import (
    LIQUIDATION_PENALTY,
    LIQUIDATION_THRESHOLD,
    MIN_COLLATERAL_RATIO,
    UNBOUNDED,
    Action,
    ActionParams,
    Asset,
    Bounded,
    Direction,
    Effect,
    Event,
    LiquidationPayout,
    PositionClass,
    RatioResult,
    Rejection,
    StepResult,
    Transfer,
    Unbounded,
    VaultParams,
    VaultState,
)
from .views import (
    account_summary,
    get_borrowable_amount,
    get_collateral_ratio,
    is_liquidatable,
    position_class,
)

__all__ = [
    "step",
    "step_or_raise",
    "initial_state",
    "state_to_dict",
    "Action",
    "ActionParams",
    "Asset",
    "Bounded",
    "Direction",
    "Effect",
    "Event",
    "LiquidationPayout",
    "PositionClass",
    "RatioResult",
    "Rejection",
    "StepResult",
    "Transfer",
    "Unbounded",
    "UNBOUNDED",
    "VaultParams",
    "VaultState",
    "MIN_COLLATERAL_RATIO",
    "LIQUIDATION_THRESHOLD",
    "LIQUIDATION_PENALTY",
    "borrowable_amount",
    "collateral_ratio",
    "format_units",
    "liquidation_payout",
    "parse_units",
    "ratio_at_least",
    "ratio_at_most",
    "account_summary",
    "get_borrowable_amount",
    "get_collateral_ratio",
    "is_liquidatable",
    "position_class",
    "VaultError",
    "InvalidAmountError",
    "InsufficientBalanceError",
    "RatioTooLowError",
    "NotEligibleForLiquidationError",
    "UnauthorizedError",
    "PausedError",
    "TransferFailedError",
    "ReentrantCallError",
    "VaultInvariantError",
]
