"""Data types for the collateral vault kernel.

All types are frozen dataclasses (immutable).

Units/conventions:
- collateral amounts are integers in the collateral asset's smallest unit
  (wei for an 18-decimal asset),
- debt amounts and `price` are integers in the debt asset's smallest unit
  (6 decimals for a USDC-like token); `price` is debt units per *whole*
  collateral unit,
- ratios and the risk constants are whole percentages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Union

from ..state.positions import Account, PositionBook

MIN_COLLATERAL_RATIO: int = 150
LIQUIDATION_THRESHOLD: int = 125
LIQUIDATION_PENALTY: int = 10


@unique
class Action(Enum):
    """One member per ledger operation."""
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    BORROW = "borrow"
    REPAY = "repay"
    LIQUIDATE = "liquidate"
    UPDATE_PRICE = "update_price"
    SET_PAUSED = "set_paused"


@unique
class Event(Enum):
    """One member per effect event type."""
    COLLATERAL_DEPOSITED = "CollateralDeposited"
    COLLATERAL_WITHDRAWN = "CollateralWithdrawn"
    BORROWED = "Borrowed"
    REPAID = "Repaid"
    LIQUIDATED = "Liquidated"
    PRICE_UPDATED = "PriceUpdated"
    PAUSED = "Paused"
    UNPAUSED = "Unpaused"


@unique
class Rejection(Enum):
    """Why a step was refused. Values are the public error-kind names."""
    INVALID_AMOUNT = "InvalidAmount"
    INSUFFICIENT_BALANCE = "InsufficientBalance"
    RATIO_TOO_LOW = "RatioTooLow"
    NOT_ELIGIBLE_FOR_LIQUIDATION = "NotEligibleForLiquidation"
    UNAUTHORIZED = "Unauthorized"
    PAUSED = "Paused"
    TRANSFER_FAILED = "TransferFailed"
    REENTRANT_CALL = "ReentrantCall"
    INVARIANT = "Invariant"


@unique
class LiquidationPayout(Enum):
    """How a liquidated position's collateral is split."""
    FULL_SEIZURE = "full_seizure"
    PENALTY_CAPPED = "penalty_capped"


@unique
class PositionClass(Enum):
    EMPTY = "empty"
    COLLATERALIZED = "collateralized"
    LEVERAGED = "leveraged"


@unique
class Asset(Enum):
    COLLATERAL = "collateral"
    DEBT = "debt"


@unique
class Direction(Enum):
    """Direction of a transfer, relative to the vault."""
    IN = "in"
    OUT = "out"


# -- Collateral ratio (tagged variant) ---------------------------------------

@dataclass(frozen=True)
class Bounded:
    """A finite collateral ratio, in whole percent (floored)."""

    value: int

    def __str__(self) -> str:
        return f"{self.value}%"


@dataclass(frozen=True)
class Unbounded:
    """Ratio of a position with no debt. Satisfies every minimum."""

    def __str__(self) -> str:
        return "unbounded"


UNBOUNDED = Unbounded()

RatioResult = Union[Bounded, Unbounded]


# -- Parameters / state ------------------------------------------------------

@dataclass(frozen=True)
class VaultParams:
    """Risk parameters and asset scales. Fixed for the ledger's lifetime."""

    collateral_decimals: int = 18
    debt_decimals: int = 6
    min_collateral_ratio: int = MIN_COLLATERAL_RATIO
    liquidation_threshold: int = LIQUIDATION_THRESHOLD
    liquidation_penalty: int = LIQUIDATION_PENALTY
    liquidation_payout: LiquidationPayout = LiquidationPayout.FULL_SEIZURE
    liquidate_when_paused: bool = False

    def __post_init__(self) -> None:
        if self.collateral_decimals < 0 or self.debt_decimals < 0:
            raise ValueError("decimals must be non-negative")
        if self.liquidation_penalty < 0:
            raise ValueError(f"liquidation_penalty must be non-negative: {self.liquidation_penalty}")
        if self.liquidation_threshold < 100 + self.liquidation_penalty:
            raise ValueError(
                "liquidation_threshold must cover 100% plus the liquidation penalty: "
                f"{self.liquidation_threshold} < {100 + self.liquidation_penalty}"
            )
        if self.min_collateral_ratio <= self.liquidation_threshold:
            raise ValueError(
                "min_collateral_ratio must exceed liquidation_threshold: "
                f"{self.min_collateral_ratio} <= {self.liquidation_threshold}"
            )

    @property
    def collateral_scale(self) -> int:
        """Smallest collateral units per whole collateral unit."""
        return 10 ** self.collateral_decimals


@dataclass(frozen=True)
class VaultState:
    """Complete ledger state: singleton vault fields plus the position book."""

    owner: Account
    price: int
    paused: bool = False
    total_collateral: int = 0
    total_debt: int = 0
    positions: PositionBook = field(default_factory=PositionBook)
    params: VaultParams = field(default_factory=VaultParams)


@dataclass(frozen=True)
class ActionParams:
    """Parameters for an action. Unused fields default to 0/""/False.

    `caller` and `timestamp` are supplied by the execution environment.
    """

    action: Action
    caller: Account
    amount: int = 0         # deposit / withdraw / borrow / repay
    account: Account = ""   # liquidate target
    price: int = 0          # update_price
    flag: bool = False      # set_paused
    timestamp: int = 0


@dataclass(frozen=True)
class Transfer:
    """One external value movement requested by a step.

    A `claimable` movement is owed to `account` but does not gate the step: if
    it cannot be delivered the shell records it as a claim instead.
    """

    asset: Asset
    direction: Direction
    account: Account
    amount: int
    claimable: bool = False


@dataclass(frozen=True)
class Effect:
    """Post-state observables emitted after a successful step."""

    event: Event
    caller: Account
    account: Account = ""
    amount: int = 0
    transfers: tuple[Transfer, ...] = ()
    collateral_after: int = 0
    debt_after: int = 0
    ratio_after: RatioResult = UNBOUNDED
    price_after: int = 0
    paused_after: bool = False


@dataclass(frozen=True)
class StepResult:
    """Result of a single engine step."""

    accepted: bool
    state: VaultState | None = None
    effect: Effect | None = None
    rejection: Rejection | None = None
    detail: str | None = None
