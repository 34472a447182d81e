"""Exception types for the collateral vault.

Used by ``step_or_raise()`` in ``engine.py`` and by the ``Ledger`` shell for
callers that prefer exceptions over ``StepResult`` inspection. Each class is
tagged with the `Rejection` it stands for.
"""

from __future__ import annotations

from .types import Rejection


class VaultError(Exception):
    """Base class. The whole operation was aborted; no state changed."""

    rejection: Rejection


class InvalidAmountError(VaultError):
    """Raised for a non-positive or out-of-domain amount or price."""
    rejection = Rejection.INVALID_AMOUNT


class InsufficientBalanceError(VaultError):
    """Raised when a withdraw/repay exceeds the held balance, or the caller cannot fund a transfer."""
    rejection = Rejection.INSUFFICIENT_BALANCE


class RatioTooLowError(VaultError):
    """Raised when a borrow or withdraw would leave the ratio below the minimum."""
    rejection = Rejection.RATIO_TOO_LOW


class NotEligibleForLiquidationError(VaultError):
    """Raised when the target is above the liquidation threshold or has no debt."""
    rejection = Rejection.NOT_ELIGIBLE_FOR_LIQUIDATION


class UnauthorizedError(VaultError):
    """Raised when a non-owner calls an owner-only operation."""
    rejection = Rejection.UNAUTHORIZED


class PausedError(VaultError):
    """Raised when a gated operation is attempted while paused."""
    rejection = Rejection.PAUSED


class TransferFailedError(VaultError):
    """Raised when an external value/token transfer did not complete."""
    rejection = Rejection.TRANSFER_FAILED


class ReentrantCallError(VaultError):
    """Raised when a call enters the ledger while another operation is in progress."""
    rejection = Rejection.REENTRANT_CALL


class VaultInvariantError(VaultError):
    """Raised when a post-state violates one or more invariants."""
    rejection = Rejection.INVARIANT

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")


ERROR_TYPES: dict[Rejection, type[VaultError]] = {
    cls.rejection: cls
    for cls in (
        InvalidAmountError,
        InsufficientBalanceError,
        RatioTooLowError,
        NotEligibleForLiquidationError,
        UnauthorizedError,
        PausedError,
        TransferFailedError,
        ReentrantCallError,
    )
}


def error_for(rejection: Rejection, detail: str | None = None) -> VaultError:
    """Build the exception matching a kernel rejection."""
    if rejection is Rejection.INVARIANT:
        return VaultInvariantError((detail or "").split(","))
    return ERROR_TYPES[rejection](detail or rejection.value)
