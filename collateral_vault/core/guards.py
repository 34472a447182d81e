"""Guard functions for the collateral vault kernel.

One pure function per action. Each returns None when the action is allowed in
the given PRE-state with the given parameters, or a `Refusal` naming the first
failed check.

Every mutating action starts with the same two gates, in order:
1. authority (owner-only actions),
2. pause.
Amount (within 1 .. 2**256 - 1), balance and ratio checks follow.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .math import MAX_AMOUNT, collateral_ratio, ratio_at_least, ratio_at_most
from .types import ActionParams, Rejection, VaultState


@dataclass(frozen=True)
class Refusal:
    rejection: Rejection
    detail: str


# -- Access / pause gate -----------------------------------------------------

def check_authority(state: VaultState, params: ActionParams) -> Refusal | None:
    if params.caller != state.owner:
        return Refusal(Rejection.UNAUTHORIZED, f"{params.action.value} is owner-only")
    return None


def check_not_paused(state: VaultState, params: ActionParams) -> Refusal | None:
    if state.paused:
        return Refusal(Rejection.PAUSED, f"{params.action.value} while paused")
    return None


def _check_domain(value: int, field: str) -> Refusal | None:
    if isinstance(value, bool) or not isinstance(value, int) or value > MAX_AMOUNT:
        return Refusal(Rejection.INVALID_AMOUNT, f"param_domain:{field}")
    if value <= 0:
        return Refusal(Rejection.INVALID_AMOUNT, f"{field} must be positive: {value}")
    return None


def _check_positive_amount(params: ActionParams) -> Refusal | None:
    return _check_domain(params.amount, "amount")


# -- Per-action guards -------------------------------------------------------

def guard_deposit(state: VaultState, params: ActionParams) -> Refusal | None:
    return check_not_paused(state, params) or _check_positive_amount(params)


def guard_withdraw(state: VaultState, params: ActionParams) -> Refusal | None:
    refusal = check_not_paused(state, params) or _check_positive_amount(params)
    if refusal is not None:
        return refusal

    position = state.positions.lookup(params.caller)
    if params.amount > position.collateral_amount:
        return Refusal(
            Rejection.INSUFFICIENT_BALANCE,
            f"withdraw {params.amount} exceeds collateral {position.collateral_amount}",
        )
    if position.debt_amount == 0:
        return None

    after = replace(position, collateral_amount=position.collateral_amount - params.amount)
    ratio = collateral_ratio(after, state.price, state.params)
    if not ratio_at_least(ratio, state.params.min_collateral_ratio):
        return Refusal(Rejection.RATIO_TOO_LOW, f"ratio after withdraw would be {ratio}")
    return None


def guard_borrow(state: VaultState, params: ActionParams) -> Refusal | None:
    refusal = check_not_paused(state, params) or _check_positive_amount(params)
    if refusal is not None:
        return refusal

    position = state.positions.lookup(params.caller)
    after = replace(position, debt_amount=position.debt_amount + params.amount)
    ratio = collateral_ratio(after, state.price, state.params)
    if not ratio_at_least(ratio, state.params.min_collateral_ratio):
        return Refusal(Rejection.RATIO_TOO_LOW, f"ratio after borrow would be {ratio}")
    return None


def guard_repay(state: VaultState, params: ActionParams) -> Refusal | None:
    refusal = check_not_paused(state, params) or _check_positive_amount(params)
    if refusal is not None:
        return refusal

    if state.positions.lookup(params.caller).debt_amount == 0:
        return Refusal(Rejection.INSUFFICIENT_BALANCE, "no outstanding debt to repay")
    return None


def guard_liquidate(state: VaultState, params: ActionParams) -> Refusal | None:
    if not state.params.liquidate_when_paused:
        refusal = check_not_paused(state, params)
        if refusal is not None:
            return refusal

    position = state.positions.lookup(params.account)
    ratio = collateral_ratio(position, state.price, state.params)
    if not ratio_at_most(ratio, state.params.liquidation_threshold):
        return Refusal(
            Rejection.NOT_ELIGIBLE_FOR_LIQUIDATION,
            f"ratio of {params.account or '<none>'} is {ratio}",
        )
    return None


def guard_update_price(state: VaultState, params: ActionParams) -> Refusal | None:
    refusal = check_authority(state, params)
    if refusal is not None:
        return refusal
    return _check_domain(params.price, "price")


def guard_set_paused(state: VaultState, params: ActionParams) -> Refusal | None:
    return check_authority(state, params)
