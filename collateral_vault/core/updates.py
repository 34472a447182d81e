"""State transition functions for the collateral vault kernel.

One pure function per action. Each returns a new `VaultState` with the
action's updates applied.

Semantics:
- updates evaluate against the PRE-state and assume the guard passed,
- touched positions get `last_update_time := params.timestamp`,
- we implement updates via `dataclasses.replace()` on frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import replace

from ..state.positions import Position
from .types import ActionParams, VaultState


def _with_position(state: VaultState, account: str, position: Position, **totals: int) -> VaultState:
    return replace(state, positions=state.positions.with_position(account, position), **totals)


def repay_amount(state: VaultState, params: ActionParams) -> int:
    """Repayment actually applied: the request clamped to the outstanding debt."""
    return min(params.amount, state.positions.lookup(params.caller).debt_amount)


def apply_deposit(state: VaultState, params: ActionParams) -> VaultState:
    position = state.positions.lookup(params.caller)
    return _with_position(
        state,
        params.caller,
        replace(
            position,
            collateral_amount=position.collateral_amount + params.amount,
            last_update_time=params.timestamp,
        ),
        total_collateral=state.total_collateral + params.amount,
    )


def apply_withdraw(state: VaultState, params: ActionParams) -> VaultState:
    position = state.positions.lookup(params.caller)
    return _with_position(
        state,
        params.caller,
        replace(
            position,
            collateral_amount=position.collateral_amount - params.amount,
            last_update_time=params.timestamp,
        ),
        total_collateral=state.total_collateral - params.amount,
    )


def apply_borrow(state: VaultState, params: ActionParams) -> VaultState:
    position = state.positions.lookup(params.caller)
    return _with_position(
        state,
        params.caller,
        replace(
            position,
            debt_amount=position.debt_amount + params.amount,
            last_update_time=params.timestamp,
        ),
        total_debt=state.total_debt + params.amount,
    )


def apply_repay(state: VaultState, params: ActionParams) -> VaultState:
    position = state.positions.lookup(params.caller)
    repaid = repay_amount(state, params)
    return _with_position(
        state,
        params.caller,
        replace(
            position,
            debt_amount=position.debt_amount - repaid,
            last_update_time=params.timestamp,
        ),
        total_debt=state.total_debt - repaid,
    )


def apply_liquidate(state: VaultState, params: ActionParams) -> VaultState:
    position = state.positions.lookup(params.account)
    # Always a full close: the payout split only affects the transfers.
    return _with_position(
        state,
        params.account,
        Position(last_update_time=params.timestamp),
        total_collateral=state.total_collateral - position.collateral_amount,
        total_debt=state.total_debt - position.debt_amount,
    )


def apply_update_price(state: VaultState, params: ActionParams) -> VaultState:
    return replace(state, price=params.price)


def apply_set_paused(state: VaultState, params: ActionParams) -> VaultState:
    return replace(state, paused=params.flag)
