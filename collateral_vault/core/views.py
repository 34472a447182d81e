"""Read-only queries over a VaultState.

These never fail: unknown accounts read as the zero position.
"""

from __future__ import annotations

from typing import Any

from .math import borrowable_amount, collateral_ratio, collateral_value, ratio_at_most
from .state import ratio_to_json
from .types import PositionClass, RatioResult, VaultState


def get_collateral_ratio(state: VaultState, account: str) -> RatioResult:
    return collateral_ratio(state.positions.lookup(account), state.price, state.params)


def get_borrowable_amount(state: VaultState, account: str) -> int:
    return borrowable_amount(state.positions.lookup(account), state.price, state.params)


def is_liquidatable(state: VaultState, account: str) -> bool:
    """True when `account` has debt and its ratio is at or below the threshold."""
    return ratio_at_most(get_collateral_ratio(state, account), state.params.liquidation_threshold)


def position_class(state: VaultState, account: str) -> PositionClass:
    position = state.positions.lookup(account)
    if position.debt_amount > 0:
        return PositionClass.LEVERAGED
    if position.collateral_amount > 0:
        return PositionClass.COLLATERALIZED
    return PositionClass.EMPTY


def account_summary(state: VaultState, account: str) -> dict[str, Any]:
    """Position figures for one account, as reported by the status view."""
    position = state.positions.lookup(account)
    return {
        "account": account,
        "collateral_amount": position.collateral_amount,
        "debt_amount": position.debt_amount,
        "last_update_time": position.last_update_time,
        "collateral_value": collateral_value(position.collateral_amount, state.price, state.params),
        "collateral_ratio": ratio_to_json(get_collateral_ratio(state, account)),
        "borrowable_amount": get_borrowable_amount(state, account),
        "liquidatable": is_liquidatable(state, account),
        "class": position_class(state, account).value,
    }
