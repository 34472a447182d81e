"""State construction and serialization for the collateral vault kernel.

`initial_state()` returns the state a ledger starts from: an owner, an initial
price, no positions, not paused.
"""

from __future__ import annotations

from typing import Any

from .types import Bounded, RatioResult, VaultParams, VaultState


def initial_state(owner: str, price: int, params: VaultParams | None = None) -> VaultState:
    """Return the initial VaultState. Raises ValueError on empty owner or price <= 0."""
    if not owner:
        raise ValueError("owner must be a non-empty identity")
    if isinstance(price, bool) or not isinstance(price, int) or price <= 0:
        raise ValueError(f"initial price must be a positive integer: {price!r}")
    return VaultState(owner=owner, price=price, params=params or VaultParams())


def ratio_to_json(ratio: RatioResult) -> int | None:
    """Bounded ratios as ints, `Unbounded` as None."""
    if isinstance(ratio, Bounded):
        return ratio.value
    return None


def params_to_dict(params: VaultParams) -> dict[str, Any]:
    return {
        "collateral_decimals": params.collateral_decimals,
        "debt_decimals": params.debt_decimals,
        "min_collateral_ratio": params.min_collateral_ratio,
        "liquidation_threshold": params.liquidation_threshold,
        "liquidation_penalty": params.liquidation_penalty,
        "liquidation_payout": params.liquidation_payout.value,
        "liquidate_when_paused": params.liquidate_when_paused,
    }


def state_to_dict(state: VaultState) -> dict[str, Any]:
    """Serialize a VaultState to a JSON-ready dict (positions sorted by account)."""
    return {
        "owner": state.owner,
        "price": state.price,
        "paused": state.paused,
        "total_collateral": state.total_collateral,
        "total_debt": state.total_debt,
        "positions": {
            account: {
                "collateral_amount": position.collateral_amount,
                "debt_amount": position.debt_amount,
                "last_update_time": position.last_update_time,
            }
            for account, position in state.positions.items()
        },
        "params": params_to_dict(state.params),
    }
