"""Invariant checkers for the collateral vault kernel.

Each function returns True when the invariant holds, and `check_all()` returns
the list of violated invariant IDs (empty = all pass).

The minimum-ratio rule for borrow/withdraw is enforced by the guards, not
here: a price update may legitimately push an open position below it.
"""

from __future__ import annotations

from typing import Callable

from .types import VaultState


def inv_total_collateral_conserved(s: VaultState) -> bool:
    return s.total_collateral == s.positions.total_collateral()


def inv_total_debt_conserved(s: VaultState) -> bool:
    return s.total_debt == s.positions.total_debt()


def inv_positions_non_negative(s: VaultState) -> bool:
    return s.positions.verify_non_negative()


def inv_totals_non_negative(s: VaultState) -> bool:
    return s.total_collateral >= 0 and s.total_debt >= 0


def inv_price_positive(s: VaultState) -> bool:
    return s.price > 0


def inv_owner_set(s: VaultState) -> bool:
    return bool(s.owner)


def inv_risk_params_ordered(s: VaultState) -> bool:
    p = s.params
    return p.min_collateral_ratio > p.liquidation_threshold >= 100 + p.liquidation_penalty


# ---------------------------------------------------------------------------
# Registry + check_all
# ---------------------------------------------------------------------------

INVARIANT_REGISTRY: dict[str, Callable[[VaultState], bool]] = {
    "inv_total_collateral_conserved": inv_total_collateral_conserved,
    "inv_total_debt_conserved": inv_total_debt_conserved,
    "inv_positions_non_negative": inv_positions_non_negative,
    "inv_totals_non_negative": inv_totals_non_negative,
    "inv_price_positive": inv_price_positive,
    "inv_owner_set": inv_owner_set,
    "inv_risk_params_ordered": inv_risk_params_ordered,
}


def check_all(state: VaultState) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(state)
    ]
