"""Pure arithmetic for the collateral vault kernel.

Every function is stateless and operates on plain Python ints.

Rounding is explicit: Python's `//` floors, so a ratio is only reported as
meeting a bound when the exact value does.
"""

from __future__ import annotations

from ..state.positions import Position
from .types import UNBOUNDED, Bounded, LiquidationPayout, RatioResult, VaultParams

PERCENT: int = 100
MAX_AMOUNT: int = 2**256 - 1  # uint256 domain of amounts and prices


# -- Valuation ---------------------------------------------------------------

def collateral_value(collateral_amount: int, price: int, params: VaultParams) -> int:
    """Collateral expressed in debt units: ``amount * price / SCALE``."""
    return (collateral_amount * price) // params.collateral_scale


def collateral_ratio(position: Position, price: int, params: VaultParams) -> RatioResult:
    """Collateral ratio of *position* in whole percent.

    ``(collateral * price * 100) / (debt * SCALE)``, floored. A position with no
    debt has an `Unbounded` ratio.
    """
    if position.debt_amount == 0:
        return UNBOUNDED
    numerator = position.collateral_amount * price * PERCENT
    denominator = position.debt_amount * params.collateral_scale
    return Bounded(numerator // denominator)


def borrowable_amount(position: Position, price: int, params: VaultParams) -> int:
    """Additional debt that keeps the ratio at or above the minimum.

    Floors at zero for positions already below the minimum.
    """
    capacity = (position.collateral_amount * price * PERCENT) // (
        params.min_collateral_ratio * params.collateral_scale
    )
    return max(capacity - position.debt_amount, 0)


def ratio_at_least(ratio: RatioResult, floor: int) -> bool:
    """True when *ratio* meets the minimum *floor* (always for `Unbounded`)."""
    if isinstance(ratio, Bounded):
        return ratio.value >= floor
    return True


def ratio_at_most(ratio: RatioResult, ceiling: int) -> bool:
    """True when *ratio* is at or below *ceiling* (never for `Unbounded`)."""
    if isinstance(ratio, Bounded):
        return ratio.value <= ceiling
    return False


# -- Liquidation -------------------------------------------------------------

def liquidation_payout(position: Position, price: int, params: VaultParams) -> tuple[int, int]:
    """Split a liquidated position's collateral into ``(seized, refund)``.

    `seized` goes to the liquidator, `refund` back to the borrower; they always
    sum to the position's collateral.

    - FULL_SEIZURE: the liquidator takes everything.
    - PENALTY_CAPPED: the liquidator takes collateral worth the repaid debt plus
      the liquidation penalty (floored), or everything if the position is worth
      less than that.
    """
    collateral = position.collateral_amount
    if params.liquidation_payout is LiquidationPayout.FULL_SEIZURE:
        return collateral, 0

    owed = (position.debt_amount * (PERCENT + params.liquidation_penalty) * params.collateral_scale) // (
        price * PERCENT
    )
    seized = min(collateral, owed)
    return seized, collateral - seized


# -- Unit conversion ---------------------------------------------------------

def parse_units(value: str | int, decimals: int) -> int:
    """Convert a decimal string in whole units to base units, exactly.

    Integers are taken as base units already. Raises ValueError on malformed
    input or more fractional digits than *decimals*.
    """
    if isinstance(value, bool):
        raise ValueError(f"not an amount: {value!r}")
    if isinstance(value, int):
        return value
    text = value.strip().replace("_", "")
    negative = text.startswith("-")
    if negative:
        text = text[1:]
    whole, _, frac = text.partition(".")
    if not whole and not frac:
        raise ValueError(f"malformed amount: {value!r}")
    if not whole:
        whole = "0"
    if not whole.isdigit() or (frac and not frac.isdigit()):
        raise ValueError(f"malformed amount: {value!r}")
    if len(frac) > decimals:
        raise ValueError(f"too many decimal places in {value!r} (max {decimals})")
    units = int(whole) * 10**decimals + int(frac.ljust(decimals, "0") or "0")
    return -units if negative else units


def format_units(amount: int, decimals: int) -> str:
    """Render base units as a decimal string without trailing zeros."""
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(amount), 10**decimals)
    if decimals == 0 or frac == 0:
        return f"{sign}{whole}"
    digits = str(frac).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{digits}"
