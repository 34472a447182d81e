"""
Per-account collateral/debt positions.

Implements PositionBook[Account] -> Position as a persistent (copy-on-write)
mapping so the kernel can treat it as part of an immutable VaultState.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Optional


# Type aliases
Account = str  # caller identity as attributed by the execution environment
Amount = int  # Non-negative integer (smallest unit of the asset)


@dataclass(frozen=True)
class Position:
    """Collateral posted and debt owed by one account."""

    collateral_amount: Amount = 0
    debt_amount: Amount = 0
    last_update_time: int = 0

    def __post_init__(self) -> None:
        if self.collateral_amount < 0:
            raise ValueError(f"collateral_amount must be non-negative: {self.collateral_amount}")
        if self.debt_amount < 0:
            raise ValueError(f"debt_amount must be non-negative: {self.debt_amount}")

    @property
    def is_empty(self) -> bool:
        return self.collateral_amount == 0 and self.debt_amount == 0


EMPTY_POSITION = Position()


class PositionBook(Mapping[Account, Position]):
    """
    Immutable account -> Position table.

    Unknown accounts resolve to the zero position through `lookup()`; they are
    never materialized by a read. Writes return a new book. Iteration is sorted
    by account so serialization and hashing boundaries are deterministic.
    """

    __slots__ = ("_positions",)

    def __init__(self, positions: Optional[Mapping[Account, Position]] = None):
        self._positions: Dict[Account, Position] = dict(positions or {})

    def __getitem__(self, account: Account) -> Position:
        return self._positions[account]

    def __iter__(self) -> Iterator[Account]:
        return iter(sorted(self._positions))

    def __len__(self) -> int:
        return len(self._positions)

    def lookup(self, account: Account) -> Position:
        """Get the position for `account`. Returns the zero position if absent."""
        return self._positions.get(account, EMPTY_POSITION)

    def with_position(self, account: Account, position: Position) -> "PositionBook":
        """
        Return a new book with `account` set to `position`.

        Zeroed positions are kept: an account that has been touched keeps its
        `last_update_time` even after a full close.
        """
        if not account:
            raise ValueError("account must be a non-empty identity")
        updated = dict(self._positions)
        updated[account] = position
        return PositionBook(updated)

    def total_collateral(self) -> Amount:
        return sum(p.collateral_amount for p in self._positions.values())

    def total_debt(self) -> Amount:
        return sum(p.debt_amount for p in self._positions.values())

    def verify_non_negative(self) -> bool:
        """
        Verify all positions are non-negative.

        Returns:
            True if every collateral and debt amount is >= 0
        """
        return all(
            p.collateral_amount >= 0 and p.debt_amount >= 0
            for p in self._positions.values()
        )

    def __repr__(self) -> str:
        return f"PositionBook({len(self._positions)} accounts)"
