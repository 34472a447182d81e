"""
Single-asset balance tracking for the in-memory transfer interfaces.

Implements BalanceTable[Account] -> Amount.
"""

from typing import Dict

from .positions import Account, Amount


class BalanceTable:
    """
    Balance table mapping account -> amount for one asset.

    Note: this class stores balances in a plain dict. Callers that serialize
    or report balances should sort keys explicitly.
    """

    def __init__(self):
        """Initialize empty balance table."""
        self._balances: Dict[Account, Amount] = {}

    def get(self, account: Account) -> Amount:
        """Get balance for account. Returns 0 if not found."""
        return self._balances.get(account, 0)

    def set(self, account: Account, amount: Amount) -> None:
        """
        Set balance for account.

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            # Remove zero balances to keep table sparse
            self._balances.pop(account, None)
        else:
            self._balances[account] = amount

    def add(self, account: Account, delta: int) -> None:
        """
        Add delta to balance. Equivalent to set(account, get(account) + delta).

        Raises:
            ValueError: If resulting balance would be negative
        """
        current = self.get(account)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(account, new_balance)

    def subtract(self, account: Account, delta: Amount) -> None:
        """
        Subtract delta from balance. Equivalent to add(account, -delta).

        Raises:
            ValueError: If delta is negative or insufficient balance
        """
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(account, -delta)

    def get_all_balances(self) -> Dict[Account, Amount]:
        """Get all non-zero balances as a dictionary."""
        return dict(self._balances)

    def total(self) -> Amount:
        """Sum of all balances (total supply held in this table)."""
        return sum(self._balances.values())

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
