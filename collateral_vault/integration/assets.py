"""
Value-transfer interfaces consumed by the ledger shell.

The ledger moves two assets:
- the collateral asset, moved by plain transfers (native value in / out),
- the debt asset, a token with an allowance so the vault can pull repayments.

`CollateralAsset` and `DebtToken` are the protocols the `Ledger` depends on.
`NativeAsset` and `Token` are in-memory implementations backed by
`BalanceTable`, used for simulation, scenarios and tests.

All implementations raise `TransferError` when a movement cannot complete and
leave their balances untouched in that case.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional, Protocol, Tuple

from ..state.balances import BalanceTable

# Called after a native transfer credits `dest`: hook(source, amount).
ReceiveHook = Callable[[str, int], None]


class TransferError(Exception):
    """Raised when an asset movement cannot complete."""


class CollateralAsset(Protocol):
    def balance_of(self, account: str) -> int: ...

    def transfer(self, source: str, dest: str, amount: int) -> None: ...


class DebtToken(Protocol):
    def balance_of(self, account: str) -> int: ...

    def allowance(self, owner: str, spender: str) -> int: ...

    def approve(self, owner: str, spender: str, amount: int) -> None: ...

    def transfer(self, source: str, dest: str, amount: int) -> None: ...

    def transfer_from(self, spender: str, source: str, dest: str, amount: int) -> None: ...


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise TransferError(f"invalid transfer amount: {amount!r}")


class NativeAsset:
    """
    In-memory native collateral asset.

    A recipient may register a receive hook, which runs after its balance is
    credited (the way a contract recipient executes code on receipt). If the
    hook raises, the transfer is undone and reported as a `TransferError`.
    """

    def __init__(self, symbol: str = "ETH", decimals: int = 18):
        self.symbol = symbol
        self.decimals = decimals
        self._balances = BalanceTable()
        self._hooks: Dict[str, ReceiveHook] = {}

    def mint(self, account: str, amount: int) -> None:
        _check_amount(amount)
        self._balances.add(account, amount)

    def balance_of(self, account: str) -> int:
        return self._balances.get(account)

    def total_supply(self) -> int:
        return self._balances.total()

    def set_receive_hook(self, account: str, hook: Optional[ReceiveHook]) -> None:
        if hook is None:
            self._hooks.pop(account, None)
        else:
            self._hooks[account] = hook

    def transfer(self, source: str, dest: str, amount: int) -> None:
        _check_amount(amount)
        available = self._balances.get(source)
        if amount > available:
            raise TransferError(f"{source} holds {available} {self.symbol}, needs {amount}")
        self._balances.subtract(source, amount)
        self._balances.add(dest, amount)

        hook = self._hooks.get(dest)
        if hook is None:
            return
        try:
            hook(source, amount)
        except Exception as exc:
            self._balances.subtract(dest, amount)
            self._balances.add(source, amount)
            raise TransferError(f"{dest} rejected {amount} {self.symbol}: {exc}") from exc

    def __repr__(self) -> str:
        return f"NativeAsset({self.symbol}, {self._balances!r})"


class Token:
    """In-memory mintable token with allowances (a mock stablecoin)."""

    def __init__(self, name: str = "Mock USDC", symbol: str = "mUSDC", decimals: int = 6):
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self._balances = BalanceTable()
        self._allowances: Dict[Tuple[str, str], int] = {}

    def mint(self, account: str, amount: int) -> None:
        _check_amount(amount)
        self._balances.add(account, amount)

    def balance_of(self, account: str) -> int:
        return self._balances.get(account)

    def total_supply(self) -> int:
        return self._balances.total()

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        _check_amount(amount)
        if amount == 0:
            self._allowances.pop((owner, spender), None)
        else:
            self._allowances[(owner, spender)] = amount

    def transfer(self, source: str, dest: str, amount: int) -> None:
        _check_amount(amount)
        available = self._balances.get(source)
        if amount > available:
            raise TransferError(f"{source} holds {available} {self.symbol}, needs {amount}")
        self._balances.subtract(source, amount)
        self._balances.add(dest, amount)

    def transfer_from(self, spender: str, source: str, dest: str, amount: int) -> None:
        _check_amount(amount)
        allowed = self.allowance(source, spender)
        if amount > allowed:
            raise TransferError(
                f"{spender} may spend {allowed} {self.symbol} of {source}, needs {amount}"
            )
        self.transfer(source, dest, amount)
        self.approve(source, spender, allowed - amount)

    def __repr__(self) -> str:
        return f"Token({self.symbol}, {self._balances!r})"
