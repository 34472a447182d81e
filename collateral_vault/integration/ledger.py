"""
Stateful ledger shell around the pure vault kernel.

The kernel (`core.engine.step`) decides every operation and describes the
value movements it needs as `Transfer`s. The `Ledger`:

1. refuses re-entry while an operation is in progress,
2. runs the kernel step (raising the matching `VaultError` on rejection),
3. checks that inbound transfers are fundable,
4. commits the new state,
5. settles the transfers against the collateral asset and debt token.

If a transfer fails (for any reason) the committed state is restored and the
transfers that already completed are reversed, so a failed operation leaves no
trace. The one exception is a liquidation refund to the borrower: it never
blocks the liquidation, and if it cannot be delivered it is recorded as a claim
the borrower collects later with `claim()`.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from ..core.engine import step_or_raise
from ..core.errors import (
    InsufficientBalanceError,
    ReentrantCallError,
    TransferFailedError,
    VaultError,
    VaultInvariantError,
)
from ..core.state import initial_state, state_to_dict
from ..core.types import (
    Action,
    ActionParams,
    Asset,
    Direction,
    Effect,
    PositionClass,
    RatioResult,
    Transfer,
    VaultParams,
    VaultState,
)
from ..core.views import (
    account_summary,
    get_borrowable_amount,
    get_collateral_ratio,
    is_liquidatable,
    position_class,
)
from ..state.balances import BalanceTable
from ..state.positions import Position
from .assets import CollateralAsset, DebtToken

log = logging.getLogger(__name__)


class Ledger:
    """A single collateral vault: one owner, one price, many positions."""

    def __init__(
        self,
        owner: str,
        price: int,
        *,
        collateral: CollateralAsset,
        debt_token: DebtToken,
        address: str = "vault",
        params: Optional[VaultParams] = None,
        clock: Callable[[], float] = time.time,
    ):
        if not address:
            raise ValueError("vault address must be non-empty")
        self._state = initial_state(owner, price, params)
        self._collateral = collateral
        self._debt_token = debt_token
        self._address = address
        self._clock = clock
        self._busy = False
        self._claims = BalanceTable()

    # -- Properties --------------------------------------------------------

    @property
    def state(self) -> VaultState:
        return self._state

    @property
    def address(self) -> str:
        return self._address

    @property
    def owner(self) -> str:
        return self._state.owner

    @property
    def price(self) -> int:
        return self._state.price

    @property
    def paused(self) -> bool:
        return self._state.paused

    @property
    def total_collateral(self) -> int:
        return self._state.total_collateral

    @property
    def total_debt(self) -> int:
        return self._state.total_debt

    @property
    def params(self) -> VaultParams:
        return self._state.params

    # -- Operations --------------------------------------------------------

    def deposit(self, caller: str, amount: int) -> Effect:
        """Move `amount` collateral from `caller` into the vault."""
        return self._execute(Action.DEPOSIT, caller, amount=amount)

    def withdraw(self, caller: str, amount: int) -> Effect:
        """Return `amount` collateral to `caller`, keeping any debt above the minimum ratio."""
        return self._execute(Action.WITHDRAW, caller, amount=amount)

    def borrow(self, caller: str, amount: int) -> Effect:
        """Lend `amount` debt tokens to `caller` against their collateral."""
        return self._execute(Action.BORROW, caller, amount=amount)

    def repay(self, caller: str, amount: int) -> Effect:
        """
        Pull up to `amount` debt tokens from `caller` (via allowance).

        Overpayment is clamped to the outstanding debt.
        """
        return self._execute(Action.REPAY, caller, amount=amount)

    def liquidate(self, caller: str, account: str) -> Effect:
        """
        Close `account`'s position: `caller` repays the whole debt and receives
        the seized collateral.
        """
        return self._execute(Action.LIQUIDATE, caller, account=account)

    def update_price(self, caller: str, price: int) -> Effect:
        return self._execute(Action.UPDATE_PRICE, caller, price=price)

    def set_paused(self, caller: str, paused: bool) -> Effect:
        return self._execute(Action.SET_PAUSED, caller, flag=bool(paused))

    def pause(self, caller: str) -> Effect:
        return self.set_paused(caller, True)

    def unpause(self, caller: str) -> Effect:
        return self.set_paused(caller, False)

    # -- Reads -------------------------------------------------------------

    def get_position(self, account: str) -> Position:
        return self._state.positions.lookup(account)

    def get_collateral_ratio(self, account: str) -> RatioResult:
        return get_collateral_ratio(self._state, account)

    def get_borrowable_amount(self, account: str) -> int:
        return get_borrowable_amount(self._state, account)

    def is_liquidatable(self, account: str) -> bool:
        return is_liquidatable(self._state, account)

    def position_class(self, account: str) -> PositionClass:
        return position_class(self._state, account)

    def status(self, account: Optional[str] = None) -> Dict[str, Any]:
        """JSON-ready snapshot of the vault, optionally with one account's figures."""
        out = state_to_dict(self._state)
        out["address"] = self._address
        out["holdings"] = {
            "collateral": self._collateral.balance_of(self._address),
            "debt": self._debt_token.balance_of(self._address),
        }
        out["claims"] = dict(sorted(self._claims.get_all_balances().items()))
        if account is not None:
            out["account"] = account_summary(self._state, account)
        return out

    # -- Execution ---------------------------------------------------------

    def _execute(self, action: Action, caller: str, **fields: Any) -> Effect:
        if self._busy:
            log.warning("reentrant %s by %s refused", action.value, caller)
            raise ReentrantCallError(f"{action.value} entered while another operation is in progress")

        self._busy = True
        try:
            params = ActionParams(action=action, caller=caller, timestamp=int(self._clock()), **fields)
            try:
                result = step_or_raise(self._state, params)
            except VaultError as exc:
                log.info("%s by %s rejected: %s (%s)", action.value, caller, exc.rejection.value, exc)
                raise
            new_state, effect = result.state, result.effect
            if new_state is None or effect is None:
                raise VaultInvariantError([f"{action.value}:accepted_without_post_state"])

            required = tuple(t for t in effect.transfers if not t.claimable)
            self._check_funding(required)

            previous = self._state
            self._state = new_state
            try:
                self._settle(required)
            except Exception as exc:
                self._state = previous
                log.error("%s by %s rolled back: %s", action.value, caller, exc)
                raise TransferFailedError(f"{action.value} settlement failed: {exc}") from exc

            for t in effect.transfers:
                if t.claimable:
                    self._deliver_or_record(t)

            log.info(
                "%s by %s applied: account=%s amount=%d ratio=%s",
                action.value,
                caller,
                effect.account or "-",
                effect.amount,
                effect.ratio_after,
            )
            return effect
        finally:
            self._busy = False

    def _deliver_or_record(self, t: Transfer) -> None:
        try:
            self._move(t)
        except Exception as exc:
            self._claims.add(t.account, t.amount)
            log.warning("%d collateral owed to %s recorded as a claim: %s", t.amount, t.account, exc)

    def claim(self, caller: str) -> int:
        """
        Send `caller` the collateral recorded for them when a liquidation
        refund could not be delivered. Returns the amount sent.
        """
        if self._busy:
            log.warning("reentrant claim by %s refused", caller)
            raise ReentrantCallError("claim entered while another operation is in progress")

        self._busy = True
        try:
            amount = self._claims.get(caller)
            if amount == 0:
                raise InsufficientBalanceError(f"{caller} has nothing to claim")
            self._claims.subtract(caller, amount)
            try:
                self._collateral.transfer(self._address, caller, amount)
            except Exception as exc:
                self._claims.add(caller, amount)
                log.error("claim by %s rolled back: %s", caller, exc)
                raise TransferFailedError(f"claim settlement failed: {exc}") from exc
            log.info("claim by %s applied: amount=%d", caller, amount)
            return amount
        finally:
            self._busy = False

    def claimable(self, account: str) -> int:
        return self._claims.get(account)

    def _check_funding(self, transfers: tuple[Transfer, ...]) -> None:
        for t in transfers:
            if t.direction is not Direction.IN:
                continue
            if t.asset is Asset.COLLATERAL:
                held = self._collateral.balance_of(t.account)
                if held < t.amount:
                    raise InsufficientBalanceError(f"{t.account} holds {held} collateral, needs {t.amount}")
            else:
                held = self._debt_token.balance_of(t.account)
                if held < t.amount:
                    raise InsufficientBalanceError(f"{t.account} holds {held} debt tokens, needs {t.amount}")
                allowed = self._debt_token.allowance(t.account, self._address)
                if allowed < t.amount:
                    raise InsufficientBalanceError(
                        f"{t.account} approved {allowed} debt tokens to the vault, needs {t.amount}"
                    )

    def _settle(self, transfers: tuple[Transfer, ...]) -> None:
        done: List[Transfer] = []
        try:
            for t in transfers:
                self._move(t)
                done.append(t)
        except Exception:
            for t in reversed(done):
                self._reverse(t)
            raise

    def _move(self, t: Transfer) -> None:
        if t.asset is Asset.COLLATERAL:
            if t.direction is Direction.IN:
                self._collateral.transfer(t.account, self._address, t.amount)
            else:
                self._collateral.transfer(self._address, t.account, t.amount)
        elif t.direction is Direction.IN:
            self._debt_token.transfer_from(self._address, t.account, self._address, t.amount)
        else:
            self._debt_token.transfer(self._address, t.account, t.amount)

    def _reverse(self, t: Transfer) -> None:
        if t.asset is Asset.COLLATERAL:
            if t.direction is Direction.IN:
                self._collateral.transfer(self._address, t.account, t.amount)
            else:
                self._collateral.transfer(t.account, self._address, t.amount)
        elif t.direction is Direction.IN:
            self._debt_token.transfer(self._address, t.account, t.amount)
            allowed = self._debt_token.allowance(t.account, self._address)
            self._debt_token.approve(t.account, self._address, allowed + t.amount)
        else:
            self._debt_token.transfer(t.account, self._address, t.amount)

    def __repr__(self) -> str:
        s = self._state
        return (
            f"Ledger(owner={s.owner!r}, price={s.price}, paused={s.paused}, "
            f"positions={len(s.positions)}, total_debt={s.total_debt})"
        )
