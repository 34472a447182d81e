"""Dispatch-table engine for the collateral vault kernel.

``step(state, params)`` is the single entry point. It:

1. Validates call attribution (caller identity, timestamp).
2. Dispatches to the correct guard / update / effect functions.
3. Checks all invariants on the post-state.
4. Returns a ``StepResult`` (accepted or rejected with reason).

The engine never mutates its input and performs no I/O; external transfers are
described by the returned ``Effect`` and carried out by the shell.
"""

from __future__ import annotations

from typing import Callable, Optional

from .effects import (
    effect_borrow,
    effect_deposit,
    effect_liquidate,
    effect_repay,
    effect_set_paused,
    effect_update_price,
    effect_withdraw,
)
from .errors import error_for
from .guards import (
    Refusal,
    guard_borrow,
    guard_deposit,
    guard_liquidate,
    guard_repay,
    guard_set_paused,
    guard_update_price,
    guard_withdraw,
)
from .invariants import check_all
from .types import Action, ActionParams, Effect, Rejection, StepResult, VaultState
from .updates import (
    apply_borrow,
    apply_deposit,
    apply_liquidate,
    apply_repay,
    apply_set_paused,
    apply_update_price,
    apply_withdraw,
)

GuardFn = Callable[[VaultState, ActionParams], Optional[Refusal]]
UpdateFn = Callable[[VaultState, ActionParams], VaultState]
EffectFn = Callable[[VaultState, VaultState, ActionParams], Effect]

_DISPATCH: dict[Action, tuple[GuardFn, UpdateFn, EffectFn]] = {
    Action.DEPOSIT: (guard_deposit, apply_deposit, effect_deposit),
    Action.WITHDRAW: (guard_withdraw, apply_withdraw, effect_withdraw),
    Action.BORROW: (guard_borrow, apply_borrow, effect_borrow),
    Action.REPAY: (guard_repay, apply_repay, effect_repay),
    Action.LIQUIDATE: (guard_liquidate, apply_liquidate, effect_liquidate),
    Action.UPDATE_PRICE: (guard_update_price, apply_update_price, effect_update_price),
    Action.SET_PAUSED: (guard_set_paused, apply_set_paused, effect_set_paused),
}

# -- Call attribution --------------------------------------------------------

# Amount and price domains are guard checks so that the authority and pause
# gates are evaluated first. Only the fields supplied by the execution
# environment are checked here.


def _validate_call(params: ActionParams) -> tuple[Rejection, str] | None:
    """Check caller identity and timestamp. Returns (rejection, detail) or None."""
    if not isinstance(params.caller, str) or not params.caller:
        return Rejection.UNAUTHORIZED, "param_domain:caller"
    if isinstance(params.timestamp, bool) or not isinstance(params.timestamp, int) or params.timestamp < 0:
        return Rejection.INVALID_AMOUNT, "param_domain:timestamp"
    return None


def step(state: VaultState, params: ActionParams) -> StepResult:
    """Execute one action against the given state.

    Returns ``StepResult`` with ``accepted=True`` on success,
    or ``accepted=False`` with a ``rejection`` and human-readable ``detail``.
    """
    entry = _DISPATCH.get(params.action)
    if entry is None:
        return StepResult(
            accepted=False,
            rejection=Rejection.INVALID_AMOUNT,
            detail=f"unknown_action:{params.action}",
        )

    call_err = _validate_call(params)
    if call_err is not None:
        rejection, detail = call_err
        return StepResult(accepted=False, rejection=rejection, detail=detail)

    guard_fn, update_fn, effect_fn = entry

    refusal = guard_fn(state, params)
    if refusal is not None:
        return StepResult(accepted=False, rejection=refusal.rejection, detail=refusal.detail)

    new_state = update_fn(state, params)

    violations = check_all(new_state)
    if violations:
        return StepResult(
            accepted=False,
            rejection=Rejection.INVARIANT,
            detail=",".join(violations),
        )

    effect = effect_fn(state, new_state, params)
    return StepResult(accepted=True, state=new_state, effect=effect)


def step_or_raise(state: VaultState, params: ActionParams) -> StepResult:
    """Like ``step()`` but raises on rejection instead of returning a result.

    Raises:
        VaultError: the subclass matching the rejection
            (e.g. ``RatioTooLowError``, ``PausedError``,
            ``VaultInvariantError``).
    """
    result = step(state, params)
    if result.accepted:
        return result
    raise error_for(result.rejection or Rejection.INVARIANT, result.detail)
