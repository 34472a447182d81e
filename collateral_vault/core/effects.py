"""Effect functions for the collateral vault kernel.

One pure function per action. Each computes the ``Effect`` of an accepted step
from the PRE-state (what was moved) and the POST-state (what remains). The
`transfers` tuple is the complete list of external movements the shell must
perform, in order: inbound pulls first, then outbound payments.
"""

from __future__ import annotations

from .math import collateral_ratio, liquidation_payout
from .types import (
    UNBOUNDED,
    ActionParams,
    Asset,
    Direction,
    Effect,
    Event,
    Transfer,
    VaultState,
)
from .updates import repay_amount


def _position_effects(state: VaultState, account: str) -> dict[str, object]:
    """Shared effect fields for the touched account, from post-state."""
    position = state.positions.lookup(account)
    return dict(
        account=account,
        collateral_after=position.collateral_amount,
        debt_after=position.debt_amount,
        ratio_after=collateral_ratio(position, state.price, state.params),
        price_after=state.price,
        paused_after=state.paused,
    )


def effect_deposit(pre: VaultState, post: VaultState, params: ActionParams) -> Effect:
    return Effect(
        event=Event.COLLATERAL_DEPOSITED,
        caller=params.caller,
        amount=params.amount,
        transfers=(Transfer(Asset.COLLATERAL, Direction.IN, params.caller, params.amount),),
        **_position_effects(post, params.caller),
    )


def effect_withdraw(pre: VaultState, post: VaultState, params: ActionParams) -> Effect:
    return Effect(
        event=Event.COLLATERAL_WITHDRAWN,
        caller=params.caller,
        amount=params.amount,
        transfers=(Transfer(Asset.COLLATERAL, Direction.OUT, params.caller, params.amount),),
        **_position_effects(post, params.caller),
    )


def effect_borrow(pre: VaultState, post: VaultState, params: ActionParams) -> Effect:
    return Effect(
        event=Event.BORROWED,
        caller=params.caller,
        amount=params.amount,
        transfers=(Transfer(Asset.DEBT, Direction.OUT, params.caller, params.amount),),
        **_position_effects(post, params.caller),
    )


def effect_repay(pre: VaultState, post: VaultState, params: ActionParams) -> Effect:
    repaid = repay_amount(pre, params)
    return Effect(
        event=Event.REPAID,
        caller=params.caller,
        amount=repaid,
        transfers=(Transfer(Asset.DEBT, Direction.IN, params.caller, repaid),),
        **_position_effects(post, params.caller),
    )


def effect_liquidate(pre: VaultState, post: VaultState, params: ActionParams) -> Effect:
    position = pre.positions.lookup(params.account)
    seized, refund = liquidation_payout(position, pre.price, pre.params)

    transfers = [Transfer(Asset.DEBT, Direction.IN, params.caller, position.debt_amount)]
    if seized:
        transfers.append(Transfer(Asset.COLLATERAL, Direction.OUT, params.caller, seized))
    if refund:
        transfers.append(Transfer(Asset.COLLATERAL, Direction.OUT, params.account, refund, claimable=True))

    return Effect(
        event=Event.LIQUIDATED,
        caller=params.caller,
        amount=position.debt_amount,
        transfers=tuple(transfers),
        **_position_effects(post, params.account),
    )


def effect_update_price(pre: VaultState, post: VaultState, params: ActionParams) -> Effect:
    return Effect(
        event=Event.PRICE_UPDATED,
        caller=params.caller,
        amount=params.price,
        ratio_after=UNBOUNDED,
        price_after=post.price,
        paused_after=post.paused,
    )


def effect_set_paused(pre: VaultState, post: VaultState, params: ActionParams) -> Effect:
    return Effect(
        event=Event.PAUSED if post.paused else Event.UNPAUSED,
        caller=params.caller,
        price_after=post.price,
        paused_after=post.paused,
    )
