"""Property tests: random action sequences through the engine.

Uses Hypothesis to fuzz operation sequences and check that accepted steps keep
totals conserved and positions non-negative, that a borrow/withdraw never
leaves a position below the minimum ratio, and that liquidation is accepted
exactly when the target's ratio is at or below the threshold.
"""

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import given, settings

from collateral_vault.core import (
    Action,
    ActionParams,
    Bounded,
    Rejection,
    collateral_ratio,
    initial_state,
    ratio_at_least,
    ratio_at_most,
    step,
)
from collateral_vault.core.invariants import check_all

ETH = 10**18
USD = 10**6
OWNER = "owner"
ACCOUNTS = ["alice", "bob", "carol"]

amounts = st.one_of(
    st.integers(min_value=0, max_value=5 * ETH),
    st.integers(min_value=0, max_value=5000 * USD),
)
prices = st.integers(min_value=1, max_value=5000 * USD)


@st.composite
def action_params(draw) -> ActionParams:
    action = draw(st.sampled_from(list(Action)))
    caller = draw(st.sampled_from(ACCOUNTS + [OWNER]))
    if action in (Action.DEPOSIT, Action.WITHDRAW, Action.BORROW, Action.REPAY):
        return ActionParams(action=action, caller=caller, amount=draw(amounts))
    if action == Action.LIQUIDATE:
        return ActionParams(action=action, caller=caller, account=draw(st.sampled_from(ACCOUNTS)))
    if action == Action.UPDATE_PRICE:
        return ActionParams(action=action, caller=caller, price=draw(prices))
    return ActionParams(action=action, caller=caller, flag=draw(st.booleans()))


@settings(max_examples=200, deadline=None)
@given(st.lists(action_params(), min_size=1, max_size=40))
def test_accepted_steps_preserve_invariants(seq):
    s = initial_state(OWNER, 2000 * USD)
    for params in seq:
        r = step(s, params)
        if not r.accepted:
            assert r.rejection != Rejection.INVARIANT, r.detail
            continue
        s = r.state
        assert check_all(s) == []
        assert s.total_collateral == sum(p.collateral_amount for p in s.positions.values())
        assert s.total_debt == sum(p.debt_amount for p in s.positions.values())


@settings(max_examples=200, deadline=None)
@given(st.lists(action_params(), min_size=1, max_size=40))
def test_borrow_and_withdraw_keep_minimum_ratio(seq):
    s = initial_state(OWNER, 2000 * USD)
    for params in seq:
        r = step(s, params)
        if not r.accepted:
            continue
        if params.action in (Action.BORROW, Action.WITHDRAW):
            ratio = collateral_ratio(r.state.positions.lookup(params.caller), r.state.price, r.state.params)
            assert ratio_at_least(ratio, r.state.params.min_collateral_ratio)
        s = r.state


@settings(max_examples=200, deadline=None)
@given(st.lists(action_params(), min_size=1, max_size=40), st.sampled_from(ACCOUNTS))
def test_liquidation_iff_below_threshold(seq, target):
    s = initial_state(OWNER, 2000 * USD)
    for params in seq:
        r = step(s, params)
        if r.accepted:
            s = r.state
    if s.paused:
        return
    ratio = collateral_ratio(s.positions.lookup(target), s.price, s.params)
    r = step(s, ActionParams(action=Action.LIQUIDATE, caller="keeper", account=target))
    assert r.accepted == ratio_at_most(ratio, s.params.liquidation_threshold)
    if r.accepted:
        assert isinstance(ratio, Bounded)
        assert r.state.positions.lookup(target).is_empty


@settings(max_examples=100, deadline=None)
@given(st.integers(min_value=1, max_value=10**30), st.sampled_from(ACCOUNTS))
def test_deposit_then_withdraw_round_trip(amount, account):
    s0 = initial_state(OWNER, 2000 * USD)
    r1 = step(s0, ActionParams(action=Action.DEPOSIT, caller=account, amount=amount))
    assert r1.accepted
    r2 = step(r1.state, ActionParams(action=Action.WITHDRAW, caller=account, amount=amount))
    assert r2.accepted
    assert r2.state.total_collateral == s0.total_collateral
    assert r2.state.positions.lookup(account).collateral_amount == 0
