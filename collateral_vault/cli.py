"""
Scenario runner for the collateral vault.

    collateral-vault scenario.yaml [--log-level INFO]

A scenario is a YAML document:

    schema: collateral-vault/scenario/v1
    config:                      # optional LedgerConfig overrides
      initial_price: "2000"      # whole debt units per whole collateral unit
      liquidation_payout: penalty_capped
    liquidity: "100000"          # debt tokens minted to the vault
    accounts:
      alice: {collateral: "1", debt: "0"}
    steps:
      - {op: deposit, caller: alice, amount: "1"}
      - {op: borrow, caller: alice, amount: "1500", expect: RatioTooLow}

Decimal strings are whole units of the relevant asset; integers are base
units. `expect` is an error kind (e.g. `Paused`) or `ok` (the default).

Prints a JSON report. Exit status: 0 when every step met its expectation,
1 when one did not, 2 when the scenario could not be loaded.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

import yaml

from .core.errors import VaultError
from .core.math import format_units, parse_units
from .core.state import ratio_to_json
from .core.types import Effect, LiquidationPayout
from .integration.assets import NativeAsset, Token
from .integration.config import LedgerConfig, create_ledger, load_config
from .integration.ledger import Ledger

log = logging.getLogger(__name__)

SCHEMA = "collateral-vault/scenario/v1"
REPORT_SCHEMA = "collateral-vault/report/v1"
OK = "ok"

_CONFIG_INT_FIELDS = {
    "collateral_decimals",
    "debt_decimals",
    "min_collateral_ratio",
    "liquidation_threshold",
    "liquidation_penalty",
}
_CONFIG_STR_FIELDS = {"owner", "address"}


class ScenarioError(Exception):
    """The scenario document is malformed."""


def _require_mapping(obj: Any, *, name: str) -> dict[str, Any]:
    if not isinstance(obj, dict):
        raise ScenarioError(f"{name} must be a mapping")
    return obj


def _require_list(obj: Any, *, name: str) -> list[Any]:
    if not isinstance(obj, list):
        raise ScenarioError(f"{name} must be a list")
    return obj


def _require_str(obj: Any, *, name: str) -> str:
    if not isinstance(obj, str) or not obj.strip():
        raise ScenarioError(f"{name} must be a non-empty string")
    return obj.strip()


def _require_amount(obj: Any, decimals: int, *, name: str) -> int:
    if isinstance(obj, bool) or not isinstance(obj, (int, str)):
        raise ScenarioError(f"{name} must be an integer or a decimal string")
    try:
        return parse_units(obj, decimals)
    except ValueError as exc:
        raise ScenarioError(f"{name}: {exc}") from exc


def _require_funds(obj: Any, decimals: int, *, name: str) -> int:
    amount = _require_amount(obj, decimals, name=name)
    if amount < 0:
        raise ScenarioError(f"{name} must be non-negative")
    return amount


def _require_bool(obj: Any, *, name: str) -> bool:
    if not isinstance(obj, bool):
        raise ScenarioError(f"{name} must be true or false")
    return obj


# -- Loading -----------------------------------------------------------------

def load_scenario(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ScenarioError(f"cannot read {path}: {exc}") from exc
    try:
        doc = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ScenarioError(f"invalid YAML in {path}: {exc}") from exc
    root = _require_mapping(doc, name="scenario")
    schema = _require_str(root.get("schema"), name="scenario.schema")
    if schema != SCHEMA:
        raise ScenarioError(f"unsupported scenario.schema: {schema}")
    return root


def _scenario_config(raw: Any, base: LedgerConfig) -> LedgerConfig:
    if raw is None:
        return base
    overrides = _require_mapping(raw, name="config")
    changes: Dict[str, Any] = {}
    for key, value in overrides.items():
        name = f"config.{key}"
        if key in _CONFIG_INT_FIELDS:
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ScenarioError(f"{name} must be a non-negative integer")
            changes[key] = value
        elif key in _CONFIG_STR_FIELDS:
            changes[key] = _require_str(value, name=name)
        elif key == "liquidation_payout":
            try:
                changes[key] = LiquidationPayout(_require_str(value, name=name))
            except ValueError as exc:
                raise ScenarioError(f"{name}: unknown payout mode {value!r}") from exc
        elif key == "liquidate_when_paused":
            changes[key] = _require_bool(value, name=name)
        elif key != "initial_price":
            raise ScenarioError(f"unknown config field: {key}")
    cfg = dataclasses.replace(base, **changes)
    # The price is read in debt units, so it is parsed after any decimals override.
    if "initial_price" in overrides:
        price = _require_amount(overrides["initial_price"], cfg.debt_decimals, name="config.initial_price")
        cfg = dataclasses.replace(cfg, initial_price=price)
    return cfg


# -- Running -----------------------------------------------------------------

def _effect_to_dict(effect: Effect) -> dict[str, Any]:
    return {
        "event": effect.event.value,
        "account": effect.account,
        "amount": effect.amount,
        "collateral_after": effect.collateral_after,
        "debt_after": effect.debt_after,
        "ratio_after": ratio_to_json(effect.ratio_after),
        "transfers": [
            {"asset": t.asset.value, "direction": t.direction.value, "account": t.account, "amount": t.amount}
            for t in effect.transfers
        ],
    }


class _Runner:
    def __init__(self, ledger: Ledger, collateral: NativeAsset, debt_token: Token):
        self.ledger = ledger
        self.collateral = collateral
        self.debt_token = debt_token
        self._ops: Dict[str, Callable[[str, Mapping[str, Any]], Optional[Effect]]] = {
            "deposit": self._deposit,
            "withdraw": self._withdraw,
            "borrow": self._borrow,
            "repay": self._repay,
            "approve": self._approve,
            "liquidate": self._liquidate,
            "update_price": self._update_price,
            "pause": lambda caller, _: self.ledger.pause(caller),
            "unpause": lambda caller, _: self.ledger.unpause(caller),
            "set_paused": self._set_paused,
            "claim": self._claim,
        }

    def _collateral_amount(self, step: Mapping[str, Any], name: str) -> int:
        return _require_amount(step.get("amount"), self.collateral.decimals, name=name)

    def _debt_amount(self, step: Mapping[str, Any], name: str) -> int:
        return _require_amount(step.get("amount"), self.debt_token.decimals, name=name)

    def _deposit(self, caller: str, step: Mapping[str, Any]) -> Effect:
        return self.ledger.deposit(caller, self._collateral_amount(step, "deposit.amount"))

    def _withdraw(self, caller: str, step: Mapping[str, Any]) -> Effect:
        return self.ledger.withdraw(caller, self._collateral_amount(step, "withdraw.amount"))

    def _borrow(self, caller: str, step: Mapping[str, Any]) -> Effect:
        return self.ledger.borrow(caller, self._debt_amount(step, "borrow.amount"))

    def _repay(self, caller: str, step: Mapping[str, Any]) -> Effect:
        return self.ledger.repay(caller, self._debt_amount(step, "repay.amount"))

    def _approve(self, caller: str, step: Mapping[str, Any]) -> None:
        amount = _require_funds(step.get("amount"), self.debt_token.decimals, name="approve.amount")
        self.debt_token.approve(caller, self.ledger.address, amount)

    def _liquidate(self, caller: str, step: Mapping[str, Any]) -> Effect:
        return self.ledger.liquidate(caller, _require_str(step.get("account"), name="liquidate.account"))

    def _update_price(self, caller: str, step: Mapping[str, Any]) -> Effect:
        price = _require_amount(step.get("price"), self.debt_token.decimals, name="update_price.price")
        return self.ledger.update_price(caller, price)

    def _set_paused(self, caller: str, step: Mapping[str, Any]) -> Effect:
        return self.ledger.set_paused(caller, _require_bool(step.get("paused"), name="set_paused.paused"))

    def _claim(self, caller: str, step: Mapping[str, Any]) -> None:
        self.ledger.claim(caller)

    def run_step(self, index: int, raw: Any) -> dict[str, Any]:
        step = _require_mapping(raw, name=f"steps[{index}]")
        op = _require_str(step.get("op"), name=f"steps[{index}].op")
        handler = self._ops.get(op)
        if handler is None:
            raise ScenarioError(f"steps[{index}]: unknown op {op!r}")
        caller = step.get("caller", self.ledger.owner)
        caller = _require_str(caller, name=f"steps[{index}].caller")
        expected = _require_str(step.get("expect", OK), name=f"steps[{index}].expect")

        entry: dict[str, Any] = {"index": index, "op": op, "caller": caller, "expected": expected}
        try:
            effect = handler(caller, step)
        except VaultError as exc:
            entry["outcome"] = exc.rejection.value
            entry["detail"] = str(exc)
        else:
            entry["outcome"] = OK
            if effect is not None:
                entry["effect"] = _effect_to_dict(effect)
        entry["matched"] = entry["outcome"] == expected
        if not entry["matched"]:
            log.warning("step %d (%s): expected %s, got %s", index, op, expected, entry["outcome"])
        return entry


def run_scenario(doc: Mapping[str, Any], env: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
    """Execute a loaded scenario and return the JSON-ready report."""
    cfg = _scenario_config(doc.get("config"), load_config(env))
    collateral = NativeAsset(decimals=cfg.collateral_decimals)
    debt_token = Token(decimals=cfg.debt_decimals)
    try:
        ledger = create_ledger(cfg, collateral=collateral, debt_token=debt_token)
    except ValueError as exc:
        raise ScenarioError(f"config: {exc}") from exc

    liquidity = doc.get("liquidity")
    if liquidity is not None:
        debt_token.mint(ledger.address, _require_funds(liquidity, cfg.debt_decimals, name="liquidity"))

    accounts = _require_mapping(doc.get("accounts") or {}, name="accounts")
    for account, funds in accounts.items():
        account = _require_str(account, name="accounts key")
        funds = _require_mapping(funds or {}, name=f"accounts.{account}")
        for key, value in funds.items():
            name = f"accounts.{account}.{key}"
            if key == "collateral":
                collateral.mint(account, _require_funds(value, cfg.collateral_decimals, name=name))
            elif key == "debt":
                debt_token.mint(account, _require_funds(value, cfg.debt_decimals, name=name))
            else:
                raise ScenarioError(f"unknown account field: {name}")

    runner = _Runner(ledger, collateral, debt_token)
    steps: List[dict[str, Any]] = [
        runner.run_step(i, raw) for i, raw in enumerate(_require_list(doc.get("steps") or [], name="steps"))
    ]

    names = sorted(set(accounts) | set(ledger.state.positions))
    return {
        "schema": REPORT_SCHEMA,
        "passed": all(s["matched"] for s in steps),
        "steps": steps,
        "status": ledger.status(),
        "accounts": {
            name: {
                "collateral": format_units(collateral.balance_of(name), cfg.collateral_decimals),
                "debt": format_units(debt_token.balance_of(name), cfg.debt_decimals),
                "position": ledger.status(name)["account"],
            }
            for name in names
        },
    }


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Run a collateral-vault YAML scenario and print a JSON report.")
    p.add_argument("scenario", type=Path, help="Path to the scenario YAML file")
    p.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    p.add_argument("--indent", type=int, default=2, help="JSON indent (default: 2)")
    args = p.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        report = run_scenario(load_scenario(args.scenario))
    except ScenarioError as exc:
        print(f"collateral-vault error: {exc}", file=sys.stderr)
        return 2

    print(json.dumps(report, indent=args.indent, sort_keys=True))
    return 0 if report["passed"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
