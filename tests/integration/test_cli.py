"""Tests for collateral_vault/cli.py: YAML scenario runner."""

import json
import textwrap

import pytest

from collateral_vault.cli import ScenarioError, load_scenario, main, run_scenario

LIQUIDATION = """
schema: collateral-vault/scenario/v1
config:
  liquidation_payout: penalty_capped
liquidity: "100000"
accounts:
  alice: {collateral: "1"}
  bob: {collateral: "0", debt: "5000"}
steps:
  - {op: deposit, caller: alice, amount: "1"}
  - {op: borrow, caller: alice, amount: "1500", expect: RatioTooLow}
  - {op: borrow, caller: alice, amount: "1201"}
  - {op: liquidate, caller: bob, account: alice, expect: NotEligibleForLiquidation}
  - {op: update_price, caller: owner, price: "1500"}
  - {op: liquidate, caller: bob, account: alice, expect: InsufficientBalance}
  - {op: approve, caller: bob, amount: "5000"}
  - {op: liquidate, caller: bob, account: alice}
"""


def _write(tmp_path, text: str):
    path = tmp_path / "scenario.yaml"
    path.write_text(textwrap.dedent(text), encoding="utf-8")
    return path


class TestRunScenario:
    def test_liquidation_scenario(self, tmp_path):
        report = run_scenario(load_scenario(_write(tmp_path, LIQUIDATION)), env={})
        assert report["passed"] is True
        assert [s["outcome"] for s in report["steps"]] == [
            "ok",
            "RatioTooLow",
            "ok",
            "NotEligibleForLiquidation",
            "ok",
            "InsufficientBalance",
            "ok",
            "ok",
        ]
        assert report["steps"][2]["effect"]["ratio_after"] == 166
        assert report["status"]["total_debt"] == 0
        assert report["accounts"]["bob"]["collateral"] == "0.880733333333333333"
        assert report["accounts"]["alice"]["collateral"] == "0.119266666666666667"
        assert report["accounts"]["alice"]["position"]["class"] == "empty"

    def test_owner_is_default_caller(self):
        doc = {
            "schema": "collateral-vault/scenario/v1",
            "steps": [{"op": "pause"}, {"op": "deposit", "caller": "alice", "amount": 1, "expect": "Paused"}],
        }
        report = run_scenario(doc, env={})
        assert report["passed"] is True
        assert report["status"]["paused"] is True

    def test_unexpected_outcome_fails(self):
        doc = {
            "schema": "collateral-vault/scenario/v1",
            "steps": [{"op": "update_price", "caller": "mallory", "price": "1"}],
        }
        report = run_scenario(doc, env={})
        assert report["passed"] is False
        assert report["steps"][0]["outcome"] == "Unauthorized"

    def test_claim_with_nothing_owed(self):
        doc = {
            "schema": "collateral-vault/scenario/v1",
            "steps": [{"op": "claim", "caller": "alice", "expect": "InsufficientBalance"}],
        }
        report = run_scenario(doc, env={})
        assert report["passed"] is True
        assert report["status"]["claims"] == {}

    def test_env_config(self):
        doc = {"schema": "collateral-vault/scenario/v1", "steps": [{"op": "set_paused", "caller": "admin", "paused": True}]}
        report = run_scenario(doc, env={"VAULT_OWNER": "admin"})
        assert report["passed"] is True
        assert report["status"]["owner"] == "admin"

    @pytest.mark.parametrize(
        "doc",
        [
            {"schema": "collateral-vault/scenario/v1", "steps": [{"op": "explode"}]},
            {"schema": "collateral-vault/scenario/v1", "steps": [{"op": "deposit", "caller": "a", "amount": "1.x"}]},
            {"schema": "collateral-vault/scenario/v1", "config": {"color": "red"}},
            {"schema": "collateral-vault/scenario/v1", "config": {"min_collateral_ratio": 100}},
            {"schema": "collateral-vault/scenario/v1", "accounts": {"a": {"collateral": "-1"}}},
            {"schema": "collateral-vault/scenario/v1", "steps": "deposit"},
        ],
    )
    def test_malformed(self, doc):
        with pytest.raises(ScenarioError):
            run_scenario(doc, env={})


class TestLoadScenario:
    def test_wrong_schema(self, tmp_path):
        with pytest.raises(ScenarioError, match="schema"):
            load_scenario(_write(tmp_path, "schema: something/else\n"))

    def test_not_a_mapping(self, tmp_path):
        with pytest.raises(ScenarioError):
            load_scenario(_write(tmp_path, "- just\n- a list\n"))

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ScenarioError):
            load_scenario(_write(tmp_path, "schema: [unclosed\n"))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ScenarioError):
            load_scenario(tmp_path / "nope.yaml")


class TestMain:
    def test_success(self, tmp_path, capsys, monkeypatch):
        for name in ("VAULT_OWNER", "VAULT_INITIAL_PRICE", "VAULT_LIQUIDATION_PAYOUT"):
            monkeypatch.delenv(name, raising=False)
        assert main([str(_write(tmp_path, LIQUIDATION))]) == 0
        report = json.loads(capsys.readouterr().out)
        assert report["schema"] == "collateral-vault/report/v1"

    def test_expectation_mismatch(self, tmp_path, capsys):
        path = _write(
            tmp_path,
            """
            schema: collateral-vault/scenario/v1
            steps:
              - {op: deposit, caller: alice, amount: 0}
            """,
        )
        assert main([str(path)]) == 1
        assert json.loads(capsys.readouterr().out)["passed"] is False

    def test_malformed(self, tmp_path, capsys):
        assert main([str(_write(tmp_path, "schema: nope\n"))]) == 2
        assert "collateral-vault error" in capsys.readouterr().err
