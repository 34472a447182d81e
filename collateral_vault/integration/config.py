"""
Environment-driven configuration for a ledger deployment.

Every field can be set from a `VAULT_*` environment variable; unset or blank
variables fall back to the defaults below. Integer settings are clamped to
their allowed range, unparseable ones fall back to the default.

    VAULT_OWNER                  owner identity                 ("owner")
    VAULT_ADDRESS                vault's own account on assets  ("vault")
    VAULT_INITIAL_PRICE          debt units per whole collateral unit
    VAULT_COLLATERAL_DECIMALS    (18)
    VAULT_DEBT_DECIMALS          (6)
    VAULT_MIN_COLLATERAL_RATIO   whole percent (150)
    VAULT_LIQUIDATION_THRESHOLD  whole percent (125)
    VAULT_LIQUIDATION_PENALTY    whole percent (10)
    VAULT_LIQUIDATION_PAYOUT     full_seizure | penalty_capped
    VAULT_LIQUIDATE_WHEN_PAUSED  1/0, true/false, yes/no, on/off
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from ..core.math import MAX_AMOUNT
from ..core.types import (
    LIQUIDATION_PENALTY,
    LIQUIDATION_THRESHOLD,
    MIN_COLLATERAL_RATIO,
    LiquidationPayout,
    VaultParams,
)
from .assets import CollateralAsset, DebtToken, NativeAsset, Token
from .ledger import Ledger

DEFAULT_INITIAL_PRICE = 2000 * 10**6


def _env_int(env: Mapping[str, str], name: str, default: int, *, lo: int, hi: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        v = int(raw.strip().replace("_", ""))
    except ValueError:
        return default
    if v < lo:
        return lo
    if v > hi:
        return hi
    return v


def _env_str(env: Mapping[str, str], name: str, default: str) -> str:
    raw = env.get(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _env_bool(env: Mapping[str, str], name: str, *, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _env_payout(env: Mapping[str, str], name: str, default: LiquidationPayout) -> LiquidationPayout:
    raw = _env_str(env, name, default.value).lower()
    try:
        return LiquidationPayout(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class LedgerConfig:
    owner: str = "owner"
    address: str = "vault"
    initial_price: int = DEFAULT_INITIAL_PRICE
    collateral_decimals: int = 18
    debt_decimals: int = 6
    min_collateral_ratio: int = MIN_COLLATERAL_RATIO
    liquidation_threshold: int = LIQUIDATION_THRESHOLD
    liquidation_penalty: int = LIQUIDATION_PENALTY
    liquidation_payout: LiquidationPayout = LiquidationPayout.FULL_SEIZURE
    liquidate_when_paused: bool = False

    def to_params(self) -> VaultParams:
        """Build the kernel's risk parameters. Raises ValueError if they are inconsistent."""
        return VaultParams(
            collateral_decimals=self.collateral_decimals,
            debt_decimals=self.debt_decimals,
            min_collateral_ratio=self.min_collateral_ratio,
            liquidation_threshold=self.liquidation_threshold,
            liquidation_penalty=self.liquidation_penalty,
            liquidation_payout=self.liquidation_payout,
            liquidate_when_paused=self.liquidate_when_paused,
        )


def load_config(env: Optional[Mapping[str, str]] = None) -> LedgerConfig:
    """Read a LedgerConfig from `env` (default: the process environment)."""
    e = os.environ if env is None else env
    d = LedgerConfig()
    return LedgerConfig(
        owner=_env_str(e, "VAULT_OWNER", d.owner),
        address=_env_str(e, "VAULT_ADDRESS", d.address),
        initial_price=_env_int(e, "VAULT_INITIAL_PRICE", d.initial_price, lo=1, hi=MAX_AMOUNT),
        collateral_decimals=_env_int(e, "VAULT_COLLATERAL_DECIMALS", d.collateral_decimals, lo=0, hi=36),
        debt_decimals=_env_int(e, "VAULT_DEBT_DECIMALS", d.debt_decimals, lo=0, hi=36),
        min_collateral_ratio=_env_int(e, "VAULT_MIN_COLLATERAL_RATIO", d.min_collateral_ratio, lo=1, hi=10_000),
        liquidation_threshold=_env_int(e, "VAULT_LIQUIDATION_THRESHOLD", d.liquidation_threshold, lo=1, hi=10_000),
        liquidation_penalty=_env_int(e, "VAULT_LIQUIDATION_PENALTY", d.liquidation_penalty, lo=0, hi=10_000),
        liquidation_payout=_env_payout(e, "VAULT_LIQUIDATION_PAYOUT", d.liquidation_payout),
        liquidate_when_paused=_env_bool(e, "VAULT_LIQUIDATE_WHEN_PAUSED", default=d.liquidate_when_paused),
    )


def create_ledger(
    config: Optional[LedgerConfig] = None,
    *,
    collateral: Optional[CollateralAsset] = None,
    debt_token: Optional[DebtToken] = None,
) -> Ledger:
    """
    Build a Ledger from `config` (default: `load_config()`).

    Missing assets are replaced by in-memory ones with the configured decimals.
    """
    cfg = config if config is not None else load_config()
    if collateral is None:
        collateral = NativeAsset(decimals=cfg.collateral_decimals)
    if debt_token is None:
        debt_token = Token(decimals=cfg.debt_decimals)
    return Ledger(
        cfg.owner,
        cfg.initial_price,
        collateral=collateral,
        debt_token=debt_token,
        address=cfg.address,
        params=cfg.to_params(),
    )
