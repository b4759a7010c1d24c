"""In-memory account ledger, loadable from a YAML state snapshot."""
from __future__ import annotations

import copy
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .models import LiquidationEvent

logger = logging.getLogger(__name__)


@dataclass
class AccountState:
    """Mutable per-account bookkeeping."""

    balances: dict[str, int] = field(default_factory=dict)
    debts: dict[str, int] = field(default_factory=dict)
    entered_markets: list[str] = field(default_factory=list)
    average_liquidity: int = 0


class InMemoryLedger:
    """Account balances and debts held in process memory.

    Mutations made inside :meth:`atomic` are rolled back if the block raises.
    """

    def __init__(self, accounts: dict[str, AccountState] | None = None) -> None:
        self._accounts: dict[str, AccountState] = accounts or {}
        self.reserves: dict[str, int] = {}
        self.events: list[LiquidationEvent] = []

    def _account(self, account: str) -> AccountState:
        if account not in self._accounts:
            self._accounts[account] = AccountState()
        return self._accounts[account]

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def accounts(self) -> list[str]:
        return list(self._accounts)

    def balance_of(self, account: str, underlying: str) -> int:
        state = self._accounts.get(account)
        return state.balances.get(underlying, 0) if state else 0

    def debt_of(self, account: str, underlying: str) -> int:
        state = self._accounts.get(account)
        return state.debts.get(underlying, 0) if state else 0

    def entered_markets(self, account: str) -> list[str]:
        state = self._accounts.get(account)
        return list(state.entered_markets) if state else []

    def average_liquidity(self, account: str) -> int:
        state = self._accounts.get(account)
        return state.average_liquidity if state else 0

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def enter_market(self, account: str, underlying: str) -> None:
        state = self._account(account)
        if underlying not in state.entered_markets:
            state.entered_markets.append(underlying)

    def set_balance(self, account: str, underlying: str, amount: int) -> None:
        self._account(account).balances[underlying] = amount

    def set_debt(self, account: str, underlying: str, amount: int) -> None:
        self.enter_market(account, underlying)
        self._account(account).debts[underlying] = amount

    def set_average_liquidity(self, account: str, value: int) -> None:
        self._account(account).average_liquidity = value

    def transfer_balance(
        self, underlying: str, src: str, dst: str, amount: int
    ) -> None:
        """Move a deposit balance between accounts."""
        if amount < 0:
            raise ValueError(f"Transfer amount must not be negative: {amount}")
        available = self.balance_of(src, underlying)
        if amount > available:
            raise ValueError(
                f"Insufficient balance of {underlying} in {src}: "
                f"{available} < {amount}"
            )
        self._account(src).balances[underlying] = available - amount
        dst_state = self._account(dst)
        dst_state.balances[underlying] = dst_state.balances.get(underlying, 0) + amount

    def transfer_debt(
        self, underlying: str, src: str, dst: str, amount: int, fee: int = 0
    ) -> None:
        """Move debt from ``src`` to ``dst``; ``dst`` also owes ``fee`` to reserves."""
        if amount < 0 or fee < 0:
            raise ValueError(
                f"Debt transfer must not be negative: {amount}, fee {fee}"
            )
        owed = self.debt_of(src, underlying)
        if amount > owed:
            raise ValueError(
                f"Insufficient debt of {underlying} in {src}: {owed} < {amount}"
            )
        self._account(src).debts[underlying] = owed - amount
        self.enter_market(dst, underlying)
        dst_state = self._account(dst)
        dst_state.debts[underlying] = dst_state.debts.get(underlying, 0) + amount + fee
        if fee:
            self.reserves[underlying] = self.reserves.get(underlying, 0) + fee

    def record(self, event: LiquidationEvent) -> None:
        self.events.append(event)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Roll back every mutation made in the block if it raises."""
        saved = (
            copy.deepcopy(self._accounts),
            dict(self.reserves),
            list(self.events),
        )
        try:
            yield
        except Exception:
            self._accounts, self.reserves, self.events = saved
            logger.debug("Ledger changes rolled back")
            raise


# ---------------------------------------------------------------------------
# Snapshot loading
# ---------------------------------------------------------------------------


def _build_account(raw: dict[str, Any]) -> AccountState:
    balances = {k: int(v) for k, v in (raw.get("balances") or {}).items()}
    debts = {k: int(v) for k, v in (raw.get("debts") or {}).items()}
    entered = list(raw.get("entered_markets") or [])
    # Borrowing always enters the market.
    for underlying in debts:
        if underlying not in entered:
            entered.append(underlying)
    return AccountState(
        balances=balances,
        debts=debts,
        entered_markets=entered,
        average_liquidity=int(raw.get("average_liquidity", 0)),
    )


def load_state(state_path: str | Path) -> InMemoryLedger:
    """Build a ledger from a YAML state snapshot.

    Expected layout::

        accounts:
          "0xabc":
            balances: {"0xweth": 1000000000000000000}
            debts: {"0xusdc": 1500000000}
            entered_markets: ["0xweth"]
            average_liquidity: 0
        reserves: {"0xusdc": 0}
    """
    state_path = Path(state_path)
    if not state_path.exists():
        raise FileNotFoundError(f"State file not found: {state_path}")

    with open(state_path) as f:
        raw = yaml.safe_load(f) or {}

    accounts = {
        address: _build_account(cfg or {})
        for address, cfg in (raw.get("accounts") or {}).items()
    }
    ledger = InMemoryLedger(accounts)
    ledger.reserves = {k: int(v) for k, v in (raw.get("reserves") or {}).items()}

    logger.info("Loaded %d accounts from %s", len(accounts), state_path)
    return ledger
