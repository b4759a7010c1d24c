"""Account ledger protocol — balances, debts and markets per account."""
from contextlib import AbstractContextManager
from typing import Protocol

from ..models import LiquidationEvent


class AccountLedger(Protocol):
    """Abstract interface for account balance and debt bookkeeping.

    Amounts are in native units of the underlying.
    """

    def balance_of(self, account: str, underlying: str) -> int: ...

    def debt_of(self, account: str, underlying: str) -> int: ...

    def entered_markets(self, account: str) -> list[str]: ...

    def average_liquidity(self, account: str) -> int: ...

    def enter_market(self, account: str, underlying: str) -> None: ...

    def transfer_balance(
        self, underlying: str, src: str, dst: str, amount: int
    ) -> None: ...

    def transfer_debt(
        self, underlying: str, src: str, dst: str, amount: int, fee: int = 0
    ) -> None: ...

    def record(self, event: LiquidationEvent) -> None: ...

    def atomic(self) -> AbstractContextManager[None]: ...
