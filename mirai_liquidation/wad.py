"""1e18 fixed-point helpers."""
from __future__ import annotations

from decimal import Decimal

WAD = 10**18
MAX_UINT = 2**256 - 1


def to_wad(value: int | float | str | Decimal) -> int:
    """Convert a human-readable decimal (e.g. ``0.75``) to 1e18 fixed point.

    Floats go through ``str`` so ``0.1`` becomes exactly ``10**17``.
    """
    if isinstance(value, float):
        value = str(value)
    return int(Decimal(value) * WAD)


def from_wad(value: int) -> float:
    """Convert a 1e18 fixed-point integer to float, for display only."""
    return value / WAD


def decimals_scaler(decimals: int) -> int:
    """Factor that normalises a native amount to 18 decimals."""
    if not 0 <= decimals <= 18:
        raise ValueError(f"Unsupported token decimals: {decimals}")
    return 10 ** (18 - decimals)


def value_of(amount: int, decimals: int, price: int) -> int:
    """Quote value (1e18) of ``amount`` native units at ``price``."""
    return amount * decimals_scaler(decimals) * price // WAD
