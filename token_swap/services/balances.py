from __future__ import annotations

import random
from typing import Mapping, Protocol


class BalanceProvider(Protocol):
    def balance_of(self, symbol: str) -> float: ...


class DemoBalanceProvider:
    """Placeholder wallet: random, non-authoritative balances for display.

    Values are drawn once per symbol per instance, so a catalog rebuild with the
    same provider keeps showing the same balance for a token.
    """

    def __init__(self, seed: int | None = None, upper: float = 1000.0) -> None:
        self._rng = random.Random(seed)
        self.upper = upper
        self._drawn: dict[str, float] = {}

    def balance_of(self, symbol: str) -> float:
        if symbol not in self._drawn:
            self._drawn[symbol] = self._rng.random() * self.upper
        return self._drawn[symbol]


class StaticBalanceProvider:
    def __init__(self, balances: Mapping[str, float]) -> None:
        self._balances = dict(balances)

    def balance_of(self, symbol: str) -> float:
        return float(self._balances.get(symbol, 0.0))
