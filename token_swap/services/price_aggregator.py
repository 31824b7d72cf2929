from __future__ import annotations

from datetime import datetime
from typing import Iterable, Mapping

from token_swap.schemas.price import PriceObservation
from token_swap.schemas.token import PricedToken
from token_swap.services.balances import BalanceProvider


def latest_prices(observations: Iterable[PriceObservation]) -> dict[str, float]:
    """Latest price per currency; on equal dates the last seen observation wins."""
    latest: dict[str, tuple[datetime, float]] = {}
    for obs in observations:
        current = latest.get(obs.currency)
        if current is None or obs.date >= current[0]:
            latest[obs.currency] = (obs.date, obs.price)
    return {symbol: price for symbol, (_, price) in latest.items()}


def _market_value(token: PricedToken) -> float:
    return (token.price or 0.0) * token.balance


class PriceAggregator:
    def __init__(
        self,
        *,
        token_names: Mapping[str, str],
        balance_provider: BalanceProvider,
    ) -> None:
        self.token_names = token_names
        self.balance_provider = balance_provider

    def aggregate(self, observations: Iterable[PriceObservation]) -> dict[str, PricedToken]:
        tokens = [
            PricedToken(
                symbol=symbol,
                name=self.token_names.get(symbol) or symbol,
                price=price,
                balance=self.balance_provider.balance_of(symbol),
            )
            for symbol, price in latest_prices(observations).items()
        ]
        # display order only
        tokens.sort(key=_market_value, reverse=True)
        return {token.symbol: token for token in tokens}
