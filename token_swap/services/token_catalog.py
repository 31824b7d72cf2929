from __future__ import annotations

import threading
import time
from types import MappingProxyType
from typing import Mapping

from token_swap.errors import FetchError
from token_swap.schemas.token import CatalogStatus, PricedToken
from token_swap.services.price_aggregator import PriceAggregator


class TokenCatalog:
    """Current priced-token catalog, rebuilt wholesale on every successful fetch."""

    def __init__(self, *, feed_client, aggregator: PriceAggregator) -> None:
        self.feed_client = feed_client
        self.aggregator = aggregator
        self._lock = threading.Lock()
        self._tokens: dict[str, PricedToken] = {}
        self.state = "IDLE"
        self.last_error: str | None = None
        self.last_loaded_at: int | None = None
        self.fetch_attempts = 0
        self.fetch_failures = 0
        self.last_observation_count = 0

    @property
    def loaded(self) -> bool:
        return self.last_loaded_at is not None

    def tokens(self) -> Mapping[str, PricedToken]:
        return MappingProxyType(self._tokens)

    def get(self, symbol: str | None) -> PricedToken | None:
        if symbol is None:
            return None
        return self._tokens.get(symbol)

    def replace(self, tokens: dict[str, PricedToken], now: int | None = None) -> None:
        with self._lock:
            self._tokens = tokens
            self.state = "READY"
            self.last_error = None
            self.last_loaded_at = int(time.time()) if now is None else now

    def _mark_failed(self, error: str) -> None:
        with self._lock:
            self.fetch_failures += 1
            self.last_error = error
            self.state = "ERROR"

    def refresh(self) -> dict[str, PricedToken]:
        """Fetch and aggregate; on any failure the previous catalog is kept."""
        with self._lock:
            self.state = "LOADING"
            self.fetch_attempts += 1

        try:
            observations = self.feed_client.fetch_observations()
        except FetchError as exc:
            self._mark_failed(str(exc))
            print(f"[PRICES][fetch_error] error={exc}", flush=True)
            raise
        except Exception as exc:
            self._mark_failed(f"price feed client failed: {exc}")
            print(f"[PRICES][fetch_error] error={exc}", flush=True)
            raise

        try:
            tokens = self.aggregator.aggregate(observations)
        except Exception as exc:
            self._mark_failed(f"aggregation failed: {exc}")
            print(f"[PRICES][aggregate_error] error={exc}", flush=True)
            raise
        self.last_observation_count = len(observations)
        self.replace(tokens)
        print(
            f"[PRICES][fetch_ok] observations={len(observations)} tokens={len(tokens)}",
            flush=True,
        )
        return tokens

    def status(self) -> CatalogStatus:
        return CatalogStatus(
            state=self.state,
            token_count=len(self._tokens),
            last_error=self.last_error,
            last_loaded_at=self.last_loaded_at,
        )

    def metrics(self) -> dict:
        return {
            "catalog_state": self.state,
            "cached_tokens": len(self._tokens),
            "priced_tokens": sum(1 for t in self._tokens.values() if t.price is not None),
            "fetch_attempts": self.fetch_attempts,
            "fetch_failures": self.fetch_failures,
            "last_observation_count": self.last_observation_count,
            "last_loaded_at": self.last_loaded_at,
            "last_error": self.last_error,
        }
