from __future__ import annotations

from typing import Any, List, Optional

import requests
from pydantic import TypeAdapter, ValidationError

from token_swap.errors import FetchError
from token_swap.schemas.price import PriceObservation

_OBSERVATIONS = TypeAdapter(List[PriceObservation])


class PriceFeedClient:
    """Fetches the raw price time-series from the public prices endpoint."""

    def __init__(
        self,
        url: str,
        timeout: float = 5,
        session: Optional[Any] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.session = session or requests

    def fetch_observations(self) -> list[PriceObservation]:
        try:
            response = self.session.get(
                self.url,
                headers={"accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise FetchError(f"price feed request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError("price feed body is not valid JSON") from exc

        if not isinstance(payload, list):
            raise FetchError("price feed body must be a JSON array")

        try:
            return _OBSERVATIONS.validate_python(payload)
        except ValidationError as exc:
            raise FetchError(
                f"price feed body has {exc.error_count()} invalid observation field(s)"
            ) from exc
