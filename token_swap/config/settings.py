import os
from functools import lru_cache

from pydantic import BaseModel, Field

DEFAULT_PRICES_API_URL = "https://interview.switcheo.com/prices.json"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    PRICES_API_URL: str = DEFAULT_PRICES_API_URL
    PRICES_FETCH_TIMEOUT_SEC: float = Field(default=5.0, gt=0)
    PREFERRED_FROM_SYMBOL: str = "ETH"
    PREFERRED_TO_SYMBOL: str = "USDC"
    SWAP_SIMULATED_DELAY_SEC: float = Field(default=2.0, ge=0)
    DEMO_BALANCE_SEED: int | None = None
    FETCH_PRICES_ON_STARTUP: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        raw: dict = {
            "PRICES_API_URL": os.getenv("PRICES_API_URL") or DEFAULT_PRICES_API_URL,
            "PREFERRED_FROM_SYMBOL": os.getenv("PREFERRED_FROM_SYMBOL", "ETH").strip(),
            "PREFERRED_TO_SYMBOL": os.getenv("PREFERRED_TO_SYMBOL", "USDC").strip(),
            "FETCH_PRICES_ON_STARTUP": _env_bool("FETCH_PRICES_ON_STARTUP", True),
        }
        # pydantic coerces the numeric strings and rejects garbage
        for key in ("PRICES_FETCH_TIMEOUT_SEC", "SWAP_SIMULATED_DELAY_SEC", "DEMO_BALANCE_SEED"):
            value = os.getenv(key)
            if value is not None and value.strip():
                raw[key] = value.strip()
        return cls.model_validate(raw)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
