from pydantic import BaseModel, Field, computed_field

TOKEN_ICON_PATH = "/images/tokens/{symbol}.svg"


class PricedToken(BaseModel):
    symbol: str
    name: str
    price: float | None = None
    balance: float = Field(default=0.0, ge=0)

    @computed_field
    @property
    def icon_url(self) -> str:
        return TOKEN_ICON_PATH.format(symbol=self.symbol)


class CatalogStatus(BaseModel):
    state: str
    token_count: int
    last_error: str | None = None
    last_loaded_at: int | None = None
