from enum import Enum

from pydantic import BaseModel


class EditedField(str, Enum):
    FROM = "from"
    TO = "to"


class ConversionState(BaseModel):
    from_symbol: str | None = None
    to_symbol: str | None = None
    from_amount: str = ""
    to_amount: str = ""
    edited_field: EditedField = EditedField.FROM
    slippage_pct: float = 0.5


class ConversionQuote(BaseModel):
    from_symbol: str
    to_symbol: str
    rate: float
    rate_text: str
    from_price_text: str
    to_price_text: str
    from_usd_value: str | None = None
    to_usd_value: str | None = None
    network_fee_text: str
    slippage_pct: float


class AmountEdit(BaseModel):
    amount: str


class TokenSelect(BaseModel):
    symbol: str


class SlippageUpdate(BaseModel):
    slippage_pct: float


class SwapReceipt(BaseModel):
    from_symbol: str
    to_symbol: str
    from_amount: str
    to_amount: str
    slippage_pct: float
    executed_at: int
