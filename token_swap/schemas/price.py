from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PriceObservation(BaseModel):
    model_config = ConfigDict(frozen=True)

    currency: str
    date: datetime
    price: float = Field(ge=0)

    @field_validator("date")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
