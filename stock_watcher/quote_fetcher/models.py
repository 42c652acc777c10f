"""
Data models for quote lookups.
"""

from pydantic import BaseModel, ConfigDict, Field


class RawQuote(BaseModel):
    """Symbol echo and unparsed price field as returned by a quote source."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    price: str


class Quote(BaseModel):
    """A successfully parsed quote."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    price: float = Field(ge=0.0)
    raw_price: str
