"""
Configuration models using Pydantic for validation.
"""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Literal


DEFAULT_ENDPOINT_TEMPLATE = (
    "http://finance.yahoo.com/webservice/v1/symbols/{symbol}/quote?format=json"
)


class DisplayConfig(BaseModel):
    """Glyphs used by the renderer for each direction of change."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    up_glyph: str = Field(default="↑", min_length=1, description="Indicator for a rising price")
    down_glyph: str = Field(default="↓", min_length=1, description="Indicator for a falling price")
    flat_glyph: str = Field(default="-", min_length=1, description="Placeholder when there is no change")


class WatcherConfig(BaseModel):
    """Configuration model for a stock watcher run."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid"
    )

    symbols: List[str] = Field(
        min_length=1,
        description="Ticker symbols to watch (case-sensitive)"
    )
    interval_seconds: int = Field(
        default=1,
        ge=1,
        description="Seconds to wait between poll cycles"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        description="Upper bound for a single quote lookup"
    )
    source: Literal["yfinance", "http"] = Field(
        default="yfinance",
        description="Quote source used for lookups"
    )
    endpoint_template: str = Field(
        default=DEFAULT_ENDPOINT_TEMPLATE,
        description="URL template for the http source, must contain {symbol}"
    )
    display: DisplayConfig = Field(default_factory=DisplayConfig)

    @field_validator("symbols")
    @classmethod
    def _check_symbols(cls, value: List[str]) -> List[str]:
        cleaned = []
        for symbol in value:
            symbol = symbol.strip()
            if not symbol:
                raise ValueError("symbols must not contain empty entries")
            if symbol not in cleaned:
                cleaned.append(symbol)
        return cleaned

    @field_validator("endpoint_template")
    @classmethod
    def _check_endpoint_template(cls, value: str) -> str:
        if "{symbol}" not in value:
            raise ValueError("endpoint_template must contain a {symbol} placeholder")
        return value
