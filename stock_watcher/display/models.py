"""
Data models for rendering snapshots.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict


class DisplayState(Enum):
    """Direction of the last price change for a row."""

    FLAT = "flat"
    UP = "up"
    DOWN = "down"


class Style(Enum):
    """Colour category of a row on the display surface."""

    DEFAULT = "default"
    POSITIVE = "positive"
    NEGATIVE = "negative"


class DisplayRow(BaseModel):
    """A formatted table row ready to be written to a surface."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    state: DisplayState
    style: Style
    text: str
    ratio: Optional[float] = None
