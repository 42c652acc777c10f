"""
Data models for the shared price state.
"""

from typing import Tuple
from pydantic import BaseModel, ConfigDict, Field


class PriceEntry(BaseModel):
    """Previous and current price of one symbol. 0.0 means no data."""

    model_config = ConfigDict(frozen=True)

    previous: float = Field(default=0.0, ge=0.0)
    current: float = Field(default=0.0, ge=0.0)


class SnapshotEntry(BaseModel):
    """One row of a snapshot."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    previous: float
    current: float


class Snapshot(BaseModel):
    """Point-in-time copy of every tracked price, sorted by symbol."""

    model_config = ConfigDict(frozen=True)

    entries: Tuple[SnapshotEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def symbols(self) -> Tuple[str, ...]:
        return tuple(entry.symbol for entry in self.entries)

    def get(self, symbol: str) -> SnapshotEntry:
        for entry in self.entries:
            if entry.symbol == symbol:
                return entry
        raise KeyError(symbol)
