"""
Shared price state module.

Holds the previous and current price of every watched symbol behind a lock
and hands out immutable, symbol-ordered snapshots for rendering.
"""

from .price_store import PriceStore
from .models import PriceEntry, Snapshot, SnapshotEntry

__all__ = ["PriceStore", "PriceEntry", "Snapshot", "SnapshotEntry"]
