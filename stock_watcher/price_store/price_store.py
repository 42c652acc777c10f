"""
Thread-safe store of previous/current prices keyed by symbol.
"""

import logging
import threading
from typing import Dict, List

from .models import PriceEntry, Snapshot, SnapshotEntry
from ..exceptions import InvariantViolation


logger = logging.getLogger(__name__)


class PriceStore:
    """
    Mapping of symbol to PriceEntry guarded by a single lock.

    The raw mapping never leaves the store. Writers replace an entry in one
    read-modify-write under the lock, and readers receive immutable snapshots,
    so nobody can observe a half-written entry.
    """

    def __init__(self):
        self._entries: Dict[str, PriceEntry] = {}
        self._lock = threading.Lock()

    def register(self, symbol: str) -> None:
        """Add a symbol with a zero price pair. No-op if already present."""
        with self._lock:
            if symbol not in self._entries:
                self._entries[symbol] = PriceEntry()
                logger.debug(f"Registered symbol {symbol}")

    def update(self, symbol: str, new_price: float) -> PriceEntry:
        """
        Shift the current price to previous and store the new current price.

        Args:
            symbol: A registered symbol
            new_price: Latest price, or 0.0 when the lookup failed

        Returns:
            The entry now stored for the symbol

        Raises:
            InvariantViolation: If the symbol was never registered
        """
        with self._lock:
            entry = self._entries.get(symbol)
            if entry is None:
                raise InvariantViolation(
                    f"Cannot update unregistered symbol {symbol!r}", symbol=symbol
                )
            updated = PriceEntry(previous=entry.current, current=new_price)
            self._entries[symbol] = updated
        return updated

    def get(self, symbol: str) -> PriceEntry:
        """Return the entry for a registered symbol."""
        with self._lock:
            entry = self._entries.get(symbol)
        if entry is None:
            raise InvariantViolation(f"Unknown symbol {symbol!r}", symbol=symbol)
        return entry

    def symbols(self) -> List[str]:
        """Registered symbols in ascending order."""
        with self._lock:
            return sorted(self._entries)

    def snapshot(self) -> Snapshot:
        """Copy all entries, ordered by symbol, at a single instant."""
        with self._lock:
            items = list(self._entries.items())
        # PriceEntry is frozen, so the copy cannot change once the lock is released
        return Snapshot(entries=tuple(
            SnapshotEntry(symbol=symbol, previous=entry.previous, current=entry.current)
            for symbol, entry in sorted(items, key=lambda item: item[0])
        ))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, symbol: object) -> bool:
        with self._lock:
            return symbol in self._entries
