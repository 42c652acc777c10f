"""
Error classification for the stock watcher.

Only ConfigurationError and DisplaySurfaceError are expected to reach the
process boundary. FetchError is absorbed per symbol inside a poll cycle, and
InvariantViolation signals a construction bug rather than a runtime condition.
"""

from typing import Optional, Dict, Any


class StockWatcherError(Exception):
    """Base class for all stock watcher errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(StockWatcherError):
    """Invalid or missing startup parameters."""


class FetchError(StockWatcherError):
    """A single quote lookup failed (transport, timeout, payload or parse)."""

    def __init__(self, message: str, symbol: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.symbol = symbol


class DisplaySurfaceError(StockWatcherError):
    """The terminal display could not be initialized."""


class InvariantViolation(StockWatcherError):
    """Internal contract broken, e.g. updating a symbol that was never registered."""

    def __init__(self, message: str, symbol: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.symbol = symbol
