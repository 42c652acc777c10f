"""
Stock Watcher - a terminal ticker for a set of stock symbols.

This package polls a quote source for every configured symbol at a fixed
interval, keeps the previous and current price of each symbol in a shared
store, and redraws a terminal table showing price and direction of change.
"""

__version__ = "0.1.0"
__author__ = "Stock Watcher Team"

# Lazy imports to avoid dependency issues during package setup
__all__ = [
    "ConfigurationManager",
    "WatcherConfig",
    "PriceStore",
    "Snapshot",
    "QuoteFetcher",
    "PollCycle",
    "Scheduler",
    "StopSignal",
    "Renderer",
]

def __getattr__(name):
    """Lazy import for package components."""
    if name == "ConfigurationManager":
        from .config import ConfigurationManager
        return ConfigurationManager
    elif name == "WatcherConfig":
        from .config import WatcherConfig
        return WatcherConfig
    elif name == "PriceStore":
        from .price_store import PriceStore
        return PriceStore
    elif name == "Snapshot":
        from .price_store import Snapshot
        return Snapshot
    elif name == "QuoteFetcher":
        from .quote_fetcher import QuoteFetcher
        return QuoteFetcher
    elif name == "PollCycle":
        from .poll_cycle import PollCycle
        return PollCycle
    elif name == "Scheduler":
        from .scheduler import Scheduler
        return Scheduler
    elif name == "StopSignal":
        from .scheduler import StopSignal
        return StopSignal
    elif name == "Renderer":
        from .display import Renderer
        return Renderer
    else:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
