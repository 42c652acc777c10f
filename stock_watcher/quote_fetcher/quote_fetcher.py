"""
Quote fetcher implementation: one bounded lookup and price parse per symbol.
"""

import logging
import re
from typing import Optional

from .models import Quote
from .sources import QuoteSource, HttpQuoteSource, YFinanceQuoteSource
from ..config.models import WatcherConfig
from ..exceptions import FetchError


logger = logging.getLogger(__name__)

# Only the integer part and the first two decimals are authoritative
PRICE_PATTERN = re.compile(r"^\d+\.\d{2}")


def parse_price(raw: str, symbol: Optional[str] = None) -> float:
    """
    Extract a two-decimal price from a raw price field.

    Extra precision and trailing text are dropped, so ``"123.4567 USD"``
    becomes ``123.45``.

    Args:
        raw: Price field as delivered by the quote source
        symbol: Symbol the field belongs to, for error reporting

    Returns:
        Non-negative price truncated to two decimal places

    Raises:
        FetchError: If the field does not start with ``digits.dd``
    """
    match = PRICE_PATTERN.match(str(raw).strip())
    if match is None:
        raise FetchError(f"Unparseable price {raw!r}", symbol=symbol)
    return float(match.group(0))


def create_quote_source(config: WatcherConfig) -> QuoteSource:
    """Build the quote source selected in the configuration."""
    if config.source == "http":
        return HttpQuoteSource(config.endpoint_template)
    return YFinanceQuoteSource()


class QuoteFetcher:
    """Fetches and parses a quote for one symbol within a time budget."""

    def __init__(self, source: QuoteSource, timeout: float = 10.0):
        """
        Initialize the fetcher.

        Args:
            source: Quote source performing the remote lookup
            timeout: Seconds allowed for a single lookup
        """
        self.source = source
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: WatcherConfig) -> "QuoteFetcher":
        return cls(create_quote_source(config), timeout=config.timeout_seconds)

    def fetch(self, symbol: str) -> Quote:
        """
        Fetch the latest price for a symbol.

        Args:
            symbol: Ticker symbol to look up

        Returns:
            Parsed quote for the requested symbol

        Raises:
            FetchError: On network failure, timeout, malformed payload,
                missing price field or unparseable price
        """
        raw = self.source.get_raw_quote(symbol, self.timeout)
        if raw.symbol != symbol:
            logger.debug(f"Quote source echoed {raw.symbol!r} for requested symbol {symbol!r}")

        price = parse_price(raw.price, symbol=symbol)
        logger.debug(f"Fetched {symbol} via {self.source.name}: {raw.price!r} -> {price:.2f}")
        return Quote(symbol=symbol, price=price, raw_price=raw.price)
