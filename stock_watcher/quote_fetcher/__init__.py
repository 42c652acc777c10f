"""
Quote fetching module.

Performs one bounded-time lookup per symbol against a quote source and parses
the price field down to two decimal places.
"""

from .quote_fetcher import QuoteFetcher, parse_price, create_quote_source
from .sources import QuoteSource, HttpQuoteSource, YFinanceQuoteSource
from .models import Quote, RawQuote

__all__ = [
    "QuoteFetcher",
    "parse_price",
    "create_quote_source",
    "QuoteSource",
    "HttpQuoteSource",
    "YFinanceQuoteSource",
    "Quote",
    "RawQuote",
]
