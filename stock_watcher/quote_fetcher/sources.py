"""
Quote sources: the remote lookups a QuoteFetcher delegates to.
"""

import json
import logging
import math
import time
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, Optional

import pandas as pd
import requests

from .models import RawQuote
from ..config.models import DEFAULT_ENDPOINT_TEMPLATE
from ..exceptions import FetchError


logger = logging.getLogger(__name__)

# Bodies are read a byte at a time so a trickling server overshoots the
# deadline by at most one read timeout.
READ_CHUNK_SIZE = 1


class QuoteSource(ABC):
    """A single-request-per-symbol quote lookup."""

    name = "abstract"

    @abstractmethod
    def get_raw_quote(self, symbol: str, timeout: float) -> RawQuote:
        """
        Look up one symbol.

        Raises:
            FetchError: On any transport, decoding or payload problem
        """


class HttpQuoteSource(QuoteSource):
    """Fetches JSON quotes from an HTTP endpoint, one GET per symbol."""

    name = "http"

    def __init__(self, endpoint_template: str = DEFAULT_ENDPOINT_TEMPLATE):
        self.endpoint_template = endpoint_template

    def build_url(self, symbol: str) -> str:
        return self.endpoint_template.format(symbol=symbol)

    def get_raw_quote(self, symbol: str, timeout: float) -> RawQuote:
        """
        GET the quote for one symbol, bounded by a wall-clock deadline.

        The ``timeout`` passed to requests only limits each socket wait, so the
        body is streamed and the elapsed time checked after every read.
        """
        url = self.build_url(symbol)
        deadline = time.monotonic() + timeout
        try:
            response = requests.get(url, timeout=timeout, stream=True)
            try:
                response.raise_for_status()
                body = self._read_body(response, symbol, timeout, deadline)
            finally:
                response.close()
            payload = json.loads(body)
        except requests.RequestException as e:
            raise FetchError(f"Request for {symbol} failed: {e}", symbol=symbol) from e
        except ValueError as e:
            raise FetchError(f"Response for {symbol} is not valid JSON", symbol=symbol) from e

        fields = self._extract_fields(payload)
        if fields is None:
            raise FetchError(f"Response for {symbol} has no quote fields", symbol=symbol)

        price = fields.get("price")
        if price is None:
            raise FetchError(f"Response for {symbol} has no price field", symbol=symbol)

        return RawQuote(symbol=str(fields.get("symbol") or symbol), price=str(price))

    @staticmethod
    def _read_body(response: requests.Response, symbol: str, timeout: float, deadline: float) -> bytes:
        chunks = []
        for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
            if time.monotonic() > deadline:
                raise FetchError(
                    f"Response for {symbol} did not complete within {timeout:g}s", symbol=symbol
                )
            chunks.append(chunk)
        return b"".join(chunks)

    @staticmethod
    def _extract_fields(payload: Any) -> Optional[Dict[str, Any]]:
        """
        Find the quote fields in a decoded payload.

        Accepts the nested webservice layout
        ``{"list": {"resources": [{"resource": {"fields": {...}}}]}}`` as well
        as a flat ``{"symbol": ..., "price": ...}`` object.
        """
        if not isinstance(payload, dict):
            return None

        listing = payload.get("list")
        if isinstance(listing, dict):
            resources = listing.get("resources")
            if not isinstance(resources, list) or not resources:
                return None
            first = resources[0]
            if not isinstance(first, dict):
                return None
            fields = (first.get("resource") or {}).get("fields")
            return fields if isinstance(fields, dict) else None

        if "price" in payload:
            return payload
        return None


class YFinanceQuoteSource(QuoteSource):
    """Reads the latest close for a symbol through yfinance."""

    name = "yfinance"

    def __init__(self):
        self._yf = None

    def _get_yfinance(self):
        """Lazy import of yfinance to avoid SSL issues during package setup."""
        if self._yf is None:
            import yfinance as yf
            self._yf = yf
        return self._yf

    def get_raw_quote(self, symbol: str, timeout: float) -> RawQuote:
        try:
            yf = self._get_yfinance()
            data = yf.Ticker(symbol).history(period="1d", timeout=timeout)
        except Exception as e:
            # yfinance wraps requests, curl and its own errors without a common base
            raise FetchError(f"yfinance lookup for {symbol} failed: {e}", symbol=symbol) from e

        if data is None or data.empty or "Close" not in data.columns:
            raise FetchError(f"No current price data available for {symbol}", symbol=symbol)

        close = data["Close"].iloc[-1]
        if pd.isna(close) or not math.isfinite(float(close)):
            raise FetchError(f"Latest close for {symbol} is missing", symbol=symbol)

        return RawQuote(symbol=symbol, price=format_close(close))


def format_close(close: float) -> str:
    """
    Render a close price as decimal text without rounding it.

    The shortest repr of the float is kept, padded to at least two decimals so
    the price parser always finds its cents.

    Args:
        close: Finite closing price

    Returns:
        Plain decimal string such as ``"123.4499999"`` or ``"150.00"``
    """
    value = Decimal(repr(float(close)))
    if value.as_tuple().exponent > -2:
        value = value.quantize(Decimal("0.01"))
    return f"{value:f}"
