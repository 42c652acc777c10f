"""
Unit tests for quote fetching and price parsing.
"""

import json
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pandas as pd
import pytest
import requests
from unittest.mock import Mock, patch

from stock_watcher.config.models import WatcherConfig
from stock_watcher.exceptions import FetchError
from stock_watcher.quote_fetcher import (
    QuoteFetcher,
    HttpQuoteSource,
    YFinanceQuoteSource,
    RawQuote,
    create_quote_source,
    parse_price,
)
from stock_watcher.quote_fetcher.sources import format_close


def webservice_payload(symbol: str, price: str) -> dict:
    """Nested payload in the quote webservice layout."""
    return {
        "list": {
            "meta": {"type": "resource-list", "start": 0, "count": 1},
            "resources": [
                {
                    "resource": {
                        "classname": "Quote",
                        "fields": {
                            "name": "Apple Inc.",
                            "price": price,
                            "symbol": symbol,
                            "type": "equity",
                            "volume": "1000",
                        },
                    }
                }
            ],
        }
    }


class TestParsePrice:
    """Test price extraction policy."""

    def test_truncates_to_two_decimals(self):
        assert parse_price("123.4567 USD") == 123.45

    def test_does_not_round(self):
        assert parse_price("9.999") == 9.99

    def test_exact_two_decimals(self):
        assert parse_price("100.00") == 100.0

    def test_surrounding_whitespace_ignored(self):
        assert parse_price("  42.10  ") == 42.10

    @pytest.mark.parametrize("raw", ["N/A", "", "12", "12.3", "-5.00", "$12.34", "abc.12"])
    def test_unparseable_raises_fetch_error(self, raw):
        with pytest.raises(FetchError):
            parse_price(raw, symbol="AAPL")

    def test_error_carries_symbol(self):
        with pytest.raises(FetchError) as exc_info:
            parse_price("N/A", symbol="AAPL")
        assert exc_info.value.symbol == "AAPL"


class TestQuoteFetcher:
    """Test QuoteFetcher class."""

    def test_fetch_returns_parsed_quote(self):
        source = Mock()
        source.name = "mock"
        source.get_raw_quote.return_value = RawQuote(symbol="AAPL", price="189.1299")
        fetcher = QuoteFetcher(source, timeout=3.0)

        quote = fetcher.fetch("AAPL")

        assert quote.symbol == "AAPL"
        assert quote.price == 189.12
        assert quote.raw_price == "189.1299"
        source.get_raw_quote.assert_called_once_with("AAPL", 3.0)

    def test_fetch_keys_quote_by_requested_symbol(self):
        source = Mock()
        source.name = "mock"
        source.get_raw_quote.return_value = RawQuote(symbol="BRK-B", price="400.00")

        quote = QuoteFetcher(source).fetch("BRK.B")

        assert quote.symbol == "BRK.B"

    def test_fetch_propagates_source_errors(self):
        source = Mock()
        source.name = "mock"
        source.get_raw_quote.side_effect = FetchError("boom", symbol="AAPL")

        with pytest.raises(FetchError):
            QuoteFetcher(source).fetch("AAPL")

    def test_fetch_bad_price_raises_fetch_error(self):
        source = Mock()
        source.name = "mock"
        source.get_raw_quote.return_value = RawQuote(symbol="AAPL", price="N/A")

        with pytest.raises(FetchError):
            QuoteFetcher(source).fetch("AAPL")

    def test_from_config_uses_timeout_and_source(self):
        config = WatcherConfig(
            symbols=["AAPL"],
            timeout_seconds=4.0,
            source="http",
            endpoint_template="http://quotes.test/{symbol}",
        )

        fetcher = QuoteFetcher.from_config(config)

        assert fetcher.timeout == 4.0
        assert isinstance(fetcher.source, HttpQuoteSource)
        assert fetcher.source.build_url("AAPL") == "http://quotes.test/AAPL"

    def test_create_quote_source_default_is_yfinance(self):
        assert isinstance(create_quote_source(WatcherConfig(symbols=["AAPL"])), YFinanceQuoteSource)


class TestHttpQuoteSource:
    """Test HttpQuoteSource against a mocked requests.get."""

    @pytest.fixture
    def source(self):
        return HttpQuoteSource("http://quotes.test/{symbol}/quote")

    def _response(self, payload=None, body=None):
        response = Mock()
        response.raise_for_status.return_value = None
        if body is None:
            body = json.dumps(payload).encode()
        response.iter_content.return_value = [body[i:i + 1] for i in range(len(body))]
        return response

    def test_nested_payload(self, source):
        with patch("stock_watcher.quote_fetcher.sources.requests.get") as mock_get:
            mock_get.return_value = self._response(webservice_payload("AAPL", "123.4567"))

            raw = source.get_raw_quote("AAPL", 10.0)

        assert raw == RawQuote(symbol="AAPL", price="123.4567")
        mock_get.assert_called_once_with("http://quotes.test/AAPL/quote", timeout=10.0, stream=True)
        mock_get.return_value.close.assert_called_once()

    def test_flat_payload(self, source):
        with patch("stock_watcher.quote_fetcher.sources.requests.get") as mock_get:
            mock_get.return_value = self._response({"symbol": "MSFT", "price": 402.5})

            raw = source.get_raw_quote("MSFT", 5.0)

        assert raw == RawQuote(symbol="MSFT", price="402.5")

    def test_transport_error(self, source):
        with patch("stock_watcher.quote_fetcher.sources.requests.get") as mock_get:
            mock_get.side_effect = requests.ConnectionError("unreachable")

            with pytest.raises(FetchError) as exc_info:
                source.get_raw_quote("AAPL", 10.0)

        assert exc_info.value.symbol == "AAPL"

    def test_timeout(self, source):
        with patch("stock_watcher.quote_fetcher.sources.requests.get") as mock_get:
            mock_get.side_effect = requests.Timeout("slow")

            with pytest.raises(FetchError):
                source.get_raw_quote("AAPL", 0.1)

    def test_http_error_status(self, source):
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError("404")
        with patch("stock_watcher.quote_fetcher.sources.requests.get", return_value=response):
            with pytest.raises(FetchError):
                source.get_raw_quote("AAPL", 10.0)

        response.close.assert_called_once()

    def test_malformed_json(self, source):
        with patch("stock_watcher.quote_fetcher.sources.requests.get") as mock_get:
            mock_get.return_value = self._response(body=b"<html>not json</html>")

            with pytest.raises(FetchError):
                source.get_raw_quote("AAPL", 10.0)

    @pytest.mark.parametrize("payload", [
        {"list": {"resources": []}},
        {"list": {"resources": [{"resource": {}}]}},
        {"symbol": "AAPL"},
        ["not", "an", "object"],
    ])
    def test_missing_fields(self, source, payload):
        with patch("stock_watcher.quote_fetcher.sources.requests.get") as mock_get:
            mock_get.return_value = self._response(payload)

            with pytest.raises(FetchError):
                source.get_raw_quote("AAPL", 10.0)

    def test_missing_price_in_nested_fields(self, source):
        payload = webservice_payload("AAPL", "1.00")
        del payload["list"]["resources"][0]["resource"]["fields"]["price"]
        with patch("stock_watcher.quote_fetcher.sources.requests.get") as mock_get:
            mock_get.return_value = self._response(payload)

            with pytest.raises(FetchError):
                source.get_raw_quote("AAPL", 10.0)


QUOTE_BODY = json.dumps({"symbol": "AAPL", "price": "123.45"}).encode()


class QuoteHandler(BaseHTTPRequestHandler):
    """Serves QUOTE_BODY, pausing ``byte_delay`` seconds between bytes."""

    byte_delay = 0.0

    def do_GET(self):
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(QUOTE_BODY)))
        self.end_headers()
        try:
            for i in range(len(QUOTE_BODY)):
                self.wfile.write(QUOTE_BODY[i:i + 1])
                self.wfile.flush()
                time.sleep(self.byte_delay)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, format, *args):
        pass


@pytest.fixture
def quote_server():
    """Start a local quote server; yields a function taking the per-byte delay."""
    servers = []

    def start(byte_delay):
        handler = type("DelayedQuoteHandler", (QuoteHandler,), {"byte_delay": byte_delay})
        server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
        server.daemon_threads = True
        threading.Thread(target=server.serve_forever, daemon=True).start()
        servers.append(server)
        return f"http://127.0.0.1:{server.server_address[1]}/{{symbol}}"

    yield start
    for server in servers:
        server.shutdown()
        server.server_close()


class TestHttpQuoteSourceDeadline:
    """Test HttpQuoteSource against a real local server."""

    def test_prompt_server(self, quote_server):
        source = HttpQuoteSource(quote_server(0.0))

        raw = source.get_raw_quote("AAPL", 5.0)

        assert raw == RawQuote(symbol="AAPL", price="123.45")

    def test_trickling_body_is_cut_off_at_timeout(self, quote_server):
        """Each byte arrives well inside the read timeout, but the whole body does not."""
        source = HttpQuoteSource(quote_server(0.1))

        started = time.monotonic()
        with pytest.raises(FetchError) as exc_info:
            source.get_raw_quote("AAPL", 0.5)
        elapsed = time.monotonic() - started

        assert elapsed < 1.5
        assert exc_info.value.symbol == "AAPL"
        assert "did not complete" in str(exc_info.value)


class TestYFinanceQuoteSource:
    """Test YFinanceQuoteSource with a mocked yfinance module."""

    def _source_with_history(self, history):
        mock_yf = Mock()
        mock_stock = Mock()
        if isinstance(history, Exception):
            mock_stock.history.side_effect = history
        else:
            mock_stock.history.return_value = history
        mock_yf.Ticker.return_value = mock_stock

        source = YFinanceQuoteSource()
        source._get_yfinance = Mock(return_value=mock_yf)
        return source, mock_yf, mock_stock

    def test_latest_close(self):
        history = pd.DataFrame(
            {"Close": [150.0, 151.256789]},
            index=pd.to_datetime(["2024-01-02", "2024-01-03"]),
        )
        source, mock_yf, mock_stock = self._source_with_history(history)

        raw = source.get_raw_quote("AAPL", 7.0)

        assert raw.symbol == "AAPL"
        assert raw.price == "151.256789"
        assert parse_price(raw.price) == 151.25
        mock_yf.Ticker.assert_called_once_with("AAPL")
        mock_stock.history.assert_called_once_with(period="1d", timeout=7.0)

    def test_empty_history(self):
        source, _, _ = self._source_with_history(pd.DataFrame())

        with pytest.raises(FetchError):
            source.get_raw_quote("AAPL", 10.0)

    def test_missing_close(self):
        history = pd.DataFrame({"Close": [float("nan")]}, index=pd.to_datetime(["2024-01-02"]))
        source, _, _ = self._source_with_history(history)

        with pytest.raises(FetchError):
            source.get_raw_quote("AAPL", 10.0)

    def test_lookup_exception(self):
        source, _, _ = self._source_with_history(RuntimeError("rate limited"))

        with pytest.raises(FetchError) as exc_info:
            source.get_raw_quote("AAPL", 10.0)

        assert "rate limited" in str(exc_info.value)

    def test_lazy_import(self):
        source = YFinanceQuoteSource()
        assert source._yf is None

    def test_close_is_truncated_not_rounded(self):
        """A close just under a cent boundary stays under it."""
        history = pd.DataFrame({"Close": [123.4499999]}, index=pd.to_datetime(["2024-01-02"]))
        source, _, _ = self._source_with_history(history)

        quote = QuoteFetcher(source).fetch("AAPL")

        assert quote.raw_price == "123.4499999"
        assert quote.price == 123.44

    def test_single_decimal_close_is_parseable(self):
        history = pd.DataFrame({"Close": [123.4]}, index=pd.to_datetime(["2024-01-02"]))
        source, _, _ = self._source_with_history(history)

        quote = QuoteFetcher(source).fetch("AAPL")

        assert quote.raw_price == "123.40"
        assert quote.price == 123.4

    def test_infinite_close(self):
        history = pd.DataFrame({"Close": [float("inf")]}, index=pd.to_datetime(["2024-01-02"]))
        source, _, _ = self._source_with_history(history)

        with pytest.raises(FetchError):
            source.get_raw_quote("AAPL", 10.0)


class TestFormatClose:
    """Test close price rendering."""

    @pytest.mark.parametrize("close, expected", [
        (150.0, "150.00"),
        (123.4, "123.40"),
        (151.256789, "151.256789"),
        (0.01, "0.01"),
        (1e-05, "0.00001"),
        (1e16, "10000000000000000.00"),
    ])
    def test_format_close(self, close, expected):
        assert format_close(close) == expected
