"""
One polling round: fetch every registered symbol concurrently and merge the
results into the price store.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed

from .exceptions import FetchError
from .models import CycleReport
from .price_store import PriceStore
from .quote_fetcher import QuoteFetcher

logger = logging.getLogger(__name__)


class PollCycle:
    """Fan-out/fan-in of quote lookups for all registered symbols."""

    def __init__(self, store: PriceStore, fetcher: QuoteFetcher):
        """
        Initialize the poll cycle.

        Args:
            store: Price store holding the registered symbols
            fetcher: Quote fetcher used for every lookup
        """
        self.store = store
        self.fetcher = fetcher
        self._cycle_count = 0

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    def run(self) -> CycleReport:
        """
        Fetch every registered symbol in parallel and wait for all of them.

        A failed lookup is recorded as a 0.0 price for that symbol; it never
        fails the cycle. The method returns only after every lookup has
        resolved, so two cycles never overlap.

        Returns:
            CycleReport listing which symbols succeeded and which failed
        """
        self._cycle_count += 1
        report = CycleReport(cycle_number=self._cycle_count)
        symbols = self.store.symbols()
        if not symbols:
            return report

        started = time.monotonic()
        succeeded = []
        failed = []

        # One worker per symbol; leaving the with-block joins all of them
        with ThreadPoolExecutor(max_workers=len(symbols), thread_name_prefix="quote") as executor:
            future_to_symbol = {
                executor.submit(self._poll_symbol, symbol): symbol
                for symbol in symbols
            }
            for future in as_completed(future_to_symbol):
                symbol = future_to_symbol[future]
                if future.result():
                    succeeded.append(symbol)
                else:
                    failed.append(symbol)

        report.succeeded = sorted(succeeded)
        report.failed = sorted(failed)
        report.duration_seconds = time.monotonic() - started

        logger.debug(
            f"Cycle {report.cycle_number}: {len(succeeded)} ok, {len(failed)} failed "
            f"in {report.duration_seconds:.2f}s"
        )
        return report

    def _poll_symbol(self, symbol: str) -> bool:
        """Fetch one symbol and store the result. Returns True on success."""
        try:
            quote = self.fetcher.fetch(symbol)
        except FetchError as e:
            logger.warning(f"Failed to fetch {symbol}: {e}")
            self.store.update(symbol, 0.0)
            return False
        except Exception:
            logger.exception(f"Unexpected error fetching {symbol}")
            self.store.update(symbol, 0.0)
            return False

        self.store.update(symbol, quote.price)
        return True
