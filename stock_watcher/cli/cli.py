"""
Command-line interface implementation.
"""

import argparse
import logging
import os
import signal
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..config import ConfigurationManager, WatcherConfig, parse_symbols
from ..display import CursesSurface, KeyListener, Renderer
from ..exceptions import ConfigurationError, DisplaySurfaceError
from ..poll_cycle import PollCycle
from ..price_store import PriceStore
from ..quote_fetcher import QuoteFetcher
from ..scheduler import Scheduler, StopSignal


def default_log_file() -> Path:
    """Log destination while the live table owns the terminal."""
    return Path(os.path.expanduser("~")) / ".stock_watcher" / "stock_watcher.log"


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Set up logging configuration, to a file when one is given and stderr otherwise."""
    handler_args = {}
    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handler_args["filename"] = str(log_file)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        **handler_args
    )


class WatcherArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports bad flags as a configuration error (exit 1)."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"error: {message}\n")


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = WatcherArgumentParser(
        description="Stock Watcher - watch live prices for a set of stock symbols"
    )

    parser.add_argument(
        "-s", "--symbols",
        type=str,
        help="Symbols for ticker, comma separated (no spaces), e.g. AAPL,MSFT,GOOG"
    )

    parser.add_argument(
        "-i", "--interval",
        type=int,
        help="Interval for stock data to be updated in seconds (default: 1)"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds to wait on a single quote lookup (default: 10)"
    )

    parser.add_argument(
        "--source",
        choices=["yfinance", "http"],
        help="Quote source to use (default: yfinance)"
    )

    parser.add_argument(
        "--endpoint",
        type=str,
        help="URL template for the http source, containing {symbol}"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file"
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Fetch prices once, print the table and exit"
    )

    parser.add_argument(
        "--validate-config",
        action="store_true",
        help="Validate configuration and exit"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level"
    )

    parser.add_argument(
        "--log-file",
        type=str,
        help="Write logs to this file (the live display defaults to ~/.stock_watcher/stock_watcher.log)"
    )

    return parser


def collect_overrides(args: argparse.Namespace) -> Dict[str, object]:
    """Map parsed arguments onto configuration fields."""
    return {
        "symbols": parse_symbols(args.symbols) if args.symbols is not None else None,
        "interval_seconds": args.interval,
        "timeout_seconds": args.timeout,
        "source": args.source,
        "endpoint_template": args.endpoint,
    }


def build_watcher(config: WatcherConfig) -> Tuple[PriceStore, PollCycle]:
    """Create the price store with every symbol registered and its poll cycle."""
    store = PriceStore()
    for symbol in config.symbols:
        store.register(symbol)
    fetcher = QuoteFetcher.from_config(config)
    return store, PollCycle(store, fetcher)


def format_config(config: WatcherConfig) -> str:
    """Format a resolved configuration for display."""
    lines = [
        "",
        "⚙️  STOCK WATCHER CONFIGURATION",
        "=" * 40,
        f"Symbols: {', '.join(config.symbols)}",
        f"Interval: {config.interval_seconds}s",
        f"Timeout: {config.timeout_seconds:g}s",
        f"Source: {config.source}",
    ]
    if config.source == "http":
        lines.append(f"Endpoint: {config.endpoint_template}")
    lines.append(
        f"Glyphs: up {config.display.up_glyph}  down {config.display.down_glyph}  "
        f"flat {config.display.flat_glyph}"
    )
    return "\n".join(lines)


def run_once(config: WatcherConfig) -> str:
    """Run a single poll cycle and return the table as plain text."""
    store, poll_cycle = build_watcher(config)
    poll_cycle.run()
    return Renderer(display=config.display).render_text(store.snapshot())


def install_signal_handlers(stop_signal: StopSignal) -> Dict[int, object]:
    """Route SIGINT and SIGTERM to the stop signal. Returns the previous handlers."""
    previous = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.signal(
            signum, lambda received, frame: stop_signal.cancel(signal.Signals(received).name)
        )
    return previous


def restore_signal_handlers(previous: Dict[int, object]) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)


def run_live(config: WatcherConfig) -> int:
    """
    Open the terminal and refresh the table until a key or interrupt arrives.

    Returns:
        Process exit code

    Raises:
        DisplaySurfaceError: If the terminal cannot be initialized
    """
    store, poll_cycle = build_watcher(config)
    stop_signal = StopSignal()

    surface = CursesSurface().open()
    renderer = Renderer(surface, config.display)
    listener = None
    try:
        listener = KeyListener(lambda: stop_signal.cancel("key pressed")).start()
        previous_handlers = install_signal_handlers(stop_signal)
    except Exception:
        if listener is not None:
            listener.stop()
        renderer.close()
        raise

    def release() -> None:
        listener.stop()
        restore_signal_handlers(previous_handlers)
        renderer.close()

    scheduler = Scheduler(
        poll_cycle,
        store,
        renderer.draw,
        interval_seconds=config.interval_seconds,
        stop_signal=stop_signal,
        on_stop=release,
    )
    return scheduler.run()


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    live = not (args.once or args.validate_config)
    log_file = args.log_file
    if log_file is None and live:
        log_file = str(default_log_file())

    setup_logging(args.log_level, log_file)
    logger = logging.getLogger(__name__)

    try:
        config = ConfigurationManager().load_config(args.config, collect_overrides(args))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        parser.print_usage(sys.stderr)
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.validate_config:
            print(format_config(config))
            print("\n✅ Configuration is valid")

        elif args.once:
            print(run_once(config))

        else:
            exit_code = run_live(config)
            if exit_code != 0:
                sys.exit(exit_code)

    except DisplaySurfaceError as e:
        logger.error(f"Display error: {e}")
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Application error: {e}")
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
