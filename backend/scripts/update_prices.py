#!/usr/bin/env python
"""Download current prices for securities and store them.

Prices are fetched one symbol at a time. Symbols that cannot be priced are
skipped; a database failure stops the run. Ctrl-C cancels after the symbol
currently being processed.

Usage:
    cd backend
    uv run python -m scripts.update_prices              # every security in the database
    uv run python -m scripts.update_prices AAPL VOD.L   # just these symbols
    uv run python -m scripts.update_prices -v           # with debug logging
"""

import argparse
import logging
import sys
from typing import Callable, Optional

from database import get_session_local, init_db
from logging_config import setup_logging
from services.batch_session import BatchSession
from services.price_update_service import RunOutcome, RunStatus
from services.security_service import SecurityService

logger = logging.getLogger(__name__)

EXIT_CODES = {
    RunStatus.COMPLETED: 0,
    RunStatus.FAILED: 1,
    RunStatus.CANCELLED: 130,
}


def _print_progress(completed: int, total: int) -> None:
    print(f"  {completed}/{total}", flush=True)


def _print_outcome(outcome: RunOutcome) -> None:
    if outcome.status is RunStatus.COMPLETED:
        logger.info("Price download complete")
        print(f"Done: {outcome.completed} of {outcome.total} prices updated")
    elif outcome.status is RunStatus.CANCELLED:
        print(f"Cancelled: {outcome.completed} of {outcome.total} prices updated")
    else:
        print(f"Failed after {outcome.completed} of {outcome.total} prices: {outcome.error_message}")


def update_prices(
    symbols: Optional[list[str]] = None,
    session_factory: Optional[Callable] = None,
    batch_session: Optional[BatchSession] = None,
) -> int:
    """Run one price update batch and wait for it to finish.

    Args:
        symbols: Tickers to update. Defaults to every ticker in the database.
        session_factory: Database sessionmaker. Defaults to the application's.
        batch_session: BatchSession to run on (tests inject one).

    Returns:
        Process exit code for the run's outcome.
    """
    SessionLocal = session_factory or get_session_local()

    if not symbols:
        db = SessionLocal()
        try:
            symbols = SecurityService.list_tickers(db)
        finally:
            db.close()

    if not symbols:
        print("No securities to update")
        return 0

    session = batch_session or BatchSession(session_factory=SessionLocal)
    print(f"Updating prices for {len(symbols)} securities")
    handle = session.start(symbols, on_progress=_print_progress, on_complete=_print_outcome)
    try:
        try:
            outcome = handle.wait()
        except KeyboardInterrupt:
            print("Cancelling after the current symbol...")
            session.cancel(handle)
            outcome = handle.wait()
    finally:
        session.shutdown()

    return EXIT_CODES[outcome.status]


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Download current security prices")
    parser.add_argument(
        "symbols",
        nargs="*",
        help="Tickers to update (default: all securities in the database)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log each symbol and quote request",
    )
    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else None)
    init_db()
    sys.exit(update_prices([s.upper() for s in args.symbols]))


if __name__ == "__main__":
    main()
