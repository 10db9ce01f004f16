"""Price update service - downloads, normalizes and stores security prices."""

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence
from zoneinfo import ZoneInfo

from config import settings
from integrations.exceptions import QuoteFetchError, QuoteParseError, SymbolResolutionError
from integrations.market_data_protocol import NormalizedQuote, QuoteSource, SymbolResolver
from integrations.quote_parser import parse_quote
from services.price_store import PriceStore

logger = logging.getLogger(__name__)

# Failures confined to one symbol; the batch continues with the next one.
ITEM_ERRORS = (SymbolResolutionError, QuoteFetchError, QuoteParseError)

ProgressCallback = Callable[[int, int], None]


class RunStatus(str, enum.Enum):
    """Terminal outcome of a batch run."""

    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class BatchRun:
    """Progress counters for one batch.

    ``completed`` only ever increases and never exceeds ``total``.
    """

    total: int
    completed: int = 0
    cancelled: bool = False

    def mark_completed(self) -> int:
        if self.completed < self.total:
            self.completed += 1
        return self.completed


@dataclass(frozen=True)
class RunOutcome:
    """Result delivered once when a batch finishes."""

    status: RunStatus
    completed: int
    total: int
    error: Optional[BaseException] = None

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None


class PriceUpdateService:
    """Processes a list of tickers one at a time.

    For each ticker: resolve the provider symbol, fetch the quote page,
    parse it and store the price. A ticker that cannot be resolved, fetched
    or parsed is logged and skipped. A storage failure ends the run.
    """

    def __init__(
        self,
        resolver: Optional[SymbolResolver] = None,
        quote_source: Optional[QuoteSource] = None,
        source_zone: Optional[ZoneInfo] = None,
        target_zone: Optional[ZoneInfo] = None,
    ):
        """Initialize with optional collaborators for dependency injection.

        Args:
            resolver: Symbol resolver. If None, a MorningstarSymbolConverter
                      is created on first use.
            quote_source: Quote source. If None, a MorningstarClient is
                          created on first use.
            source_zone: Zone of the provider's as-of times. Defaults to
                         settings.QUOTE_SOURCE_TIMEZONE.
            target_zone: Zone stored timestamps are expressed in. Defaults
                         to settings.QUOTE_TARGET_TIMEZONE.
        """
        self._resolver = resolver
        self._quote_source = quote_source
        self._owns_quote_source = quote_source is None
        self.source_zone = source_zone or ZoneInfo(settings.QUOTE_SOURCE_TIMEZONE)
        self.target_zone = target_zone or ZoneInfo(settings.QUOTE_TARGET_TIMEZONE)

    @property
    def resolver(self) -> SymbolResolver:
        """Get the symbol resolver, creating the default if not provided."""
        if self._resolver is None:
            from integrations.morningstar_symbols import MorningstarSymbolConverter

            self._resolver = MorningstarSymbolConverter()
        return self._resolver

    @property
    def quote_source(self) -> QuoteSource:
        """Get the quote source, creating the default if not provided."""
        if self._quote_source is None:
            from integrations.morningstar_client import MorningstarClient

            self._quote_source = MorningstarClient()
        return self._quote_source

    def close(self) -> None:
        """Close the quote source if this service created it."""
        if self._owns_quote_source and self._quote_source is not None:
            self._quote_source.close()

    def process_symbol(self, symbol: str, store: PriceStore) -> NormalizedQuote:
        """Download, parse and store the price of one ticker.

        Raises:
            SymbolResolutionError, QuoteFetchError, QuoteParseError: The
                ticker could not be priced; nothing was written.
            PriceStoreError: The price could not be committed.
        """
        provider_symbol = self.resolver.to_provider_symbol(symbol)
        document = self.quote_source.fetch(provider_symbol)
        quote = parse_quote(
            document,
            provider_symbol,
            self.resolver,
            source_zone=self.source_zone,
            target_zone=self.target_zone,
        )

        with store.transaction(quote.symbol):
            store.update_current_price(quote.symbol, quote.price, quote.timestamp)
            store.append_history(quote.symbol, quote.price, quote.timestamp, quote.currency)

        logger.debug("Stored %s = %s %s at %s", quote.symbol, quote.price, quote.currency, quote.timestamp)
        return quote

    def run(
        self,
        symbols: Sequence[str],
        store: PriceStore,
        batch_run: BatchRun,
        on_progress: Optional[ProgressCallback] = None,
    ) -> RunOutcome:
        """Process ``symbols`` in order and return the terminal outcome.

        Cancellation (``batch_run.cancelled``) is checked before each ticker;
        a ticker already being processed is allowed to finish. No progress
        is reported once the run has been cancelled.

        Args:
            symbols: Tickers to update, in the order they are stored.
            store: Destination for the downloaded prices.
            batch_run: Counters for this run, updated in place.
            on_progress: Called with ``(completed, total)`` after each
                         stored price.

        Returns:
            COMPLETED once every ticker was attempted, FAILED if a storage
            or unexpected error stopped the run, CANCELLED if the run was
            cancelled before the outcome was determined.
        """
        logger.info("Price update started: %d symbols", batch_run.total)

        for symbol in symbols:
            if batch_run.cancelled:
                break

            try:
                self.process_symbol(symbol, store)
            except ITEM_ERRORS as e:
                logger.warning("Skipping %s: %s", symbol, e, exc_info=True)
                continue
            except Exception as e:
                logger.error(
                    "Price update failed at %s after %d of %d symbols",
                    symbol, batch_run.completed, batch_run.total,
                    exc_info=True,
                )
                return RunOutcome(RunStatus.FAILED, batch_run.completed, batch_run.total, error=e)

            completed = batch_run.mark_completed()
            if on_progress is not None and not batch_run.cancelled:
                try:
                    on_progress(completed, batch_run.total)
                except Exception:
                    logger.warning("Progress callback failed", exc_info=True)

        if batch_run.cancelled:
            logger.info(
                "Price update cancelled: %d of %d symbols stored",
                batch_run.completed, batch_run.total,
            )
            return RunOutcome(RunStatus.CANCELLED, batch_run.completed, batch_run.total)

        logger.info(
            "Price update complete: %d of %d symbols stored",
            batch_run.completed, batch_run.total,
        )
        return RunOutcome(RunStatus.COMPLETED, batch_run.completed, batch_run.total)
