"""Batch session - runs price updates in the background and reports back."""

import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable, Optional, Sequence

from database import get_session_local
from models.utils import generate_uuid
from services.price_store import PriceStore
from services.price_update_service import (
    BatchRun,
    PriceUpdateService,
    ProgressCallback,
    RunOutcome,
    RunStatus,
)

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[RunOutcome], None]
Dispatcher = Callable[[Callable[[], None]], None]


def call_directly(fn: Callable[[], None]) -> None:
    """Default dispatcher: invoke callbacks on the worker thread."""
    fn()


class RunHandle:
    """Handle to one batch started by a BatchSession."""

    def __init__(self, run_id: str, batch_run: BatchRun):
        self.id = run_id
        self.run = batch_run
        self._outcome: Optional[RunOutcome] = None
        self._finished = False
        self._lock = threading.Lock()
        self._done = threading.Event()

    @property
    def outcome(self) -> Optional[RunOutcome]:
        """The terminal outcome, or None while the batch is still running."""
        return self._outcome

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: Optional[float] = None) -> Optional[RunOutcome]:
        """Block until the outcome has been delivered (or ``timeout`` passes)."""
        self._done.wait(timeout)
        return self._outcome

    def _claim_finish(self) -> bool:
        """Return True for the first caller only."""
        with self._lock:
            if self._finished:
                return False
            self._finished = True
            return True


class BatchSession:
    """Starts and cancels price update batches.

    Each batch runs on a background executor with its own database session.
    The session is closed before the terminal outcome is delivered, and the
    outcome is delivered exactly once through ``dispatch``.
    """

    def __init__(
        self,
        service: Optional[PriceUpdateService] = None,
        session_factory: Optional[Callable] = None,
        executor: Optional[Executor] = None,
        dispatch: Optional[Dispatcher] = None,
    ):
        """Initialize with optional collaborators for dependency injection.

        Args:
            service: The price update pipeline. Defaults to PriceUpdateService().
            session_factory: Callable returning a new database session.
                             Defaults to the application's sessionmaker.
            executor: Executor the batches run on. Defaults to a
                      single-worker thread pool owned by this session.
            dispatch: Runs progress and completion callbacks in the caller's
                      preferred context. Defaults to calling them directly.
        """
        self._service = service
        self._owns_service = service is None
        self._session_factory = session_factory
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="price-update"
        )
        self._dispatch = dispatch or call_directly

    @property
    def service(self) -> PriceUpdateService:
        """Get the price update service, creating default if not provided."""
        if self._service is None:
            self._service = PriceUpdateService()
        return self._service

    @property
    def session_factory(self) -> Callable:
        if self._session_factory is None:
            self._session_factory = get_session_local()
        return self._session_factory

    def start(
        self,
        symbols: Optional[Sequence[str]],
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompletionCallback] = None,
        run_id: Optional[str] = None,
    ) -> Optional[RunHandle]:
        """Start updating prices for ``symbols`` in the background.

        Args:
            symbols: Tickers to update. None or empty is a no-op.
            on_progress: Receives ``(completed, total)`` after each stored price.
            on_complete: Receives the RunOutcome exactly once.
            run_id: Identifier for the batch. Generated when not given.

        Returns:
            A handle for the batch, or None when there was nothing to do.
        """
        if not symbols:
            logger.debug("Price update requested with no symbols; nothing to do")
            return None

        symbols = list(symbols)
        handle = RunHandle(run_id or generate_uuid(), BatchRun(total=len(symbols)))
        logger.info("Starting price update run %s for %d symbols", handle.id, len(symbols))
        self._executor.submit(self._execute, handle, symbols, on_progress, on_complete)
        return handle

    def cancel(self, handle: Optional[RunHandle]) -> None:
        """Request that a batch stop before its next symbol.

        Idempotent. The symbol being processed is allowed to finish; the
        batch then ends with a CANCELLED outcome unless it already ended.
        """
        if handle is None or handle.run.cancelled:
            return
        handle.run.cancelled = True
        logger.info("Cancellation requested for price update run %s", handle.id)

    def shutdown(self, wait: bool = True) -> None:
        """Shut down the executor and service if this session created them."""
        if self._owns_executor:
            self._executor.shutdown(wait=wait)
        if self._owns_service and self._service is not None:
            self._service.close()

    def _execute(
        self,
        handle: RunHandle,
        symbols: list[str],
        on_progress: Optional[ProgressCallback],
        on_complete: Optional[CompletionCallback],
    ) -> None:
        progress = None
        if on_progress is not None:
            def progress(completed: int, total: int) -> None:
                self._dispatch(lambda: on_progress(completed, total))

        try:
            if handle.run.cancelled:
                outcome = RunOutcome(RunStatus.CANCELLED, 0, handle.run.total)
            else:
                db = self.session_factory()
                try:
                    outcome = self.service.run(symbols, PriceStore(db), handle.run, progress)
                finally:
                    db.close()
        except Exception as e:
            logger.error("Price update run %s failed", handle.id, exc_info=True)
            outcome = RunOutcome(RunStatus.FAILED, handle.run.completed, handle.run.total, error=e)

        self._deliver(handle, outcome, on_complete)

    def _deliver(
        self,
        handle: RunHandle,
        outcome: RunOutcome,
        on_complete: Optional[CompletionCallback],
    ) -> None:
        if not handle._claim_finish():
            return
        handle._outcome = outcome
        try:
            if on_complete is not None:
                self._dispatch(lambda: on_complete(outcome))
        except Exception:
            logger.warning("Completion callback failed for run %s", handle.id, exc_info=True)
        finally:
            handle._done.set()
