"""Market data API endpoints."""

import logging
import threading
from collections import deque
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from database import get_db
from models import Security
from models.utils import generate_uuid
from schemas.market_data import PriceHistoryEntryResponse, PriceRefreshRunResponse
from services.batch_session import BatchSession, RunHandle
from services.price_store import PriceStore
from services.price_update_service import RunOutcome

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/market-data", tags=["market-data"])


MAX_FINISHED_RUNS = 100


class PriceRefreshTracker:
    """Keeps the status of price update runs started through the API.

    Acts as the progress sink and completion notifier for those runs.
    Only the most recent ``max_finished`` finished runs are kept.
    """

    def __init__(self, max_finished: int = MAX_FINISHED_RUNS):
        self._lock = threading.Lock()
        self._max_finished = max_finished
        self._handles: dict[str, RunHandle] = {}
        self._progress: dict[str, int] = {}
        self._outcomes: dict[str, RunOutcome] = {}
        self._finished: deque[str] = deque()

    def track(self, handle: RunHandle) -> None:
        with self._lock:
            self._handles[handle.id] = handle
            self._progress.setdefault(handle.id, 0)

    def get(self, run_id: str) -> Optional[RunHandle]:
        with self._lock:
            return self._handles.get(run_id)

    def record_progress(self, run_id: str, completed: int) -> None:
        with self._lock:
            self._progress[run_id] = max(completed, self._progress.get(run_id, 0))

    def record_outcome(self, run_id: str, outcome: RunOutcome) -> None:
        with self._lock:
            if run_id not in self._outcomes:
                self._finished.append(run_id)
            self._outcomes[run_id] = outcome
            self._progress[run_id] = outcome.completed
            while len(self._finished) > self._max_finished:
                self._forget(self._finished.popleft())

    def _forget(self, run_id: str) -> None:
        self._handles.pop(run_id, None)
        self._progress.pop(run_id, None)
        self._outcomes.pop(run_id, None)

    def to_response(self, handle: RunHandle) -> PriceRefreshRunResponse:
        with self._lock:
            outcome = self._outcomes.get(handle.id)
            completed = self._progress.get(handle.id, 0)
        return PriceRefreshRunResponse(
            run_id=handle.id,
            status=outcome.status.value if outcome else "running",
            total=handle.run.total,
            completed=completed,
            cancel_requested=handle.run.cancelled,
            error=outcome.error_message if outcome else None,
        )


_batch_session: Optional[BatchSession] = None
_tracker = PriceRefreshTracker()


def get_batch_session() -> BatchSession:
    """Get the shared BatchSession, creating it on first use."""
    global _batch_session
    if _batch_session is None:
        _batch_session = BatchSession()
    return _batch_session


def get_refresh_tracker() -> PriceRefreshTracker:
    """Get the run tracker (overridable in tests)."""
    return _tracker


def _get_tracked_run(tracker: PriceRefreshTracker, run_id: str) -> RunHandle:
    handle = tracker.get(run_id)
    if handle is None:
        raise HTTPException(status_code=404, detail="Price update run not found")
    return handle


@router.post(
    "/prices/refresh",
    status_code=202,
    response_model=PriceRefreshRunResponse,
    responses={204: {"description": "No symbols given; nothing was started"}},
)
def refresh_prices(
    symbols: list[str],
    session: BatchSession = Depends(get_batch_session),
    tracker: PriceRefreshTracker = Depends(get_refresh_tracker),
):
    """Start downloading current prices for the given symbols.

    Symbols are passed in the request body as a JSON array and processed
    in order, one at a time, in the background. Poll the returned run for
    progress. An empty array starts nothing and returns 204.
    """
    run_id = generate_uuid()

    def on_progress(completed: int, total: int) -> None:
        tracker.record_progress(run_id, completed)

    def on_complete(outcome: RunOutcome) -> None:
        tracker.record_outcome(run_id, outcome)

    handle = session.start(
        symbols, on_progress=on_progress, on_complete=on_complete, run_id=run_id
    )
    if handle is None:
        return Response(status_code=204)
    tracker.track(handle)
    return tracker.to_response(handle)


@router.get("/prices/runs/{run_id}", response_model=PriceRefreshRunResponse)
def get_refresh_run(
    run_id: str,
    tracker: PriceRefreshTracker = Depends(get_refresh_tracker),
):
    """Return the progress or outcome of a price update run."""
    return tracker.to_response(_get_tracked_run(tracker, run_id))


@router.post("/prices/runs/{run_id}/cancel", response_model=PriceRefreshRunResponse)
def cancel_refresh_run(
    run_id: str,
    session: BatchSession = Depends(get_batch_session),
    tracker: PriceRefreshTracker = Depends(get_refresh_tracker),
):
    """Stop a price update run before its next symbol. Safe to repeat."""
    handle = _get_tracked_run(tracker, run_id)
    session.cancel(handle)
    return tracker.to_response(handle)


@router.get("/prices/{ticker}/history", response_model=list[PriceHistoryEntryResponse])
def get_price_history(
    ticker: str,
    limit: Optional[int] = Query(None, ge=1, description="Maximum rows to return"),
    db: Session = Depends(get_db),
):
    """Return stored prices for a ticker, newest first."""
    if db.query(Security).filter_by(ticker=ticker).first() is None:
        raise HTTPException(status_code=404, detail="Security not found")
    return PriceStore(db).get_history(ticker, limit=limit)


def shutdown_batch_session() -> None:
    """Stop the shared BatchSession's worker, if one was started."""
    global _batch_session
    if _batch_session is not None:
        _batch_session.shutdown(wait=False)
        _batch_session = None
