"""Persistence of downloaded prices.

Each quote is written as one unit of work: the security's current price is
updated and a history row is appended, and both are committed together.
Timestamps are stored in UTC.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from integrations.parsing_utils import convert_zone
from models import SecurityPriceHistory
from services.security_service import SecurityService

logger = logging.getLogger(__name__)


class PriceStoreError(Exception):
    """A price update could not be committed to the database."""

    def __init__(self, message: str, symbol: str = ""):
        self.symbol = symbol
        super().__init__(message)


class PriceStore:
    """Writes current prices and price history through one database session."""

    def __init__(self, db: Session):
        self._db = db

    @property
    def db(self) -> Session:
        return self._db

    @contextmanager
    def transaction(self, symbol: str = "") -> Iterator["PriceStore"]:
        """Run a block of writes atomically.

        Commits when the block exits normally. Database errors roll the
        session back and are re-raised as ``PriceStoreError``; any other
        exception rolls back and propagates unchanged.
        """
        try:
            yield self
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise PriceStoreError(f"Could not save price for {symbol or 'unknown symbol'}: {e}", symbol=symbol) from e
        except Exception:
            self._db.rollback()
            raise

    def update_current_price(self, symbol: str, price: Decimal, as_of: datetime) -> None:
        """Set the current price of ``symbol``."""
        SecurityService.set_current_price(self._db, symbol, price, convert_zone(as_of, timezone.utc))

    def append_history(
        self,
        symbol: str,
        price: Decimal,
        timestamp: datetime,
        currency: Optional[str] = None,
    ) -> SecurityPriceHistory:
        """Add a price history row for ``symbol`` at ``timestamp``.

        A row already stored for the same instant is updated in place.
        """
        timestamp = convert_zone(timestamp, timezone.utc)
        security = SecurityService.ensure_exists(self._db, symbol)
        entry = (
            self._db.query(SecurityPriceHistory)
            .filter_by(security_id=security.id, price_timestamp=timestamp)
            .first()
        )
        if entry is None:
            entry = SecurityPriceHistory(
                security_id=security.id,
                ticker=symbol,
                price=price,
                currency=currency,
                price_timestamp=timestamp,
            )
            self._db.add(entry)
        else:
            logger.debug("Replacing stored %s price at %s", symbol, timestamp)
            entry.price = price
            entry.currency = currency
        self._db.flush()
        return entry

    def get_history(self, symbol: str, limit: Optional[int] = None) -> list[SecurityPriceHistory]:
        """Return stored history for ``symbol``, newest first."""
        query = (
            self._db.query(SecurityPriceHistory)
            .filter_by(ticker=symbol)
            .order_by(SecurityPriceHistory.price_timestamp.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()
