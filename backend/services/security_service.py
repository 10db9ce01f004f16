"""Service for managing Security records."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from models import Security

logger = logging.getLogger(__name__)


class SecurityService:
    """Centralized operations on the Security master list."""

    @staticmethod
    def ensure_exists(
        db: Session,
        ticker: str,
        name: Optional[str] = None,
    ) -> Security:
        """Ensure a Security record exists for the given ticker.

        Creates the record if it doesn't exist. An existing record's name is
        only filled in when it has none.

        Args:
            db: Database session
            ticker: The security ticker symbol
            name: Optional security name

        Returns:
            The Security record (flushed but not committed)
        """
        security = db.query(Security).filter_by(ticker=ticker).first()

        if not security:
            security = Security(ticker=ticker, name=name or ticker)
            db.add(security)
            db.flush()
            logger.info("Created security: %s", ticker)
        elif name and not security.name:
            security.name = name
            db.flush()

        return security

    @staticmethod
    def set_current_price(
        db: Session,
        ticker: str,
        price: Decimal,
        as_of: datetime,
    ) -> Security:
        """Record the latest known price of a security, creating it if needed.

        Returns:
            The updated Security record (flushed but not committed)
        """
        security = SecurityService.ensure_exists(db, ticker)
        security.current_price = price
        security.price_updated_at = as_of
        db.flush()
        return security

    @staticmethod
    def list_tickers(db: Session) -> list[str]:
        """Return every ticker in the master list, sorted alphabetically."""
        rows = db.query(Security.ticker).order_by(Security.ticker).all()
        return [row[0] for row in rows]
