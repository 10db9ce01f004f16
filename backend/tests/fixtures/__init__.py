"""Test fixtures and sample data."""
import pytest
from datetime import datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

from models import Security, SecurityPriceHistory
from sqlalchemy.orm import Session

VIENNA = ZoneInfo("Europe/Vienna")


def make_quote_page(
    price: str | None = "123.45",
    currency: str | None = "USD",
    as_of: str | None = "03/15/2024 16:00:00",
) -> str:
    """Build a quote header page like the one Morningstar serves.

    Passing None for a field leaves its element out of the page.
    """
    parts = ['<html><head><title>Quote</title></head><body><div class="quote-header">']
    if price is not None:
        parts.append(f'<span id="last-price-value" vkey="LastPrice">\n  {price}\n</span>')
    if currency is not None:
        parts.append(f'<span id="curency">{currency}</span>')
    if as_of is not None:
        parts.append(f'<span id="asOfDate" vkey="LastDate">{as_of}</span>')
    parts.append("</div></body></html>")
    return "".join(parts)


def get_or_create_security(db: Session, ticker: str, name: str | None = None) -> Security:
    """Get or create a Security record for the given ticker.

    This is a helper function (not a fixture) for tests that need to create
    several securities with specific tickers.
    """
    security = db.query(Security).filter_by(ticker=ticker).first()
    if security is None:
        security = Security(ticker=ticker, name=name or ticker)
        db.add(security)
        db.flush()
    return security


@pytest.fixture
def security(db: Session) -> Security:
    """A security with no price yet."""
    sec = Security(ticker="AAPL", name="Apple Inc.")
    db.add(sec)
    db.commit()
    return sec


@pytest.fixture
def security_with_history(db: Session) -> Security:
    """A security with a current price and two history rows (UTC timestamps)."""
    sec = Security(
        ticker="VOD.L",
        name="Vodafone Group",
        current_price=Decimal("0.7250"),
        price_updated_at=datetime(2024, 3, 15, 16, 35, tzinfo=timezone.utc),
    )
    db.add(sec)
    db.flush()
    db.add_all([
        SecurityPriceHistory(
            security_id=sec.id,
            ticker="VOD.L",
            price=Decimal("0.7100"),
            currency="GBX",
            price_timestamp=datetime(2024, 3, 14, 16, 35, tzinfo=timezone.utc),
        ),
        SecurityPriceHistory(
            security_id=sec.id,
            ticker="VOD.L",
            price=Decimal("0.7250"),
            currency="GBX",
            price_timestamp=datetime(2024, 3, 15, 16, 35, tzinfo=timezone.utc),
        ),
    ])
    db.commit()
    return sec
