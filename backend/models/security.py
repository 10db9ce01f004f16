"""Security model - master ticker list with the latest downloaded price."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from integrations.quote_parser import MAX_PRICE_PRECISION
from models.utils import generate_uuid


class Security(Base):
    """A security/ticker in the master list."""

    __tablename__ = "securities"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    ticker = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)  # Company/fund name
    current_price = Column(Numeric(18, MAX_PRICE_PRECISION), nullable=True)
    price_updated_at = Column(DateTime(timezone=True), nullable=True)  # As-of time of current_price, UTC
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    price_history = relationship(
        "SecurityPriceHistory",
        back_populates="security",
        order_by="SecurityPriceHistory.price_timestamp",
    )
