"""SecurityPriceHistory model - one downloaded quote per security and instant."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from database import Base
from integrations.quote_parser import MAX_PRICE_PRECISION
from models.utils import generate_uuid


class SecurityPriceHistory(Base):
    """A price observed for a security at the provider's as-of time.

    ``price_timestamp`` is stored in UTC so that instants in the repeated
    hour of a daylight saving change stay distinct.
    Re-downloading a quote for the same instant updates the existing row.
    """

    __tablename__ = "security_price_history"
    __table_args__ = (
        UniqueConstraint(
            "security_id", "price_timestamp",
            name="uix_security_price_history",
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    security_id = Column(
        String(36), ForeignKey("securities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    ticker = Column(String, nullable=False)  # Kept for convenience/fallback
    price = Column(Numeric(18, MAX_PRICE_PRECISION), nullable=False)
    currency = Column(String(3), nullable=True)  # As reported, e.g. "GBX"
    price_timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    security = relationship("Security", back_populates="price_history")
