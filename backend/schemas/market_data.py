"""Pydantic schemas for price updates and price history."""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel


class PriceRefreshRunResponse(BaseModel):
    """Status of one price update batch."""

    run_id: str
    status: Literal["running", "completed", "failed", "cancelled"]
    total: int
    completed: int
    cancel_requested: bool = False
    error: Optional[str] = None


class PriceHistoryEntryResponse(BaseModel):
    """A stored price for a security at the provider's as-of time."""

    ticker: str
    price: Decimal
    currency: Optional[str] = None
    price_timestamp: datetime

    model_config = {"from_attributes": True}
