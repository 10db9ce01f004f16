"""SQLAlchemy ORM models."""

from .security import Security
from .security_price_history import SecurityPriceHistory
from .utils import generate_uuid

__all__ = ["Security", "SecurityPriceHistory", "generate_uuid"]
