"""API route handlers."""
from . import market_data

__all__ = ["market_data"]
