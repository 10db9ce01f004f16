"""Pydantic request/response schemas."""

from schemas.market_data import PriceHistoryEntryResponse, PriceRefreshRunResponse

__all__ = ["PriceHistoryEntryResponse", "PriceRefreshRunResponse"]
