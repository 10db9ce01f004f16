"""Unit tests for the provider exception hierarchy."""

import pytest

from integrations.exceptions import (
    ProviderError,
    QuoteFetchError,
    QuoteParseError,
    SymbolResolutionError,
)
from services.price_store import PriceStoreError
from services.price_update_service import ITEM_ERRORS


class TestExceptionHierarchy:
    """All per-symbol failures are caught by except ProviderError."""

    def test_resolution_error_is_provider_error(self):
        exc = SymbolResolutionError("no mapping", symbol="ABC.ZZ", provider_name="morningstar")
        assert isinstance(exc, ProviderError)
        assert exc.symbol == "ABC.ZZ"

    def test_fetch_error_is_provider_error(self):
        exc = QuoteFetchError("timeout", symbol="AAPL", provider_name="morningstar")
        assert isinstance(exc, ProviderError)
        assert exc.provider_name == "morningstar"

    def test_parse_error_carries_field(self):
        exc = QuoteParseError("bad price", symbol="AAPL", field="last-price-value")
        assert isinstance(exc, ProviderError)
        assert exc.field == "last-price-value"
        assert str(exc) == "bad price"

    def test_store_error_is_not_a_provider_error(self):
        """Storage failures must not be mistaken for per-symbol failures."""
        exc = PriceStoreError("disk full", symbol="AAPL")
        assert not isinstance(exc, ProviderError)
        assert not isinstance(exc, ITEM_ERRORS)

    def test_item_errors_cover_all_symbol_failures(self):
        exceptions = [
            SymbolResolutionError("resolve"),
            QuoteFetchError("fetch"),
            QuoteParseError("parse"),
        ]
        for exc in exceptions:
            with pytest.raises(ITEM_ERRORS):
                raise exc


class TestQuoteFetchErrorRetriable:
    """QuoteFetchError.retriable depends on status_code."""

    def test_429_is_retriable(self):
        assert QuoteFetchError("rate limit", status_code=429).retriable is True

    def test_500_is_retriable(self):
        assert QuoteFetchError("server error", status_code=500).retriable is True

    def test_404_not_retriable(self):
        assert QuoteFetchError("not found", status_code=404).retriable is False

    def test_transport_failure_is_retriable(self):
        assert QuoteFetchError("connection reset").retriable is True
