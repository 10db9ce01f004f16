"""Market data provider protocol definitions.

Defines the collaborators the price updater depends on: a symbol resolver
that maps between the application's tickers and the provider's identifiers,
and a quote source that downloads the raw quote document for one symbol.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Protocol


@dataclass(frozen=True)
class NormalizedQuote:
    """A parsed, normalized quote ready to be persisted."""

    symbol: str  # Canonical (application) ticker
    price: Decimal  # Major currency units, never negative
    timestamp: datetime  # Aware, in the application's target time zone
    currency: str | None = None  # Currency code as reported by the provider


class SymbolResolver(Protocol):
    """Maps canonical tickers to provider symbols and back.

    The mapping may be lossy: ``to_canonical_symbol(to_provider_symbol(s))``
    identifies the same instrument as ``s`` but need not be equal to it.
    """

    def to_provider_symbol(self, symbol: str) -> str:
        """Return the provider symbol for a canonical ticker.

        Raises:
            SymbolResolutionError: If the ticker cannot be mapped.
        """
        ...

    def to_canonical_symbol(self, provider_symbol: str) -> str:
        """Return the canonical ticker for a provider symbol.

        Raises:
            SymbolResolutionError: If the provider symbol cannot be mapped.
        """
        ...


class QuoteSource(Protocol):
    """Downloads raw quote documents from a remote provider."""

    @property
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'morningstar')."""
        ...

    def fetch(self, provider_symbol: str) -> str:
        """Fetch the raw quote document for one provider symbol.

        Raises:
            QuoteFetchError: On transport failure or non-success response.
        """
        ...
