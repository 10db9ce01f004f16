"""Typed exception hierarchy for quote provider errors.

Every failure raised while turning one symbol into a normalized quote is a
``ProviderError``. Callers that process a batch catch these per item and
move on to the next symbol.
"""


class ProviderError(Exception):
    """Base exception for all provider-related errors.

    Carries the provider name so callers can identify which provider failed.
    """

    def __init__(self, message: str, provider_name: str = ""):
        self.provider_name = provider_name
        super().__init__(message)


class SymbolResolutionError(ProviderError):
    """A symbol cannot be mapped to or from the provider's namespace."""

    def __init__(self, message: str, symbol: str = "", provider_name: str = ""):
        self.symbol = symbol
        super().__init__(message, provider_name)


class QuoteFetchError(ProviderError):
    """Network failure or non-success HTTP response while fetching a quote."""

    def __init__(
        self,
        message: str,
        symbol: str = "",
        provider_name: str = "",
        status_code: int | None = None,
    ):
        self.symbol = symbol
        self.status_code = status_code
        super().__init__(message, provider_name)

    @property
    def retriable(self) -> bool:
        """Transport failures, 429 and 5xx responses are transient.

        Informational only; the price updater never retries a fetch.
        """
        if self.status_code is None:
            return True
        return self.status_code == 429 or self.status_code >= 500


class QuoteParseError(ProviderError):
    """A required field is missing from the quote document or unparseable."""

    def __init__(
        self,
        message: str,
        symbol: str = "",
        field: str = "",
        provider_name: str = "",
    ):
        self.symbol = symbol
        self.field = field
        super().__init__(message, provider_name)
