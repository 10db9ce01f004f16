"""Morningstar quote source - downloads quote header pages over HTTP."""

import logging
from typing import Optional

import httpx

from config import settings
from integrations.exceptions import QuoteFetchError
from integrations.morningstar_symbols import PROVIDER_NAME

logger = logging.getLogger(__name__)


class MorningstarClient:
    """Quote source for Morningstar.

    Each ``fetch`` is a single GET of the quote header page; the raw HTML is
    returned unparsed. Failed requests are not retried.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        quote_path: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the HTTP client.

        Args:
            base_url: Provider base URL. Defaults to settings.QUOTE_BASE_URL.
            quote_path: Path of the quote page. Defaults to settings.QUOTE_PATH.
            timeout: Per-request timeout in seconds. Defaults to
                     settings.QUOTE_FETCH_TIMEOUT_SECONDS; zero or negative
                     disables the timeout.
            transport: Optional httpx transport (used by tests).
        """
        if timeout is None:
            timeout = settings.QUOTE_FETCH_TIMEOUT_SECONDS
        self._quote_path = quote_path or settings.QUOTE_PATH
        self._client = httpx.Client(
            base_url=base_url or settings.QUOTE_BASE_URL,
            timeout=timeout if timeout > 0 else None,
            follow_redirects=True,
            transport=transport,
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    @property
    def provider_name(self) -> str:
        return PROVIDER_NAME

    def fetch(self, provider_symbol: str) -> str:
        """Download the quote page for one Morningstar symbol.

        Args:
            provider_symbol: Morningstar symbol, e.g. "XLON:VOD".

        Returns:
            The response body as text.

        Raises:
            QuoteFetchError: On timeouts, connection errors or a non-2xx status.
        """
        logger.debug("Morningstar: fetching quote for %s", provider_symbol)
        try:
            response = self._client.get(self._quote_path, params={"t": provider_symbol})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise QuoteFetchError(
                f"Morningstar returned HTTP {e.response.status_code} for {provider_symbol}",
                symbol=provider_symbol,
                provider_name=PROVIDER_NAME,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise QuoteFetchError(
                f"Morningstar request failed for {provider_symbol}: {e}",
                symbol=provider_symbol,
                provider_name=PROVIDER_NAME,
            ) from e

        if not response.text.strip():
            raise QuoteFetchError(
                f"Morningstar returned an empty page for {provider_symbol}",
                symbol=provider_symbol,
                provider_name=PROVIDER_NAME,
                status_code=response.status_code,
            )
        return response.text
