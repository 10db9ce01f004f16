"""Symbol conversion between Yahoo-style tickers and Morningstar identifiers.

Securities are stored with Yahoo Finance tickers, where the listing venue is
a dot suffix (``VOD.L``). Morningstar addresses the same listing with an
exchange MIC prefix (``XLON:VOD``). US listings carry no suffix on either
side.
"""

from integrations.exceptions import SymbolResolutionError

PROVIDER_NAME = "morningstar"

# Yahoo suffix -> Morningstar exchange code
_SUFFIX_TO_EXCHANGE: dict[str, str] = {
    "L": "XLON",
    "IL": "XLON",
    "DE": "XETR",
    "F": "XFRA",
    "VI": "XWBO",
    "SW": "XSWX",
    "PA": "XPAR",
    "AS": "XAMS",
    "BR": "XBRU",
    "MI": "XMIL",
    "MC": "XMAD",
    "LS": "XLIS",
    "IR": "XDUB",
    "ST": "XSTO",
    "CO": "XCSE",
    "OL": "XOSL",
    "HE": "XHEL",
    "TO": "XTSE",
    "V": "XTSX",
    "AX": "XASX",
    "NZ": "XNZE",
    "HK": "XHKG",
}

# Several suffixes share an exchange; the first listed wins on the way back.
_EXCHANGE_TO_SUFFIX: dict[str, str] = {}
for _suffix, _exchange in _SUFFIX_TO_EXCHANGE.items():
    _EXCHANGE_TO_SUFFIX.setdefault(_exchange, _suffix)


class MorningstarSymbolConverter:
    """Symbol resolver for the Morningstar quote source."""

    def to_provider_symbol(self, symbol: str) -> str:
        """Convert a Yahoo-style ticker to a Morningstar symbol.

        ``AAPL`` -> ``AAPL``, ``VOD.L`` -> ``XLON:VOD``.
        """
        ticker = (symbol or "").strip().upper()
        if not ticker:
            raise SymbolResolutionError(
                "Empty symbol", symbol=symbol or "", provider_name=PROVIDER_NAME
            )

        base, dot, suffix = ticker.rpartition(".")
        if not dot:
            return ticker
        if not base:
            raise SymbolResolutionError(
                f"Malformed symbol {symbol!r}", symbol=symbol, provider_name=PROVIDER_NAME
            )

        exchange = _SUFFIX_TO_EXCHANGE.get(suffix)
        if exchange is None:
            raise SymbolResolutionError(
                f"No Morningstar exchange for suffix .{suffix} ({symbol})",
                symbol=symbol,
                provider_name=PROVIDER_NAME,
            )
        return f"{exchange}:{base}"

    def to_canonical_symbol(self, provider_symbol: str) -> str:
        """Convert a Morningstar symbol back to a Yahoo-style ticker.

        ``XLON:VOD`` -> ``VOD.L``. Unprefixed symbols are US listings and
        are returned unchanged.
        """
        value = (provider_symbol or "").strip().upper()
        if not value:
            raise SymbolResolutionError(
                "Empty provider symbol", symbol=provider_symbol or "", provider_name=PROVIDER_NAME
            )

        exchange, colon, base = value.partition(":")
        if not colon:
            return value

        suffix = _EXCHANGE_TO_SUFFIX.get(exchange)
        if suffix is None or not base:
            raise SymbolResolutionError(
                f"Cannot map Morningstar symbol {provider_symbol!r} to a ticker",
                symbol=provider_symbol,
                provider_name=PROVIDER_NAME,
            )
        return f"{base}.{suffix}"
