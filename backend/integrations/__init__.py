"""External API integrations.

This package contains:
- Market data protocol: symbol resolver and quote source interfaces
- Morningstar symbol converter and quote client
- Quote parser: raw quote page -> NormalizedQuote
"""

from integrations.market_data_protocol import NormalizedQuote, QuoteSource, SymbolResolver
from integrations.morningstar_client import MorningstarClient
from integrations.morningstar_symbols import MorningstarSymbolConverter
from integrations.quote_parser import parse_quote

__all__ = [
    "MorningstarClient",
    "MorningstarSymbolConverter",
    "NormalizedQuote",
    "QuoteSource",
    "SymbolResolver",
    "parse_quote",
]
