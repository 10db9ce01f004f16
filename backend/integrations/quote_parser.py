"""Parser for Morningstar quote header pages.

Turns the raw HTML returned by the quote source into a ``NormalizedQuote``:
price in major currency units and as-of time in the application's zone.
"""

from decimal import ROUND_HALF_EVEN, Decimal
from zoneinfo import ZoneInfo

from bs4 import BeautifulSoup

from integrations.exceptions import QuoteParseError
from integrations.market_data_protocol import NormalizedQuote, SymbolResolver
from integrations.morningstar_symbols import PROVIDER_NAME
from integrations.parsing_utils import convert_zone, parse_decimal, parse_zoned_datetime

# Element ids on the quote page. "curency" is spelled that way by the provider.
PRICE_FIELD_ID = "last-price-value"
CURRENCY_FIELD_ID = "curency"
AS_OF_FIELD_ID = "asOfDate"

AS_OF_FORMAT = "%m/%d/%Y %H:%M:%S"

# UK equities are quoted in pence.
MINOR_UNIT_CURRENCY = "GBX"
MINOR_UNIT_DIVISOR = Decimal(100)
# Also the scale of the stored price columns.
MAX_PRICE_PRECISION = 8

DEFAULT_SOURCE_ZONE = ZoneInfo("America/New_York")
DEFAULT_TARGET_ZONE = ZoneInfo("Europe/Vienna")

_MAX_PRECISION_QUANTUM = Decimal(1).scaleb(-MAX_PRICE_PRECISION)


def _field_text(soup: BeautifulSoup, field_id: str, provider_symbol: str) -> str:
    element = soup.find(id=field_id)
    if element is None:
        raise QuoteParseError(
            f"Field {field_id!r} missing from quote for {provider_symbol}",
            symbol=provider_symbol,
            field=field_id,
            provider_name=PROVIDER_NAME,
        )
    text = element.get_text(strip=True)
    if not text:
        raise QuoteParseError(
            f"Field {field_id!r} is empty in quote for {provider_symbol}",
            symbol=provider_symbol,
            field=field_id,
            provider_name=PROVIDER_NAME,
        )
    return text


def normalize_price(price: Decimal, currency: str | None) -> Decimal:
    """Convert a quoted price to major currency units.

    Prices quoted in pence (GBX) are divided by 100. The division is exact;
    only results finer than MAX_PRICE_PRECISION decimal places are rounded.
    """
    if currency is None or currency.upper() != MINOR_UNIT_CURRENCY:
        return price
    result = price / MINOR_UNIT_DIVISOR
    if result.as_tuple().exponent < -MAX_PRICE_PRECISION:
        result = result.quantize(_MAX_PRECISION_QUANTUM, rounding=ROUND_HALF_EVEN)
    return result


def parse_quote(
    document: str,
    provider_symbol: str,
    resolver: SymbolResolver,
    source_zone: ZoneInfo = DEFAULT_SOURCE_ZONE,
    target_zone: ZoneInfo = DEFAULT_TARGET_ZONE,
) -> NormalizedQuote:
    """Parse a quote page into a normalized quote.

    Args:
        document: Raw HTML returned by the quote source.
        provider_symbol: The symbol the document was fetched for.
        resolver: Maps ``provider_symbol`` back to the canonical ticker.
        source_zone: Zone the page's as-of wall-clock time is reported in.
        target_zone: Zone the returned timestamp is expressed in.

    Returns:
        The normalized quote.

    Raises:
        QuoteParseError: If the price, currency or as-of field is missing
            or cannot be parsed.
        SymbolResolutionError: If ``provider_symbol`` has no canonical ticker.
    """
    soup = BeautifulSoup(document or "", "html.parser")

    price_text = _field_text(soup, PRICE_FIELD_ID, provider_symbol)
    price = parse_decimal(price_text)
    if price is None or price < 0:
        raise QuoteParseError(
            f"Invalid price {price_text!r} for {provider_symbol}",
            symbol=provider_symbol,
            field=PRICE_FIELD_ID,
            provider_name=PROVIDER_NAME,
        )

    currency = _field_text(soup, CURRENCY_FIELD_ID, provider_symbol).upper()

    as_of_text = _field_text(soup, AS_OF_FIELD_ID, provider_symbol)
    as_of = parse_zoned_datetime(as_of_text, AS_OF_FORMAT, source_zone)
    if as_of is None:
        raise QuoteParseError(
            f"Invalid as-of date {as_of_text!r} for {provider_symbol}",
            symbol=provider_symbol,
            field=AS_OF_FIELD_ID,
            provider_name=PROVIDER_NAME,
        )

    # TODO: the as-of time could be expressed in the listing exchange's zone instead.
    return NormalizedQuote(
        symbol=resolver.to_canonical_symbol(provider_symbol),
        price=normalize_price(price, currency),
        timestamp=convert_zone(as_of, target_zone),
        currency=currency,
    )
