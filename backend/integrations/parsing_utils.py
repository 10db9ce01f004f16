"""Shared parsing utilities for quote providers.

Centralises the number and date/time parsing that provider responses need:
locale-formatted decimal strings and wall-clock timestamps reported in a
provider's home time zone.
"""

from datetime import datetime, tzinfo
from decimal import Decimal, InvalidOperation


def parse_decimal(value) -> Decimal | None:
    """Parse a provider-formatted number to an exact Decimal.

    Handles the formats quote pages produce:
    - Plain decimals ("123.45")
    - Thousands separators ("1,234.50")
    - Surrounding whitespace and non-breaking spaces

    Args:
        value: A string, int, Decimal, or None.

    Returns:
        A finite Decimal, or None if the value cannot be parsed.
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)

    value_str = str(value).replace("\xa0", " ").strip().replace(",", "")
    if not value_str:
        return None

    try:
        result = Decimal(value_str)
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def parse_zoned_datetime(value, fmt: str, source_zone: tzinfo) -> datetime | None:
    """Parse a naive wall-clock string and attach the zone it was reported in.

    Args:
        value: The date/time text, e.g. "03/15/2024 16:00:00".
        fmt: A ``strptime`` format string.
        source_zone: The zone the wall-clock time is expressed in.

    Returns:
        A timezone-aware datetime, or None if the value cannot be parsed.
    """
    if value is None:
        return None
    value_str = " ".join(str(value).split())
    if not value_str:
        return None
    try:
        naive = datetime.strptime(value_str, fmt)
    except (ValueError, TypeError):
        return None
    return naive.replace(tzinfo=source_zone)


def convert_zone(dt: datetime, target_zone: tzinfo) -> datetime:
    """Express an aware datetime in another zone without changing the instant.

    Args:
        dt: A timezone-aware datetime.
        target_zone: The zone to express the instant in.

    Returns:
        The same instant with ``target_zone`` as its tzinfo.

    Raises:
        ValueError: If ``dt`` is naive.
    """
    if dt.tzinfo is None:
        raise ValueError("convert_zone() requires a timezone-aware datetime")
    return dt.astimezone(target_zone)
