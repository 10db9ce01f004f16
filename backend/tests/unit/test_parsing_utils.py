"""Tests for shared parsing utilities."""

from datetime import datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from integrations.parsing_utils import convert_zone, parse_decimal, parse_zoned_datetime

NEW_YORK = ZoneInfo("America/New_York")
VIENNA = ZoneInfo("Europe/Vienna")


class TestParseDecimal:
    def test_plain(self):
        assert parse_decimal("123.45") == Decimal("123.45")

    def test_keeps_exact_digits(self):
        assert parse_decimal("0.1") + parse_decimal("0.2") == Decimal("0.3")

    def test_thousands_separator(self):
        assert parse_decimal("12,345.6") == Decimal("12345.6")

    def test_whitespace_and_nbsp(self):
        assert parse_decimal("\xa0 42.00 ") == Decimal("42.00")

    def test_decimal_and_int_passthrough(self):
        assert parse_decimal(Decimal("1.5")) == Decimal("1.5")
        assert parse_decimal(7) == Decimal(7)

    @pytest.mark.parametrize("value", [None, "", "   ", "abc", "1.2.3", "NaN", "-Infinity", Decimal("NaN")])
    def test_invalid_returns_none(self, value):
        assert parse_decimal(value) is None


class TestParseZonedDatetime:
    def test_attaches_source_zone(self):
        dt = parse_zoned_datetime("03/15/2024 16:00:00", "%m/%d/%Y %H:%M:%S", NEW_YORK)
        assert dt == datetime(2024, 3, 15, 16, 0, tzinfo=NEW_YORK)
        assert dt.utcoffset().total_seconds() == -4 * 3600

    def test_collapses_internal_whitespace(self):
        dt = parse_zoned_datetime(" 03/15/2024   16:00:00\n", "%m/%d/%Y %H:%M:%S", NEW_YORK)
        assert dt == datetime(2024, 3, 15, 16, 0, tzinfo=NEW_YORK)

    @pytest.mark.parametrize("value", [None, "", "yesterday", "15/03/2024 16:00:00"])
    def test_invalid_returns_none(self, value):
        assert parse_zoned_datetime(value, "%m/%d/%Y %H:%M:%S", NEW_YORK) is None


class TestConvertZone:
    def test_same_instant_new_zone(self):
        source = datetime(2024, 3, 15, 16, 0, tzinfo=NEW_YORK)
        result = convert_zone(source, VIENNA)
        assert result == source
        assert (result.hour, result.tzinfo) == (21, VIENNA)

    def test_utc_input(self):
        result = convert_zone(datetime(2024, 7, 1, 12, 0, tzinfo=timezone.utc), VIENNA)
        assert result.hour == 14

    def test_naive_rejected(self):
        with pytest.raises(ValueError):
            convert_zone(datetime(2024, 3, 15, 16, 0), VIENNA)
