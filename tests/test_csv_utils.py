"""CSV reading helpers and broker number/date parsing."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from core.helpers.validation import coerce_number, parse_number, round_money, safe_ratio
from importers.csv_utils import (
    decode_bytes,
    find_header_index,
    normalize_header,
    parse_datetime,
    read_rows,
    read_table,
    sniff_delimiter,
)


class TestParseNumber:
    @pytest.mark.parametrize("raw,expected", [
        ("1,234.50", 1234.5),
        ("$1,234.50", 1234.5),
        ("(12.00)", -12.0),
        ("$(25.00)", -25.0),
        ("-$3.10", -3.1),
        ("5-", -5.0),
        ("−3", -3.0),
        ("+7", 7.0),
        ("1.5e3", 1500.0),
        (".25", 0.25),
        (" 42 USD", 42.0),
        ("", None),
        ("n/a", None),
        (None, None),
        (float("inf"), None),
        (3, 3.0),
    ])
    def test_parse(self, raw, expected):
        assert parse_number(raw) == expected

    def test_coerce(self):
        assert coerce_number("oops") == 0.0
        assert coerce_number(None) == 0.0
        assert coerce_number("12") == 12.0

    def test_ratio_and_rounding(self):
        assert safe_ratio(1, 0) == 0.0
        assert safe_ratio(1, 4) == 0.25
        assert round_money(-0.001) == 0.0
        assert round_money(None) is None


class TestReading:
    def test_decode_falls_back_to_cp1252(self):
        assert decode_bytes("Café".encode("cp1252")) == "Café"
        assert decode_bytes("\ufeffSymbol".encode("utf-8")) == "Symbol"

    def test_normalize_header(self):
        assert normalize_header('\ufeff"Entry  Price " ') == "entry price"
        assert normalize_header(None) == ""

    @pytest.mark.parametrize("text,expected", [
        ("a,b,c\n1,2,3\n", ","),
        ("a;b;c\n1;2;3\n", ";"),
        ("a\tb\tc\n1\t2\t3\n", "\t"),
    ])
    def test_sniff_delimiter(self, text, expected):
        assert sniff_delimiter(text) == expected

    def test_header_after_preamble(self):
        text = (
            '"Transactions for account XXXX-1234 as of 03/05/2024"\n'
            "\n"
            "Date,Action,Symbol,Quantity,Price\n"
            "03/04/2024,Buy,AAPL,10,$180.00\n"
        )
        rows = read_rows(text)
        assert find_header_index(rows) == 2
        assert find_header_index(rows, {"nothing"}) == -1

        table = read_table(text)
        assert table.header == ["date", "action", "symbol", "quantity", "price"]
        [row] = table.rows
        assert row.number == 4
        assert row.get("symbol") == "AAPL"
        assert row.number_of("price") == 180.0

    def test_short_rows_padded_and_blank_rows_dropped(self):
        table = read_table("symbol,side,qty,price\nES,buy,1\n,,,\n")
        [row] = table.rows
        assert row.get("price") == ""
        assert row.number_of("price") is None
        assert row.get("missing", "qty") == "1"
        assert table.has("symbol", "qty")


class TestParseDatetime:
    @pytest.mark.parametrize("raw,expected", [
        ("2024-03-04 14:30:00", datetime(2024, 3, 4, 14, 30)),
        ("2024-03-04T14:30:00Z", datetime(2024, 3, 4, 14, 30)),
        ("2024-03-04T09:30:00-0500", datetime(2024, 3, 4, 14, 30)),
        ("03/04/2024 14:30:00", datetime(2024, 3, 4, 14, 30)),
        ("3/4/2024 2:30:00 PM", datetime(2024, 3, 4, 14, 30)),
        ("03/04/24 14:30", datetime(2024, 3, 4, 14, 30)),
        ("2024-03-04, 14:30:00", datetime(2024, 3, 4, 14, 30)),
        ("20240304;143000", datetime(2024, 3, 4, 14, 30)),
        ("03/04/2024 as of 03/01/2024", datetime(2024, 3, 4)),
        ("25/03/2024 10:00", datetime(2024, 3, 25, 10, 0)),
    ])
    def test_formats_as_utc(self, raw, expected):
        assert parse_datetime(raw) == expected.replace(tzinfo=timezone.utc)

    def test_zone_suffix(self):
        assert parse_datetime("03/04/2024 09:30:00 EST") == datetime(2024, 3, 4, 14, 30, tzinfo=timezone.utc)

    def test_default_timezone(self):
        parsed = parse_datetime("2024-07-01 09:30:00", default_tz=ZoneInfo("America/New_York"))
        assert parsed == datetime(2024, 7, 1, 13, 30, tzinfo=timezone.utc)

    def test_unparseable(self):
        assert parse_datetime("yesterday") is None
        assert parse_datetime("") is None
