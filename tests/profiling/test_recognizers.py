from __future__ import annotations
from datetime import date, datetime

from dataclean.profiling.recognizers import (
    iban_checksum_ok,
    is_boolean,
    is_date,
    is_email,
    is_iban,
    is_number,
    is_phone,
    is_url,
    parse_number,
)


def test_parse_number_accepts_numbers_and_decimal_comma():
    assert parse_number(3) == 3.0
    assert parse_number("2,5") == 2.5
    assert parse_number(" -1.25 ") == -1.25
    assert parse_number("1e3") == 1000.0
    assert parse_number(True) is None
    assert parse_number("1,000.5") is None
    assert parse_number("abc") is None
    assert parse_number("+33612345678") is None


def test_dates_from_formats_and_objects():
    assert is_date("2024-01-05")
    assert is_date("05.02.2024")
    assert is_date(datetime(2024, 1, 1))
    assert is_date(date(2024, 1, 1))
    assert not is_date("20240105")
    assert not is_date(20240105)
    assert not is_date("hello")


def test_email_and_url():
    assert is_email("a@b.com")
    assert is_email("  someone@example.org ")
    assert not is_email("a@b")
    assert not is_email("a b@c.com")
    assert is_url("https://example.com/path?q=1")
    assert not is_url("example.com")
    assert not is_url("mailto:someone@example.org")


def test_phone_strict_uses_region():
    assert is_phone("+33612345678")
    assert is_phone("06 12 34 56 78", region="FR")
    assert is_phone("0033612345678", region="FR")
    assert not is_phone("12345")
    assert not is_phone("call me")


def test_phone_digits_mode():
    assert is_phone("12 34 56 78", mode="digits")
    assert not is_phone("1234567", mode="digits")
    assert not is_phone("1" * 16, mode="digits")


def test_iban_structure_and_checksum():
    assert is_iban("DE89370400440532013000")
    assert is_iban("fr14 2004 1010 0505 0001 3m02 606")
    assert not is_iban("DE89370400440532013001")  # checksum
    assert not is_iban("DE8937")
    assert iban_checksum_ok("GB82WEST12345698765432")


def test_boolean_tokens():
    for v in ("true", "FALSE", "yes", "no", "oui", "Non", "0", "1", True, 0, 1):
        assert is_boolean(v), v
    assert not is_boolean("maybe")
    assert is_boolean("vrai", extra_tokens=["vrai", "faux"])
