import datetime as dt
import pandas as pd
from dataclean.utils.time import parse_any_datetime, as_calendar_date, to_timezone

def test_parse_any_datetime_formats_and_fallback():
    assert parse_any_datetime("2024-01-31").date().isoformat() == "2024-01-31"
    assert parse_any_datetime("01/31/2024").date().isoformat() == "2024-01-31"
    assert parse_any_datetime("2024-01-31 12:34:56").isoformat().startswith("2024-01-31T12:34:56")
    assert parse_any_datetime("not a date") is None
    assert parse_any_datetime("   ") is None

def test_fallback_only_for_date_shaped_text():
    # not in the format list, but date-shaped
    assert parse_any_datetime("31 January 2024").date().isoformat() == "2024-01-31"
    assert parse_any_datetime("12345") is None

def test_as_calendar_date_accepts_datetime_likes():
    assert as_calendar_date(dt.datetime(2024, 5, 6, 7, 8)) == dt.date(2024, 5, 6)
    assert as_calendar_date(pd.Timestamp("2024-05-06")) == dt.date(2024, 5, 6)
    assert as_calendar_date(pd.NaT) is None
    assert as_calendar_date(20240506) is None
    assert as_calendar_date("05.02.2024") == dt.date(2024, 2, 5)

def test_timezone_conversion_localize_and_convert():
    naive = dt.datetime(2024, 1, 1, 12, 0, 0)
    paris = to_timezone(naive, "Europe/Paris")
    assert paris.tzinfo is not None
    assert paris.hour == 12
    back = to_timezone(paris, "UTC")
    assert back.hour == 11
