from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.hrm_system.hrm_system.common.datetime_utils import (
    CompanyClock,
    get_zone,
    month_bounds,
    parse_date_arg,
    parse_hhmm,
    parse_instant,
)
from src.hrm_system.hrm_system.core.exceptions import ValidationError

KOLKATA = get_zone("Asia/Kolkata")


def test_parse_instant_reads_naive_strings_as_company_time():
    assert parse_instant("2026-03-04T09:00:00", KOLKATA) == datetime(2026, 3, 4, 3, 30)
    assert parse_instant("2026-03-04T09:00:00Z", KOLKATA) == datetime(2026, 3, 4, 9, 0)
    assert parse_instant("2026-03-04T09:00:00+07:00", KOLKATA) == datetime(2026, 3, 4, 2, 0)
    assert parse_instant("  ", KOLKATA) is None
    with pytest.raises(ValidationError):
        parse_instant("yesterday", KOLKATA)


def test_clock_local_date_differs_from_utc_date():
    clock = CompanyClock("Asia/Kolkata", now_fn=lambda: datetime(2026, 3, 4, 20, 0))

    assert clock.today() == date(2026, 3, 5)
    assert clock.to_utc(date(2026, 3, 5), time(1, 30)) == datetime(2026, 3, 4, 20, 0)


def test_unknown_timezone_is_rejected():
    with pytest.raises(ValidationError):
        get_zone("Mars/Olympus")


def test_month_bounds():
    assert month_bounds(2028, 2) == (date(2028, 2, 1), date(2028, 2, 29))
    with pytest.raises(ValidationError):
        month_bounds(2026, 0)


def test_parse_helpers():
    assert parse_date_arg(None, "date", date(2026, 1, 1)) == date(2026, 1, 1)
    assert parse_hhmm("07:45") == time(7, 45)
    with pytest.raises(ValidationError):
        parse_date_arg("03/04/2026", "date")
    with pytest.raises(ValidationError):
        parse_hhmm("25:00")
