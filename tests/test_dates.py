from datetime import date

import pytest

from ganttr.dates import add_days, difference_in_days, format_date, parse_date
from ganttr.exceptions import InvalidDateError


def test_difference_in_days_sign():
    assert difference_in_days("2024-01-01", "2024-01-05") == 4
    assert difference_in_days("2024-01-05", "2024-01-01") == -4
    assert difference_in_days("2024-01-01", "2024-01-01") == 0


def test_difference_across_dst_and_leap_day():
    # US and EU DST changes fall in March; leap day in 2024
    assert difference_in_days("2024-02-28", "2024-03-31") == 32
    assert difference_in_days("2024-10-26", "2024-10-28") == 2


def test_add_days():
    assert add_days("2024-01-31", 1) == "2024-02-01"
    assert add_days("2024-03-01", -1) == "2024-02-29"
    assert add_days("2024-12-31", 1) == "2025-01-01"
    assert add_days("2024-01-10", 0) == "2024-01-10"


def test_parse_and_format():
    assert parse_date("2024-07-04") == date(2024, 7, 4)
    assert parse_date(date(2024, 7, 4)) == date(2024, 7, 4)
    assert format_date(date(2024, 7, 4)) == "2024-07-04"


@pytest.mark.parametrize("bad", ["2024-02-30", "07/04/2024", "", "tomorrow"])
def test_parse_rejects_invalid(bad):
    with pytest.raises(InvalidDateError):
        parse_date(bad)
