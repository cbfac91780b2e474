"""Tests for year/month period arithmetic."""

from datetime import date

import pytest

from carteira.utils.periods import next_period, normalize_month, period_end_date, previous_period


@pytest.mark.parametrize(("month", "expected"), [("3", "03"), (3, "03"), ("12", "12"), ("07", "07")])
def test_normalize_month(month, expected) -> None:
    assert normalize_month(month) == expected


def test_period_end_date() -> None:
    assert period_end_date("2024", "03") == date(2024, 3, 31)
    assert period_end_date(2023, 11) == date(2023, 11, 30)


def test_period_end_date_leap_february() -> None:
    assert period_end_date("2024", "02") == date(2024, 2, 29)
    assert period_end_date("2023", "02") == date(2023, 2, 28)


def test_previous_period() -> None:
    assert previous_period("2024", "03") == ("2024", "02")
    assert previous_period(2024, 10) == ("2024", "09")


def test_previous_period_wraps_year() -> None:
    assert previous_period("2024", "01") == ("2023", "12")


def test_next_period() -> None:
    assert next_period("2024", "03") == ("2024", "04")
    assert next_period("2024", "12") == ("2025", "01")


def test_next_and_previous_are_inverse() -> None:
    for month in range(1, 13):
        assert previous_period(*next_period("2024", month)) == ("2024", normalize_month(month))
