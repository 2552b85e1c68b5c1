from __future__ import annotations

from datetime import date

import pytest

from agegate.gate.dob import (
    InvalidDate,
    InvalidDob,
    InvalidFormat,
    age_from_iso,
    normalize_dob,
)


@pytest.mark.parametrize(
    "raw",
    ["09/23/1980", "09-23-1980", "09231980", " 09.23.1980 ", "09 23 1980"],
)
def test_mdy_separators_collapse_to_digits(raw):
    assert normalize_dob(raw, "mdy") == "1980-09-23"


def test_dmy_reads_day_first():
    assert normalize_dob("23/09/1980", "dmy") == "1980-09-23"
    assert normalize_dob("23091980", "dmy") == "1980-09-23"


def test_same_digits_split_differently_by_ordering():
    assert normalize_dob("03041999", "mdy") == "1999-03-04"
    assert normalize_dob("03041999", "dmy") == "1999-04-03"


def test_orderings_coincide_when_day_equals_month():
    assert normalize_dob("05051990", "mdy") == normalize_dob("05051990", "dmy") == "1990-05-05"


@pytest.mark.parametrize("fmt", ["mdy", "dmy", "bogus"])
def test_iso_input_passes_through_any_ordering(fmt):
    assert normalize_dob("1980-09-23", fmt) == "1980-09-23"
    assert normalize_dob("  2000-02-29 ", fmt) == "2000-02-29"


def test_iso_input_still_checks_the_calendar():
    with pytest.raises(InvalidDate):
        normalize_dob("2019-02-29", "dmy")


def test_impossible_calendar_date_fails():
    with pytest.raises(InvalidDate):
        normalize_dob("02302020", "mdy")
    with pytest.raises(InvalidDate):
        normalize_dob("02/30/2020", "mdy")


def test_month_and_day_out_of_range():
    with pytest.raises(InvalidDate):
        normalize_dob("13/45/2020", "mdy")
    with pytest.raises(InvalidDate):
        normalize_dob("01/13/2020", "dmy")


def test_leap_day():
    assert normalize_dob("02292020", "mdy") == "2020-02-29"
    with pytest.raises(InvalidDate):
        normalize_dob("02291900", "mdy")


@pytest.mark.parametrize("raw", ["01011899", "01012101"])
def test_year_bounds(raw):
    with pytest.raises(InvalidDate):
        normalize_dob(raw, "mdy")


@pytest.mark.parametrize("raw", ["", "   ", "1/2/80", "0101199", "010119900", "abc", "1980-9-23"])
def test_wrong_digit_count_is_format_error(raw):
    with pytest.raises(InvalidFormat):
        normalize_dob(raw, "mdy")


def test_failures_are_value_errors():
    with pytest.raises(ValueError):
        normalize_dob("02302020", "mdy")
    assert issubclass(InvalidFormat, InvalidDob)
    assert issubclass(InvalidDate, InvalidDob)


def test_non_string_input():
    with pytest.raises(InvalidFormat):
        normalize_dob(None, "mdy")  # type: ignore[arg-type]


def test_unknown_ordering_reads_as_mdy():
    assert normalize_dob("03041999", "ymd") == "1999-03-04"


def test_age_counts_only_reached_birthdays():
    today = date(2024, 6, 1)
    assert age_from_iso("1995-01-15", today) == 29
    assert age_from_iso("1995-06-01", today) == 29
    assert age_from_iso("1995-06-02", today) == 28
    assert age_from_iso("2010-01-15", today) == 14


def test_age_for_leap_day_birthday():
    assert age_from_iso("2004-02-29", date(2023, 2, 28)) == 18
    assert age_from_iso("2004-02-29", date(2023, 3, 1)) == 19
    assert age_from_iso("2004-02-29", date(2024, 2, 29)) == 20


def test_age_never_negative():
    assert age_from_iso("2099-01-01", date(2024, 6, 1)) == 0
    assert age_from_iso("2024-06-01", date(2024, 6, 1)) == 0


@pytest.mark.parametrize(
    "raw",
    [
        "٠١١٥١٩٩٥",  # Arabic-Indic 01151995
        "０１１５１９９５",  # full-width 01151995
        "١٩٩٥-٠١-١٥",  # Arabic-Indic 1995-01-15
    ],
)
def test_only_ascii_digits_count(raw):
    with pytest.raises(InvalidFormat):
        normalize_dob(raw, "mdy")
