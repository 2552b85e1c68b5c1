"""
Date-of-birth parsing and age arithmetic.

Accepted inputs:
  - 09/23/1980, 09-23-1980, 09231980   (mdy)
  - 23/09/1980, 23.09.1980, 23091980   (dmy)
  - 1980-09-23                         (ISO, always accepted)
"""
from __future__ import annotations

import re
from datetime import date
from typing import Optional

ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)
NON_DIGITS = re.compile(r"\D+", re.ASCII)

MIN_YEAR = 1900
MAX_YEAR = 2100


class InvalidDob(ValueError):
    pass


class InvalidFormat(InvalidDob):
    """Not ISO and not exactly eight digits."""


class InvalidDate(InvalidDob):
    """Right shape, but no such calendar date (or year out of range)."""


def _to_date(year: int, month: int, day: int) -> date:
    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidDate(f"no such date: {year:04d}-{month:02d}-{day:02d}") from e


def normalize_dob(raw, date_format: str = "mdy") -> str:
    """
    Return the DOB as YYYY-MM-DD or raise InvalidDob.
    Any date_format other than "dmy" is read as "mdy".
    """
    if not isinstance(raw, str):
        raise InvalidFormat("date of birth must be a string")
    raw = raw.strip()

    if ISO_RE.match(raw):
        y, m, d = (int(part) for part in raw.split("-"))
        return _to_date(y, m, d).isoformat()

    digits = NON_DIGITS.sub("", raw)
    if len(digits) != 8:
        raise InvalidFormat(f"expected 8 digits, got {len(digits)}")

    if date_format == "dmy":
        d, m, y = int(digits[0:2]), int(digits[2:4]), int(digits[4:8])
    else:
        m, d, y = int(digits[0:2]), int(digits[2:4]), int(digits[4:8])

    if not (1 <= m <= 12) or not (MIN_YEAR <= y <= MAX_YEAR):
        raise InvalidDate(f"month or year out of range: {m:02d}/{y:04d}")
    return _to_date(y, m, d).isoformat()


def age_from_iso(dob_iso: str, today: Optional[date] = None) -> int:
    """Whole years between dob_iso and today. Future dates give 0."""
    dob = date.fromisoformat(dob_iso)
    today = today or date.today()
    age = today.year - dob.year - ((today.month, today.day) < (dob.month, dob.day))
    return max(0, age)
