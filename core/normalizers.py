"""Cell normalizers for hand-maintained spreadsheets.

Cells arrive as whatever openpyxl/pandas produced: native dates, numbers
(including spreadsheet serials and fractional days), or free text typed in by
staff. Every helper degrades to an empty value instead of raising.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, time, timedelta
from numbers import Number
from typing import Optional, Tuple

import pandas as pd


EXCEL_EPOCH = datetime(1899, 12, 30)
MIN_YEAR = 1900
MAX_YEAR = 2100

GENDER_AGE_RE = re.compile(r"(\d+)\s*/\s*([a-zA-Z]+)")
DIGITS_RE = re.compile(r"^\d+$")


def _is_number(value: object) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def _is_blank(value: object) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if _is_number(value):
        return bool(pd.isna(value))
    return value is pd.NaT or value is pd.NA


def _cell_text(value: object) -> str:
    """Render a cell as text, without a trailing ``.0`` on integral floats."""
    if _is_number(value):
        number = float(value)  # type: ignore[arg-type]
        if math.isfinite(number) and number.is_integer():
            return str(int(number))
    return str(value).strip()


def clean_string(value: object) -> str:
    if value is None:
        return ""
    if _is_number(value) and pd.isna(value):
        return ""
    if value is pd.NaT or value is pd.NA:
        return ""
    return _cell_text(value)


def to_number(value: object, default: float = 0) -> float:
    """Coerce a cell to a number; blanks and junk fall back to ``default``."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        number = pd.to_numeric(value, errors="coerce")
    except (TypeError, ValueError):
        return default
    if pd.isna(number):
        return default
    number = float(number)
    if not math.isfinite(number):
        return default
    return int(number) if number.is_integer() else number


def is_present(value: object) -> bool:
    if _is_blank(value):
        return False
    if _is_number(value):
        return value != 0
    return bool(value)


def parse_excel_date(value: object) -> Optional[date]:
    if _is_blank(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime().date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if _is_number(value):
        try:
            return (EXCEL_EPOCH + timedelta(days=float(value))).date()  # type: ignore[arg-type]
        except (OverflowError, ValueError):
            return None
    if isinstance(value, str):
        parsed = pd.to_datetime(value.strip(), errors="coerce")
        if pd.isna(parsed):
            return None
        return parsed.to_pydatetime().date()
    return None


def excel_date_to_iso(value: object) -> str:
    parsed = parse_excel_date(value)
    if parsed is None:
        return ""
    if parsed.year < MIN_YEAR or parsed.year > MAX_YEAR:
        return ""
    return parsed.isoformat()[:10]


def excel_time_to_string(value: object) -> str:
    if value is pd.NaT:
        return ""
    if isinstance(value, (time, datetime)):
        return f"{value.hour:02d}:{value.minute:02d}"
    if _is_number(value):
        if pd.isna(value) or not math.isfinite(float(value)):  # type: ignore[arg-type]
            return ""
        # Half minutes round up.
        total_minutes = math.floor(float(value) * 24 * 60 + 0.5)  # type: ignore[arg-type]
        hours, minutes = divmod(total_minutes, 60)
        return f"{hours:02d}:{minutes:02d}"
    if isinstance(value, str):
        return value.strip()
    return ""


def normalize_gender(value: object) -> str:
    if not isinstance(value, str):
        return ""
    text = value.strip()
    if not text:
        return ""
    letter = text[0].lower()
    if letter == "m":
        return "Male"
    if letter == "f":
        return "Female"
    return text[0].upper() + text[1:].lower()


def split_gender_age(value: object) -> Tuple[Optional[int], str]:
    """Split a combined ``"34 / Male"`` cell into ``(age, gender)``.

    Tried in order: ``<digits>/<letters>`` anywhere in the text, digits only
    (age without gender), then the whole text as a gender token.
    """
    if _is_blank(value) or value == 0:
        return None, ""
    text = _cell_text(value)
    if not text:
        return None, ""
    match = GENDER_AGE_RE.search(text)
    if match:
        return int(match.group(1)), normalize_gender(match.group(2))
    if DIGITS_RE.match(text):
        return int(text), ""
    return None, normalize_gender(text)


def describe_rating(value: float) -> str:
    if value >= 4.5:
        return "Excellent"
    if value >= 3:
        return "Good"
    if value > 0:
        return "Needs Support"
    return "Unrated"
