from __future__ import annotations

from datetime import date

import pandas as pd


MISSING = "—"


def _group_indian(digits: str) -> str:
    """``1234567`` -> ``12,34,567`` (last three digits, then pairs)."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def currency_inr(amount: object) -> str:
    try:
        value = float(amount)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        value = 0.0
    if pd.isna(value):
        value = 0.0
    rounded = int(round(abs(value)))
    sign = "-" if value < 0 and rounded else ""
    return f"{sign}₹{_group_indian(str(rounded))}"


def parse_iso_date(value: object) -> date | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    parsed = pd.to_datetime(value, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.date()


def format_date(value: object) -> str:
    parsed = parse_iso_date(value)
    if parsed is None:
        text = "" if value is None else str(value)
        return text or MISSING
    return parsed.strftime("%d %b %Y")


def month_label(year: int, month: int) -> str:
    return date(year, month, 1).strftime("%b %Y")
