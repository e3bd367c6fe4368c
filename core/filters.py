from __future__ import annotations

from dataclasses import dataclass
from numbers import Number
from typing import Any, Dict, List, Mapping, Optional, Sequence


@dataclass(frozen=True)
class TableFilters:
    search: str = ""
    sort_key: Optional[str] = None
    direction: str = "asc"


def normalize_table_filters(raw: Mapping[str, Any]) -> TableFilters:
    search = str(raw.get("search") or raw.get("q") or "").strip()

    sort_key = raw.get("sort_key") or raw.get("sort")
    sort_key = str(sort_key).strip() if sort_key else None

    direction = str(raw.get("direction") or "asc").strip().lower()
    if direction not in {"asc", "desc"}:
        direction = "asc"
    return TableFilters(search=search, sort_key=sort_key or None, direction=direction)


def _matches(row: Mapping[str, Any], needle: str) -> bool:
    return any(needle in str(value).lower() for value in row.values())


def _sort_value(value: Any) -> Any:
    # Mixed numbers and text in one column sort numbers first.
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, Number):
        return (0, value)
    return (1, str(value))


def apply_table_filters(records: Sequence[Mapping[str, Any]], filters: TableFilters) -> List[Dict[str, Any]]:
    """Case-insensitive search across every column, then a stable sort with blanks last."""
    needle = filters.search.lower()
    rows = [dict(r) for r in records if not needle or _matches(r, needle)]
    if not filters.sort_key:
        return rows

    key = filters.sort_key
    present = [r for r in rows if r.get(key) is not None]
    missing = [r for r in rows if r.get(key) is None]
    present.sort(key=lambda r: _sort_value(r[key]), reverse=filters.direction == "desc")
    return present + missing
