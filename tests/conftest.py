"""
Pytest configuration for the foundation dashboard.

Provides fixtures for:
- Settings pointed at a temporary data directory
- A workbook cache whose reader serves in-memory sheets
- A fake database client for the database backend
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pandas as pd
import pytest

from core.config import Settings
from core.workbook import WorkbookCache


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path, data_backend="spreadsheet", log_level="DEBUG")


@pytest.fixture
def sheets() -> Dict[str, Dict[str, pd.DataFrame]]:
    """File name -> {sheet name -> DataFrame} served by the fake reader."""
    return {}


@pytest.fixture
def workbook_cache(sheets: Dict[str, Dict[str, pd.DataFrame]]) -> WorkbookCache:
    return WorkbookCache(reader=lambda path: sheets[path.name])


@pytest.fixture
def add_sheet(test_settings: Settings, sheets: Dict[str, Dict[str, pd.DataFrame]]) -> Callable[..., Path]:
    """Register a sheet under one of the workbook files and touch the file on disk."""

    def _add(file_name: str, sheet_name: str, rows: List[Dict[str, Any]]) -> Path:
        path = test_settings.data_dir / file_name
        path.touch()
        sheets.setdefault(file_name, {})[sheet_name] = pd.DataFrame(rows)
        return path

    return _add


class FakeDatabaseClient:
    """Records calls and serves rows from in-memory tables."""

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None, error: Optional[Exception] = None):
        self.tables = tables or {}
        self.error = error
        self.calls: List[tuple] = []
        self._next_id = 100

    def _maybe_fail(self) -> None:
        if self.error is not None:
            raise self.error

    def list_rows(self, table: str, order_by: str, *, descending: bool = True) -> List[Dict[str, Any]]:
        self.calls.append(("list", table, order_by, descending))
        self._maybe_fail()
        return sorted(self.tables.get(table, []), key=lambda r: r.get(order_by) or "", reverse=descending)

    def insert_row(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("insert", table, dict(values)))
        self._maybe_fail()
        self._next_id += 1
        row = {"id": self._next_id, **values}
        self.tables.setdefault(table, []).append(row)
        return row

    def update_row(self, table: str, row_id: Any, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        self.calls.append(("update", table, row_id, dict(values)))
        self._maybe_fail()
        for row in self.tables.get(table, []):
            if row["id"] == row_id:
                row.update(values)
                return row
        return None

    def delete_row(self, table: str, row_id: Any) -> Optional[Dict[str, Any]]:
        self.calls.append(("delete", table, row_id))
        self._maybe_fail()
        rows = self.tables.get(table, [])
        for idx, row in enumerate(rows):
            if row["id"] == row_id:
                return rows.pop(idx)
        return None

    def close(self) -> None:
        self.calls.append(("close",))


@pytest.fixture
def fake_db() -> FakeDatabaseClient:
    return FakeDatabaseClient(
        tables={
            "staff": [
                {"id": 1, "name": "Asha", "department": "Care", "status": "Active", "created_at": "2025-01-01T10:00:00"},
                {"id": 2, "name": "Ravi", "department": "Kitchen", "status": "Retired", "created_at": "2025-02-01T10:00:00"},
            ],
            "medical_records": [
                {"id": 7, "patient_name": "Meera", "age": 71, "created_at": "2025-03-01T09:00:00"},
            ],
        }
    )
