"""Workbook loading with a modification-time keyed cache.

A workbook is parsed once per file state: the cache keeps the last parse of
each path together with the file's mtime and re-reads the file only when the
mtime changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Callable, Dict, List, Union

import pandas as pd


logger = logging.getLogger(__name__)

Workbook = Dict[str, pd.DataFrame]
PathLike = Union[str, Path]


class WorkbookNotFoundError(FileNotFoundError):
    pass


def read_workbook(path: Path) -> Workbook:
    """Parse every sheet of ``path``; the first row of a sheet is its header."""
    return pd.read_excel(path, sheet_name=None, header=0, engine="openpyxl")


def sheet_records(df: pd.DataFrame) -> List[Dict[str, object]]:
    """Rows of a sheet as header -> value dicts, blank cells as ``""``."""
    if df.empty:
        return []
    df = df.dropna(how="all")
    df = df.astype(object).where(df.notna(), "")
    df.columns = [str(c) for c in df.columns]
    return df.to_dict(orient="records")


@dataclass
class CachedWorkbook:
    workbook: Workbook
    mtime: float


class WorkbookCache:
    """Path -> parsed workbook cache, invalidated by file modification time.

    No eviction and no locking: two requests that both see a stale mtime may
    both reload the file, which only repopulates the same entry.
    """

    def __init__(self, reader: Callable[[Path], Workbook] = read_workbook):
        self._reader = reader
        self._entries: Dict[str, CachedWorkbook] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return self._key(path) in self._entries

    @staticmethod
    def _key(path: PathLike) -> str:
        return str(Path(path).resolve())

    def load(self, path: PathLike) -> Workbook:
        path = Path(path)
        if not path.exists():
            logger.error("Excel file not found: %s", path)
            raise WorkbookNotFoundError(f"File not found: {path}")

        mtime = path.stat().st_mtime
        key = self._key(path)
        cached = self._entries.get(key)
        if cached is not None and cached.mtime == mtime:
            return cached.workbook

        logger.info("Loading Excel file: %s", path)
        workbook = self._reader(path)
        self._entries[key] = CachedWorkbook(workbook=workbook, mtime=mtime)
        return workbook

    def rows(self, path: PathLike, sheet_name: str) -> List[Dict[str, object]]:
        try:
            workbook = self.load(path)
            sheet = workbook.get(sheet_name)
            if sheet is None:
                logger.warning(
                    "Sheet %r not found in %s. Available sheets: %s",
                    sheet_name,
                    path,
                    list(workbook.keys()),
                )
                return []
            rows = sheet_records(sheet)
            logger.info("Loaded %d rows from sheet %r in %s", len(rows), sheet_name, Path(path).name)
            return rows
        except Exception:
            logger.exception("Error reading rows from %s, sheet %r", path, sheet_name)
            return []

    def clear(self) -> None:
        self._entries.clear()
        logger.info("Workbook cache cleared")


@lru_cache(maxsize=1)
def get_workbook_cache() -> WorkbookCache:
    """Process-wide cache used by the API and the Streamlit app."""
    return WorkbookCache()


__all__ = [
    "CachedWorkbook",
    "Workbook",
    "WorkbookCache",
    "WorkbookNotFoundError",
    "get_workbook_cache",
    "read_workbook",
    "sheet_records",
]
