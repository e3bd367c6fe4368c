"""Core (UI-agnostic) dashboard logic.

This package contains:
- workbook loading and caching (XLSX -> pandas)
- cell normalizers and the six spreadsheet record builders
- the resource dispatch table and its spreadsheet / database backends
- table search and dashboard summaries (Altair -> Vega-Lite spec dict)
"""
