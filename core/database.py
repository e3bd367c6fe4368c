"""
PostgreSQL access for the database backend.

One lazily created psycopg connection pool serves every resource table.
Table and column names come from the fixed resource table and request
bodies, so they are always composed as identifiers, never interpolated.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional

from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from core.config import Settings, get_settings


logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class DatabaseClient:
    """Generic per-table row access over a connection pool."""

    def __init__(self, settings: Optional[Settings] = None, pool: Optional[ConnectionPool] = None):
        self._settings = settings or get_settings()
        self._pool = pool
        self._lock = threading.Lock()

    @property
    def pool(self) -> ConnectionPool:
        with self._lock:
            if self._pool is None:
                self._pool = ConnectionPool(
                    conninfo=self._settings.dsn,
                    min_size=self._settings.db_pool_min,
                    max_size=self._settings.db_pool_max,
                    open=True,
                )
            return self._pool

    def _fetch(self, query: sql.Composable, params: Any = None, *, many: bool = False) -> Any:
        with self.pool.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params)
                if many:
                    return cur.fetchall()
                return cur.fetchone()

    def list_rows(self, table: str, order_by: str, *, descending: bool = True) -> List[Row]:
        query = sql.SQL("SELECT * FROM {table} ORDER BY {order} {direction}").format(
            table=sql.Identifier(table),
            order=sql.Identifier(order_by),
            direction=sql.SQL("DESC" if descending else "ASC"),
        )
        rows = self._fetch(query, many=True)
        logger.debug("Fetched %d rows from %s", len(rows), table)
        return rows

    def insert_row(self, table: str, values: Mapping[str, Any]) -> Row:
        if values:
            query = sql.SQL("INSERT INTO {table} ({columns}) VALUES ({placeholders}) RETURNING *").format(
                table=sql.Identifier(table),
                columns=sql.SQL(", ").join(sql.Identifier(col) for col in values),
                placeholders=sql.SQL(", ").join(sql.Placeholder() for _ in values),
            )
        else:
            query = sql.SQL("INSERT INTO {table} DEFAULT VALUES RETURNING *").format(table=sql.Identifier(table))
        return self._fetch(query, list(values.values()))

    def update_row(self, table: str, row_id: Any, values: Mapping[str, Any]) -> Optional[Row]:
        if not values:
            query = sql.SQL("SELECT * FROM {table} WHERE id = %s").format(table=sql.Identifier(table))
            return self._fetch(query, [row_id])
        assignments = sql.SQL(", ").join(
            sql.SQL("{col} = %s").format(col=sql.Identifier(col)) for col in values
        )
        query = sql.SQL("UPDATE {table} SET {assignments} WHERE id = %s RETURNING *").format(
            table=sql.Identifier(table),
            assignments=assignments,
        )
        return self._fetch(query, [*values.values(), row_id])

    def delete_row(self, table: str, row_id: Any) -> Optional[Row]:
        query = sql.SQL("DELETE FROM {table} WHERE id = %s RETURNING *").format(table=sql.Identifier(table))
        return self._fetch(query, [row_id])

    def close(self) -> None:
        with self._lock:
            if self._pool is not None:
                self._pool.close()
                self._pool = None


__all__ = ["DatabaseClient"]
