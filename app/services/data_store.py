"""Generic table access over the shared Supabase client.

Every read and write the API performs goes through DataStore: create, read,
update and delete by table name with simple filter predicates. All methods
are synchronous; the supabase-py client is blocking.
"""

import threading
import time
from dataclasses import dataclass
from typing import Any

from supabase import Client, create_client

from app.config import get_settings
from app.core.logging import log_db_query, log_error

_supabase: Client | None = None
_client_lock = threading.Lock()

# Filter operators understood by DataStore; "not_is" negates "is"
FILTER_OPS = ("eq", "neq", "gt", "gte", "lt", "lte", "ilike", "is", "not_is")


def get_supabase_client() -> Client:
    """Get or create the shared Supabase client (thread-safe)."""
    global _supabase
    if _supabase is None:
        with _client_lock:
            if _supabase is None:
                settings = get_settings()
                _supabase = create_client(settings.supabase_url, settings.supabase_key)
    return _supabase


class DataStoreError(Exception):
    """A backend read or write failed."""

    def __init__(self, operation: str, table: str, message: str):
        super().__init__(f"{operation} on {table} failed: {message}")
        self.operation = operation
        self.table = table


@dataclass(frozen=True)
class Filter:
    """A single column predicate, e.g. Filter("user_id", "eq", uid)."""

    column: str
    op: str = "eq"
    value: Any = None

    def __post_init__(self) -> None:
        if self.op not in FILTER_OPS:
            raise ValueError(f"Unsupported filter op {self.op!r}")


def _apply_filters(query: Any, filters: list[Filter] | None) -> Any:
    for f in filters or []:
        if f.op == "is":
            query = query.is_(f.column, _null_literal(f.value))
        elif f.op == "not_is":
            query = query.not_.is_(f.column, _null_literal(f.value))
        else:
            query = getattr(query, f.op)(f.column, f.value)
    return query


def _null_literal(value: Any) -> Any:
    return "null" if value is None else value


def _rows(result: Any) -> list[dict[str, Any]]:
    if result.data and isinstance(result.data, list):
        return [row for row in result.data if isinstance(row, dict)]
    return []


class DataStore:
    """CRUD by table name."""

    def __init__(self, client: Client | None = None) -> None:
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    def select(
        self,
        table: str,
        filters: list[Filter] | None = None,
        columns: str = "*",
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        start = time.time()
        try:
            query = _apply_filters(self.client.table(table).select(columns), filters)
            if order_by:
                query = query.order(order_by, desc=descending)
            if limit is not None:
                query = query.limit(limit)
            result = query.execute()
        except Exception as e:
            log_error("select failed", e, table=table)
            raise DataStoreError("select", table, str(e)) from e
        rows = _rows(result)
        log_db_query("select", table, len(rows), (time.time() - start) * 1000)
        return rows

    def get(self, table: str, filters: list[Filter]) -> dict[str, Any] | None:
        """Return the first matching row, or None."""
        rows = self.select(table, filters, limit=1)
        return rows[0] if rows else None

    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        start = time.time()
        try:
            result = self.client.table(table).insert(row).execute()
        except Exception as e:
            log_error("insert failed", e, table=table)
            raise DataStoreError("insert", table, str(e)) from e
        rows = _rows(result)
        log_db_query("insert", table, len(rows), (time.time() - start) * 1000)
        if not rows:
            raise DataStoreError("insert", table, "no row returned")
        return rows[0]

    def update(
        self, table: str, values: dict[str, Any], filters: list[Filter]
    ) -> list[dict[str, Any]]:
        if not filters:
            raise ValueError("update requires at least one filter")
        start = time.time()
        try:
            query = _apply_filters(self.client.table(table).update(values), filters)
            result = query.execute()
        except Exception as e:
            log_error("update failed", e, table=table)
            raise DataStoreError("update", table, str(e)) from e
        rows = _rows(result)
        log_db_query("update", table, len(rows), (time.time() - start) * 1000)
        return rows

    def delete(self, table: str, filters: list[Filter]) -> list[dict[str, Any]]:
        if not filters:
            raise ValueError("delete requires at least one filter")
        start = time.time()
        try:
            query = _apply_filters(self.client.table(table).delete(), filters)
            result = query.execute()
        except Exception as e:
            log_error("delete failed", e, table=table)
            raise DataStoreError("delete", table, str(e)) from e
        rows = _rows(result)
        log_db_query("delete", table, len(rows), (time.time() - start) * 1000)
        return rows
