"""
Row store abstraction and implementations
Supports SQLite (local use) and an in-memory store (tests and demos)

Usage:
    db = get_database(config)  # SQLite at the configured path
    rows = db.select('skill_logs', [in_('skill_item_id', ids)],
                     order_by='logged_at', descending=True)

Set TRACKER_DB=memory to get an empty in-memory store instead.
"""

import copy
import json
import operator
import os
import re
import sqlite3
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from tracker.core.schema import JSON_COLUMNS, TABLES

_IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')

FILTER_OPS = ('eq', 'in', 'lt', 'lte', 'gt', 'gte')


class RecordNotFoundError(LookupError):
    """Raised when a row that must exist is missing"""


class ConstraintViolationError(Exception):
    """Raised when a write breaks a uniqueness or integrity constraint"""

    def __init__(self, message: str, constraint: Optional[str] = None):
        super().__init__(message)
        self.constraint = constraint


@dataclass(frozen=True)
class Filter:
    """Single column predicate: op is one of FILTER_OPS"""
    op: str
    column: str
    value: Any

    def __post_init__(self):
        if self.op not in FILTER_OPS:
            raise ValueError(f"Unsupported filter op: {self.op}")
        if not _IDENTIFIER.match(self.column):
            raise ValueError(f"Invalid column name: {self.column}")


def eq(column: str, value: Any) -> Filter:
    return Filter('eq', column, value)


def in_(column: str, values: Sequence[Any]) -> Filter:
    return Filter('in', column, tuple(values))


def lt(column: str, value: Any) -> Filter:
    return Filter('lt', column, value)


def lte(column: str, value: Any) -> Filter:
    return Filter('lte', column, value)


def gt(column: str, value: Any) -> Filter:
    return Filter('gt', column, value)


def gte(column: str, value: Any) -> Filter:
    return Filter('gte', column, value)


def utc_now_iso() -> str:
    """Current instant as an ISO-8601 UTC string"""
    return datetime.now(timezone.utc).isoformat()


def _check_table(table: str) -> None:
    if table not in TABLES:
        raise ValueError(f"Unknown table: {table}")


class RowStore(ABC):
    """
    Filtered read/insert/update/delete against named tables.

    Each call is atomic on its own; nothing spans calls.
    """

    @abstractmethod
    def select(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Return rows matching every filter"""
        pass

    @abstractmethod
    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a row and return it as stored"""
        pass

    @abstractmethod
    def update(
        self,
        table: str,
        changes: Dict[str, Any],
        filters: Sequence[Filter],
    ) -> List[Dict[str, Any]]:
        """Apply changes to matching rows and return them"""
        pass

    @abstractmethod
    def delete(self, table: str, filters: Sequence[Filter]) -> int:
        """Delete matching rows, returning how many were removed"""
        pass

    def select_one(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """Return the first matching row or None"""
        rows = self.select(table, filters, order_by=order_by, descending=descending, limit=1)
        return rows[0] if rows else None

    def _prepare_insert(self, row: Dict[str, Any]) -> Dict[str, Any]:
        now = utc_now_iso()
        prepared = dict(row)
        prepared.setdefault('id', uuid.uuid4().hex)
        prepared.setdefault('created_at', now)
        prepared.setdefault('updated_at', now)
        return prepared


class SQLiteDatabase(RowStore):
    """SQLite row store for local use"""

    def __init__(self, db_path: Optional[Path] = None):
        if db_path is None:
            db_path = Path(__file__).parent.parent.parent / "data" / "database" / "tracker.db"

        self.db_path = Path(db_path)

        if not self.db_path.exists():
            raise FileNotFoundError(
                f"Database not found at {self.db_path}. "
                "Run 'python scripts/init_db.py' to create it."
            )

    @contextmanager
    def get_connection(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        try:
            yield conn
        finally:
            conn.close()

    def execute(self, query: str, params: Tuple = ()) -> List[Dict[str, Any]]:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [dict(row) for row in cursor.fetchall()]

    def execute_one(self, query: str, params: Tuple = ()) -> Optional[Dict[str, Any]]:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            row = cursor.fetchone()
            return dict(row) if row else None

    def execute_write(self, query: str, params: Tuple = ()) -> int:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(query, params)
            except sqlite3.IntegrityError as e:
                raise ConstraintViolationError(str(e), _constraint_name(str(e))) from e
            conn.commit()
            return cursor.rowcount

    def table_exists(self, table_name: str) -> bool:
        query = "SELECT name FROM sqlite_master WHERE type='table' AND name=?;"
        return self.execute_one(query, (table_name,)) is not None

    def count(self, table_name: str, filters: Sequence[Filter] = ()) -> int:
        _check_table(table_name)
        where, params = self._where(filters)
        result = self.execute_one(f"SELECT COUNT(*) as count FROM {table_name}{where}", params)
        return result['count'] if result else 0

    def _where(self, filters: Sequence[Filter]) -> Tuple[str, Tuple]:
        clauses = []
        params: List[Any] = []
        sql_ops = {'eq': '=', 'lt': '<', 'lte': '<=', 'gt': '>', 'gte': '>='}

        for item in filters:
            if item.op == 'in':
                if not item.value:
                    clauses.append("0")
                    continue
                placeholders = ", ".join("?" for _ in item.value)
                clauses.append(f"{item.column} IN ({placeholders})")
                params.extend(item.value)
            elif item.op == 'eq' and item.value is None:
                clauses.append(f"{item.column} IS NULL")
            else:
                clauses.append(f"{item.column} {sql_ops[item.op]} ?")
                params.append(item.value)

        if not clauses:
            return "", ()
        return " WHERE " + " AND ".join(clauses), tuple(params)

    def _encode(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        encoded = dict(row)
        for column in JSON_COLUMNS.get(table, ()):
            if column in encoded and encoded[column] is not None:
                encoded[column] = json.dumps(list(encoded[column]))
        return encoded

    def _decode(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        for column in JSON_COLUMNS.get(table, ()):
            if isinstance(row.get(column), str):
                row[column] = json.loads(row[column])
        return row

    def select(self, table, filters=(), order_by=None, descending=False, limit=None):
        _check_table(table)
        where, params = self._where(filters)
        query = f"SELECT * FROM {table}{where}"
        if order_by:
            if not _IDENTIFIER.match(order_by):
                raise ValueError(f"Invalid column name: {order_by}")
            query += f" ORDER BY {order_by} {'DESC' if descending else 'ASC'}, rowid ASC"
        if limit is not None:
            query += " LIMIT ?"
            params = params + (int(limit),)
        return [self._decode(table, row) for row in self.execute(query, params)]

    def insert(self, table, row):
        _check_table(table)
        prepared = self._prepare_insert(row)
        encoded = self._encode(table, prepared)
        columns = list(encoded.keys())
        for column in columns:
            if not _IDENTIFIER.match(column):
                raise ValueError(f"Invalid column name: {column}")
        query = (
            f"INSERT INTO {table} ({', '.join(columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)})"
        )
        self.execute_write(query, tuple(encoded[c] for c in columns))
        return prepared

    def update(self, table, changes, filters):
        _check_table(table)
        matched = self.select(table, filters)
        if not matched:
            return []

        payload = self._encode(table, {**changes, 'updated_at': utc_now_iso()})
        for column in payload:
            if not _IDENTIFIER.match(column):
                raise ValueError(f"Invalid column name: {column}")
        assignments = ", ".join(f"{column} = ?" for column in payload)
        ids = [row['id'] for row in matched]
        placeholders = ", ".join("?" for _ in ids)
        self.execute_write(
            f"UPDATE {table} SET {assignments} WHERE id IN ({placeholders})",
            tuple(payload.values()) + tuple(ids),
        )
        return self.select(table, [in_('id', ids)])

    def delete(self, table, filters):
        _check_table(table)
        where, params = self._where(filters)
        return self.execute_write(f"DELETE FROM {table}{where}", params)


def _constraint_name(message: str) -> Optional[str]:
    """Best-effort constraint identifier from an SQLite integrity message"""
    if "UNIQUE constraint failed" in message:
        return message.split(":", 1)[1].strip()
    return None


class InMemoryDatabase(RowStore):
    """
    Dict-of-lists row store.

    Mirrors SQLiteDatabase semantics (generated ids, timestamps, stable
    ordering) without touching disk. Rows are copied on the way in and out.
    """

    _COMPARATORS = {
        'lt': operator.lt,
        'lte': operator.le,
        'gt': operator.gt,
        'gte': operator.ge,
    }

    def __init__(self):
        self.db_path = ":memory:"
        self._tables: Dict[str, List[Dict[str, Any]]] = {name: [] for name in TABLES}

    def _rows(self, table: str) -> List[Dict[str, Any]]:
        _check_table(table)
        return self._tables[table]

    def _matches(self, row: Dict[str, Any], filters: Sequence[Filter]) -> bool:
        for item in filters:
            value = row.get(item.column)
            if item.op == 'eq':
                if value != item.value:
                    return False
            elif item.op == 'in':
                if value not in item.value:
                    return False
            else:
                if value is None or item.value is None:
                    return False
                if not self._COMPARATORS[item.op](value, item.value):
                    return False
        return True

    def select(self, table, filters=(), order_by=None, descending=False, limit=None):
        rows = [row for row in self._rows(table) if self._matches(row, filters)]
        if order_by:
            present = [row for row in rows if row.get(order_by) is not None]
            missing = [row for row in rows if row.get(order_by) is None]
            present.sort(key=lambda row: row[order_by], reverse=descending)
            rows = present + missing
        if limit is not None:
            rows = rows[:int(limit)]
        return copy.deepcopy(rows)

    def insert(self, table, row):
        rows = self._rows(table)
        prepared = self._prepare_insert(row)
        if any(existing['id'] == prepared['id'] for existing in rows):
            raise ConstraintViolationError(
                f"UNIQUE constraint failed: {table}.id", f"{table}.id"
            )
        rows.append(copy.deepcopy(prepared))
        return copy.deepcopy(prepared)

    def update(self, table, changes, filters):
        now = utc_now_iso()
        updated = []
        for row in self._rows(table):
            if self._matches(row, filters):
                row.update(copy.deepcopy(changes))
                row['updated_at'] = now
                updated.append(copy.deepcopy(row))
        return updated

    def delete(self, table, filters):
        rows = self._rows(table)
        retained = [row for row in rows if not self._matches(row, filters)]
        removed = len(rows) - len(retained)
        rows[:] = retained
        return removed

    def count(self, table_name: str, filters: Sequence[Filter] = ()) -> int:
        return len(self.select(table_name, filters))


def get_database(config=None) -> RowStore:
    """
    Factory function to get the configured row store.

    Uses the in-memory store when TRACKER_DB=memory, otherwise SQLite at
    the configured database path.
    """
    if os.environ.get('TRACKER_DB', '').lower() == 'memory':
        return InMemoryDatabase()
    if config is None:
        return SQLiteDatabase()
    return SQLiteDatabase(config.get_database_path())
