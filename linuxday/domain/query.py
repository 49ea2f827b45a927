"""
Query builder over a Record type.

    Event.factory().where_column("conference_ID", 3).order_by("event_start").query_rows()

Each terminal call runs against the connection given at construction, or
opens its own with get_conn(). Nothing is cached: every call re-reads.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from sqlite3 import Connection
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple, Type

from ..db import get_conn
from .errors import UnknownColumn, ValidationFailure
from .record import DBCol, Record

logger = logging.getLogger(__name__)


class Query:

    def __init__(self, record_cls: Type[Record], conn: Optional[Connection] = None):
        self.record_cls = record_cls
        self._conn = conn
        # (sql, record types joined in, table name)
        self._joins: List[Tuple[str, Type[Record], str]] = []
        self._wheres: List[str] = []
        self._params: List[Any] = []
        self._order: List[str] = []
        self._limit: Optional[int] = None

    # ----- builder -----

    def join(self, record_cls: Type[Record], on: str, left: bool = False) -> "Query":
        kw = "LEFT JOIN" if left else "JOIN"
        self._joins.append((f"{kw} {record_cls.TABLE} ON {on}", record_cls, record_cls.TABLE))
        return self

    def where(self, condition: str, *params: Any) -> "Query":
        self._wheres.append(f"({condition})")
        self._params.extend(params)
        return self

    def where_column(self, column: str, value: Any) -> "Query":
        qualified = self._qualify(column)
        if value is None:
            return self.where(f"{qualified} IS NULL")
        return self.where(f"{qualified} = ?", value)

    def order_by(self, column: str, desc: bool = False) -> "Query":
        self._order.append(self._qualify(column) + (" DESC" if desc else ""))
        return self

    def limit(self, n: int) -> "Query":
        self._limit = int(n)
        return self

    # ----- terminals -----

    def query_generator(self) -> Iterator[Record]:
        """Lazy, one-shot: rows are fetched from the cursor as they are consumed."""
        sql, params = self._select_sql()
        with self._connection() as conn:
            cur = conn.execute(sql, params)
            for row in cur:
                yield self._materialize(row)

    def query_rows(self) -> List[Record]:
        return list(self.query_generator())

    def query_row(self) -> Optional[Record]:
        sql, params = self._select_sql(limit=1)
        with self._connection() as conn:
            row = conn.execute(sql, params).fetchone()
        return self._materialize(row) if row is not None else None

    def count(self) -> int:
        sql = f"SELECT COUNT(1) AS cnt FROM {self.record_cls.TABLE}{self._from_tail()}"
        with self._connection() as conn:
            return int(conn.execute(sql, self._params).fetchone()["cnt"])

    def insert_row(self, cols: Iterable[DBCol]) -> int:
        cols = self.record_cls.validate_payload(cols, inserting=True)
        names = ", ".join(c.column for c in cols)
        marks = ", ".join(["?"] * len(cols))
        sql = f"INSERT INTO {self.record_cls.TABLE}({names}) VALUES({marks})"
        with self._connection() as conn:
            cur = conn.execute(sql, [c.db_value() for c in cols])
            new_id = int(cur.lastrowid)
        logger.debug("inserted %s row %s", self.record_cls.TABLE, new_id)
        return new_id

    def update(self, cols: Iterable[DBCol]) -> int:
        """Write only the listed columns of the matching rows."""
        cols = self.record_cls.validate_payload(cols)
        if not cols:
            return 0
        self._require_plain_filter("update")
        sets = ", ".join(f"{c.column} = ?" for c in cols)
        sql = f"UPDATE {self.record_cls.TABLE} SET {sets} WHERE {' AND '.join(self._wheres)}"
        with self._connection() as conn:
            cur = conn.execute(sql, [c.db_value() for c in cols] + self._params)
            return cur.rowcount

    def delete(self) -> int:
        self._require_plain_filter("delete")
        sql = f"DELETE FROM {self.record_cls.TABLE} WHERE {' AND '.join(self._wheres)}"
        with self._connection() as conn:
            return conn.execute(sql, self._params).rowcount

    # ----- internals -----

    @contextmanager
    def _connection(self) -> Iterator[Connection]:
        if self._conn is not None:
            yield self._conn
        else:
            with get_conn() as conn:
                yield conn

    def _sources(self) -> Sequence[Tuple[str, Type[Record]]]:
        return [(self.record_cls.TABLE, self.record_cls)] + [(t, r) for _, r, t in self._joins]

    def _qualify(self, column: str) -> str:
        if "." in column:
            table, name = column.split(".", 1)
            for t, rec in self._sources():
                if t == table and name in rec.COLUMNS:
                    return column
            raise UnknownColumn(column, self.record_cls.__name__)
        for t, rec in self._sources():
            if column in rec.COLUMNS:
                return f"{t}.{column}"
        raise UnknownColumn(column, self.record_cls.__name__)

    def _select_columns(self) -> List[str]:
        seen = set()
        out = []
        for t, rec in self._sources():
            for c in rec.COLUMNS:
                if c not in seen:
                    seen.add(c)
                    out.append(f"{t}.{c} AS {c}")
        return out

    def _from_tail(self) -> str:
        sql = ""
        for join_sql, _, _ in self._joins:
            sql += " " + join_sql
        if self._wheres:
            sql += " WHERE " + " AND ".join(self._wheres)
        return sql

    def _select_sql(self, limit: Optional[int] = None) -> Tuple[str, List[Any]]:
        sql = f"SELECT {', '.join(self._select_columns())} FROM {self.record_cls.TABLE}{self._from_tail()}"
        if self._order:
            sql += " ORDER BY " + ", ".join(self._order)
        lim = limit if limit is not None else self._limit
        if lim is not None:
            sql += f" LIMIT {int(lim)}"
        return sql, list(self._params)

    def _materialize(self, row) -> Record:
        joined = [r for _, r, _ in self._joins]
        return self.record_cls(dict(row), joined=joined)

    def _require_plain_filter(self, op: str) -> None:
        if self._joins:
            raise ValidationFailure(f"cannot {op} through a join")
        if not self._wheres:
            raise ValidationFailure(f"refusing to {op} without a filter")
