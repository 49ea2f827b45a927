"""
Record base class and the column-tagged write payload.

A Record is one row of one table, materialized by a Query and normalized
through an AttributeStore. Records are read-only: writes go through
Query.insert_row / Query.update with a list of DBCol.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from sqlite3 import Connection
from typing import Any, ClassVar, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Type

from .attributes import AttributeStore, format_db_datetime, to_bool, to_int
from .errors import UnknownColumn, ValidationFailure


@dataclass(frozen=True)
class DBCol:
    """
    One column of a write payload.

    kind: 's' string, 'd' integer, 'f' float, 'b' boolean, 't' datetime.
    A None value is written as NULL whatever the kind.
    """
    column: str
    value: Any
    kind: Optional[str] = "s"

    def db_value(self) -> Any:
        v = self.value
        if v is None:
            return None
        if self.kind == "s":
            return str(v)
        if self.kind == "d":
            return to_int(v)
        if self.kind == "f":
            try:
                return float(v)
            except (TypeError, ValueError):
                raise ValidationFailure(f"{self.column}: not a number: {v!r}") from None
        if self.kind == "b":
            return 1 if to_bool(v) else 0
        if self.kind == "t":
            return format_db_datetime(v)
        if self.kind is None:
            return v
        raise ValueError(f"unsupported column kind: {self.kind!r}")


class Record:
    TABLE: ClassVar[str]
    ID: ClassVar[Optional[str]] = None
    UID: ClassVar[Optional[str]] = None
    MAXLEN_UID: ClassVar[int] = 100

    COLUMNS: ClassVar[Tuple[str, ...]] = ()
    # NOT NULL columns without a default; checked on insert
    REQUIRED: ClassVar[Tuple[str, ...]] = ()

    INTEGERS: ClassVar[Tuple[str, ...]] = ()
    DATETIMES: ClassVar[Tuple[str, ...]] = ()
    BOOLEANS: ClassVar[Tuple[str, ...]] = ()

    def __init__(self, values: Optional[Mapping[str, Any]] = None, joined: Sequence[Type["Record"]] = ()):
        columns = list(self.COLUMNS)
        for other in joined:
            columns.extend(c for c in other.COLUMNS if c not in columns)
        self._store = AttributeStore(columns, values, owner=type(self).__name__)
        for kind in (type(self), *joined):
            self._store.mark_integers(*kind.INTEGERS)
            self._store.mark_datetimes(*kind.DATETIMES)
            self._store.mark_booleans(*kind.BOOLEANS)

    def __repr__(self) -> str:
        ident = self._store.get(self.ID) if self.ID else None
        return f"<{type(self).__name__} {ident!r}>"

    def get(self, column: str) -> Any:
        return self._store.get(column)

    def nonnull(self, column: str) -> Any:
        return self._store.nonnull(column)

    def has(self, column: str) -> bool:
        return self._store.has(column)

    def as_dict(self) -> Dict[str, Any]:
        out = self._store.as_dict()
        for k, v in out.items():
            if isinstance(v, dt.datetime):
                out[k] = v.isoformat()
        return out

    @property
    def id(self) -> int:
        if not self.ID:
            raise TypeError(f"{type(self).__name__} has no ID column")
        return self.nonnull(self.ID)

    @property
    def uid(self) -> Optional[str]:
        if not self.UID:
            raise TypeError(f"{type(self).__name__} has no UID column")
        return self.get(self.UID)

    # ----- factories -----

    @classmethod
    def factory(cls, conn: Optional[Connection] = None):
        from .query import Query
        return Query(cls, conn)

    @classmethod
    def factory_by_id(cls, record_id: int, conn: Optional[Connection] = None):
        if not cls.ID:
            raise TypeError(f"{cls.__name__} has no ID column")
        return cls.factory(conn).where_column(cls.ID, to_int(record_id))

    @classmethod
    def factory_from_uid(cls, uid: str, conn: Optional[Connection] = None):
        if not cls.UID:
            raise TypeError(f"{cls.__name__} has no UID column")
        return cls.factory(conn).where_column(cls.UID, uid)

    @classmethod
    def insert_row(cls, cols: Iterable[DBCol], conn: Optional[Connection] = None) -> int:
        return cls.factory(conn).insert_row(cols)

    # ----- payload checks -----

    @classmethod
    def validate_payload(cls, cols: Iterable[DBCol], inserting: bool = False) -> list[DBCol]:
        cols = list(cols)
        seen = set()
        for c in cols:
            if c.column not in cls.COLUMNS:
                raise UnknownColumn(c.column, cls.__name__)
            if c.column in seen:
                raise ValidationFailure(f"column '{c.column}' given twice")
            seen.add(c.column)
            if cls.UID and c.column == cls.UID:
                cls.validate_uid(c.value)
        if inserting:
            given = {c.column for c in cols if c.value is not None and c.value != ""}
            missing = [r for r in cls.REQUIRED if r not in given]
            if missing:
                raise ValidationFailure(f"missing required field(s): {', '.join(missing)}")
        return cols

    @classmethod
    def validate_uid(cls, uid: Any) -> str:
        if uid is None or not str(uid).strip():
            raise ValidationFailure(f"{cls.UID} is required")
        uid = str(uid)
        if len(uid) > cls.MAXLEN_UID:
            raise ValidationFailure(f"{cls.UID} longer than {cls.MAXLEN_UID} characters")
        return uid
