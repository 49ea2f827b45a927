"""
Attribute store: the column values of one row, normalized to Python types.

A store only accepts the columns it was built with. Normalization passes are
declared by the owning record (mark_integers / mark_datetimes / mark_booleans)
and coerce raw database values (mostly text) into int / datetime / bool.
Declared columns that were not loaded are None, never missing.
"""
from __future__ import annotations

import datetime as dt
from typing import Any, Callable, Dict, Iterable, Iterator, Mapping, Optional

from .errors import MissingValue, UnknownColumn, ValidationFailure

DB_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def to_int(raw: Any) -> Optional[int]:
    if raw is None:
        return None
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if not raw.is_integer():
            raise ValidationFailure(f"not an integer: {raw!r}")
        return int(raw)
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ValidationFailure(f"not an integer: {raw!r}") from None


def to_bool(raw: Any) -> Optional[bool]:
    if raw is None:
        return None
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int):
        if raw in (0, 1):
            return bool(raw)
        raise ValidationFailure(f"not a boolean: {raw!r}")
    s = str(raw).strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    raise ValidationFailure(f"not a boolean: {raw!r}")


def to_datetime(raw: Any) -> Optional[dt.datetime]:
    """Coerce to an aware UTC datetime. Naive input is taken as UTC."""
    if raw is None:
        return None
    if isinstance(raw, dt.datetime):
        value = raw
    elif isinstance(raw, dt.date):
        value = dt.datetime(raw.year, raw.month, raw.day)
    elif isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return dt.datetime.fromtimestamp(raw, tz=dt.timezone.utc)
    else:
        s = str(raw).strip()
        if not s:
            return None
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            value = dt.datetime.fromisoformat(s)
        except ValueError:
            raise ValidationFailure(f"not a datetime: {raw!r}") from None
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def format_db_datetime(value: dt.datetime) -> str:
    value = to_datetime(value)
    return value.strftime(DB_DATETIME_FORMAT)


_COERCERS: Dict[str, Callable[[Any], Any]] = {
    "int": to_int,
    "datetime": to_datetime,
    "bool": to_bool,
}


class AttributeStore:
    """Typed column -> value mapping for a single row."""

    def __init__(self, columns: Iterable[str], values: Optional[Mapping[str, Any]] = None, owner: str | None = None):
        self._owner = owner
        self._values: Dict[str, Any] = {c: None for c in columns}
        self._kinds: Dict[str, str] = {}
        for k, v in (values or {}).items():
            self.set(k, v)

    def _check(self, column: str) -> None:
        if column not in self._values:
            raise UnknownColumn(column, self._owner)

    def _mark(self, kind: str, columns: Iterable[str]) -> None:
        coerce = _COERCERS[kind]
        for c in columns:
            self._check(c)
            self._kinds[c] = kind
            self._values[c] = coerce(self._values[c])

    def mark_integers(self, *columns: str) -> None:
        self._mark("int", columns)

    def mark_datetimes(self, *columns: str) -> None:
        self._mark("datetime", columns)

    def mark_booleans(self, *columns: str) -> None:
        self._mark("bool", columns)

    def set(self, column: str, raw: Any) -> None:
        self._check(column)
        kind = self._kinds.get(column)
        self._values[column] = _COERCERS[kind](raw) if kind else raw

    def get(self, column: str) -> Any:
        self._check(column)
        return self._values[column]

    def nonnull(self, column: str) -> Any:
        value = self.get(column)
        if value is None:
            raise MissingValue(column)
        return value

    def has(self, column: str) -> bool:
        return column in self._values

    def columns(self) -> Iterator[str]:
        return iter(self._values)

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)
