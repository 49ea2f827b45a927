"""
Error taxonomy shared by domain, services and routes.

Routes map NotFound -> 404, PermissionDenied -> 403, ValidationFailure -> 400.
UnknownColumn and MissingValue mean code and schema disagree; they are never
caught.
"""
from __future__ import annotations


class NotFound(LookupError):
    pass


class PermissionDenied(Exception):
    pass


class ValidationFailure(ValueError):
    pass


class UnknownColumn(KeyError):
    def __init__(self, column: str, owner: str | None = None):
        self.column = column
        self.owner = owner
        msg = f"unknown column '{column}'" + (f" for {owner}" if owner else "")
        super().__init__(msg)

    def __str__(self) -> str:
        return self.args[0]


class MissingValue(Exception):
    def __init__(self, column: str):
        self.column = column
        super().__init__(f"column '{column}' is null")
