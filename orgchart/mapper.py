"""A small object mapper over a SQLite connection."""

from __future__ import annotations

import enum
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from .department import Department
from .job import Job
from .model import Model


class DatabaseError(Exception):
    """Raised when a database operation fails."""


class NotFoundError(DatabaseError):
    """Raised when a lookup by primary key finds no row."""


class SortOrder(enum.Enum):
    ASC = "ASC"
    DESC = "DESC"


@contextmanager
def _database_errors() -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        raise DatabaseError(str(exc)) from exc


def _rows(cursor: sqlite3.Cursor) -> list[dict[str, Any]]:
    names = [description[0] for description in cursor.description]
    return [dict(zip(names, row)) for row in cursor.fetchall()]


class Mapper:
    """Reads and writes instances of one model class."""

    def __init__(self, connection: sqlite3.Connection, model: type[Model]) -> None:
        self._connection = connection
        self._model = model
        self._reset()

    def _reset(self) -> None:
        self._order: tuple[str, SortOrder] | None = None
        self._offset: int | None = None
        self._limit: int | None = None

    def _check_column(self, name: str) -> str:
        if name not in {column.name for column in self._model.columns}:
            raise DatabaseError(
                f"no such column: {name} in table {self._model.table_name}"
            )
        return name

    def order_by(self, field: str, order: SortOrder = SortOrder.ASC) -> Mapper:
        """Sort the next find_all by a column."""
        self._order = (self._check_column(field), SortOrder(order))
        return self

    def offset(self, count: int) -> Mapper:
        self._offset = int(count)
        return self

    def limit(self, count: int) -> Mapper:
        self._limit = int(count)
        return self

    def find_all(self) -> list[Model]:
        """Return all rows, honouring any order, offset and limit set before."""
        sql = f"select * from {self._model.table_name}"
        params: list[int] = []
        if self._order is not None:
            field, order = self._order
            sql += f" order by {field} {order.value}"
        if self._limit is not None or self._offset is not None:
            sql += " limit ? offset ?"
            params = [
                self._limit if self._limit is not None else -1,
                self._offset or 0,
            ]
        self._reset()
        with _database_errors():
            cursor = self._connection.execute(sql, params)
            return [self._model.from_row(row) for row in _rows(cursor)]

    def find_by_primary_key(self, key: Any) -> Model:
        """Return the row with this primary key; NotFoundError if there is none."""
        pk = self._model._primary_column().name
        sql = f"select * from {self._model.table_name} where {pk} = ?"
        with _database_errors():
            rows = _rows(self._connection.execute(sql, (key,)))
        if len(rows) != 1:
            raise NotFoundError(f"{len(rows)} rows found, expected 1")
        return self._model.from_row(rows[0])

    def insert(self, instance: Model) -> Model:
        """Insert the set columns of instance and return the stored row."""
        columns = [
            column.name
            for column in self._model.columns
            if not column.auto and column.name in instance._dirty
        ]
        table = self._model.table_name
        if columns:
            placeholders = ",".join("?" for _ in columns)
            sql = f"insert into {table} ({','.join(columns)}) values ({placeholders})"
        else:
            sql = f"insert into {table} default values"
        args = instance.insert_args()
        with _database_errors(), self._connection:
            cursor = self._connection.execute(sql, args)
            row_id = cursor.lastrowid
        pk_column = self._model._primary_column()
        key = row_id if pk_column.auto else instance.primary_key()
        return self.find_by_primary_key(key)

    def update(self, instance: Model) -> int:
        """Write the changed columns of instance; return the number of rows hit."""
        columns = instance.update_columns()
        if not columns:
            raise DatabaseError("no columns to update")
        pk = self._model._primary_column().name
        assignments = ",".join(f"{name} = ?" for name in columns)
        sql = f"update {self._model.table_name} set {assignments} where {pk} = ?"
        args = [*instance.update_args(), instance.primary_key()]
        with _database_errors(), self._connection:
            return self._connection.execute(sql, args).rowcount

    def delete_by(self, column: str, value: Any) -> int:
        """Delete rows whose column equals value; return how many went."""
        sql = f"delete from {self._model.table_name} where {self._check_column(column)} = ?"
        with _database_errors(), self._connection:
            return self._connection.execute(sql, (value,)).rowcount


def _column_ddl(column: Any) -> str:
    if column.auto and column.primary_key:
        return f"{column.name} integer primary key autoincrement"
    ddl = f"{column.name} {column.db_type}"
    if column.length > 0 and column.py_type is str:
        ddl += f"({column.length})"
    if column.primary_key:
        ddl += " primary key"
    if column.not_null:
        ddl += " not null"
    return ddl


def create_schema(connection: sqlite3.Connection) -> None:
    """Create the department and job tables if they do not exist."""
    with _database_errors(), connection:
        for model in (Department, Job):
            body = ", ".join(_column_ddl(column) for column in model.columns)
            connection.execute(f"create table if not exists {model.table_name} ({body})")