"""Declarative table models with JSON conversion, validation and SQL helpers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

_BAD_ALIASES = "Bad masquerading vector"
_PK_REQUIRED = "The value of primary key must be set in the json object for update"


class ValidationError(ValueError):
    """Raised when data does not fit a model."""


@dataclass(frozen=True)
class Column:
    """Metadata of one table column."""

    name: str
    py_type: type
    db_type: str
    length: int
    auto: bool = False
    primary_key: bool = False
    not_null: bool = False


class Field:
    """Descriptor holding one column value; assignment marks the column dirty."""

    def __init__(
        self,
        py_type: type,
        db_type: str,
        length: int,
        *,
        auto: bool = False,
        primary_key: bool = False,
        not_null: bool = False,
    ) -> None:
        self._spec = (py_type, db_type, length, auto, primary_key, not_null)
        self.column: Column | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        py_type, db_type, length, auto, primary_key, not_null = self._spec
        self.column = Column(
            name, py_type, db_type, length, auto, primary_key, not_null
        )

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance._values.get(self.column.name)

    def __set__(self, instance: Any, value: Any) -> None:
        instance._values[self.column.name] = value
        instance._dirty.add(self.column.name)


def _wrap_int32(value: int) -> int:
    return (value - INT32_MIN) % 2**32 + INT32_MIN


def _coerce(column: Column, value: Any) -> Any:
    """Convert a JSON value to the column's Python type."""
    if column.py_type is int:
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return _wrap_int32(value)
        if isinstance(value, float):
            return _wrap_int32(int(value))
        raise ValidationError(
            f"Value of the {column.name} field is not convertible to an integer"
        )
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise ValidationError(
        f"Value of the {column.name} field is not convertible to a string"
    )


class Model:
    """Base class of table models; subclasses declare columns as Fields."""

    table_name: ClassVar[str] = ""
    columns: ClassVar[tuple[Column, ...]] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        own = tuple(
            value.column for value in vars(cls).values() if isinstance(value, Field)
        )
        cls.columns = cls.columns + own

    def __init__(self, **kwargs: Any) -> None:
        self._values: dict[str, Any] = {}
        self._dirty: set[str] = set()
        names = {column.name for column in self.columns}
        for key, value in kwargs.items():
            if key not in names:
                raise TypeError(f"{type(self).__name__} has no column {key!r}")
            setattr(self, key, value)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.to_json() == other.to_json()

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self.to_json().items())
        return f"{type(self).__name__}({fields})"

    # -- helpers ---------------------------------------------------------

    @classmethod
    def _primary_column(cls) -> Column:
        for column in cls.columns:
            if column.primary_key:
                return column
        raise TypeError(f"{cls.__name__} has no primary key")

    @classmethod
    def _check_aliases(cls, aliases: Sequence[str]) -> list[str]:
        aliases = list(aliases)
        if len(aliases) != len(cls.columns):
            raise ValidationError(_BAD_ALIASES)
        return aliases

    def _load(self, data: Mapping[str, Any], keys: Sequence[str], creating: bool) -> None:
        for column, key in zip(self.columns, keys):
            if not key or key not in data:
                continue
            if creating or not column.primary_key:
                self._dirty.add(column.name)
            if data[key] is not None:
                self._values[column.name] = _coerce(column, data[key])

    # -- construction ----------------------------------------------------

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Model:
        """Build an instance from a JSON object keyed by column names."""
        instance = cls()
        instance._load(data, [c.name for c in cls.columns], creating=True)
        return instance

    @classmethod
    def from_masqueraded_json(cls, data: Mapping[str, Any], aliases: Sequence[str]) -> Model:
        """Build an instance from a JSON object keyed by column aliases."""
        keys = cls._check_aliases(aliases)
        instance = cls()
        instance._load(data, keys, creating=True)
        return instance

    @classmethod
    def from_row(cls, row: Any) -> Model:
        """Build a clean instance from a database row, by name or by position."""
        instance = cls()
        if hasattr(row, "keys"):
            available = set(row.keys())
            values = []
            for column in cls.columns:
                if column.name not in available:
                    raise ValidationError("Invalid SQL result for this model")
                values.append(row[column.name])
        else:
            if len(row) < len(cls.columns):
                raise ValidationError("Invalid SQL result for this model")
            values = list(row)[: len(cls.columns)]
        for column, value in zip(cls.columns, values):
            if value is not None:
                instance._values[column.name] = column.py_type(value)
        return instance

    def update_from_json(self, data: Mapping[str, Any]) -> None:
        """Apply a JSON object; the primary key is set but never marked dirty."""
        self._load(data, [c.name for c in self.columns], creating=False)

    def update_from_masqueraded_json(self, data: Mapping[str, Any], aliases: Sequence[str]) -> None:
        """Apply a JSON object keyed by column aliases."""
        self._load(data, self._check_aliases(aliases), creating=False)

    # -- output ----------------------------------------------------------

    def to_json(self) -> dict[str, Any]:
        """Return every column, None where null."""
        return {column.name: self._values.get(column.name) for column in self.columns}

    def to_masqueraded_json(self, aliases: Sequence[str]) -> dict[str, Any]:
        """Return columns under their aliases; falls back to to_json on a bad vector."""
        aliases = list(aliases)
        if len(aliases) != len(self.columns):
            return self.to_json()
        return {
            alias: self._values.get(column.name)
            for column, alias in zip(self.columns, aliases)
            if alias
        }

    # -- validation ------------------------------------------------------

    @classmethod
    def validate_for_creation(cls, data: Mapping[str, Any]) -> None:
        """Raise ValidationError unless data may create a new row."""
        for index, column in enumerate(cls.columns):
            if column.name in data:
                cls.validate_field(index, column.name, data[column.name], True)
            elif column.not_null and not column.auto:
                raise ValidationError(f"The {column.name} column cannot be null")

    @classmethod
    def validate_masqueraded_for_creation(
        cls, data: Mapping[str, Any], aliases: Sequence[str]
    ) -> None:
        """Like validate_for_creation, with data keyed by aliases."""
        aliases = cls._check_aliases(aliases)
        for index, (column, alias) in enumerate(zip(cls.columns, aliases)):
            if not alias:
                continue
            if alias in data:
                cls.validate_field(index, alias, data[alias], True)
            elif column.not_null and not column.auto:
                raise ValidationError(f"The {alias} column cannot be null")

    @classmethod
    def validate_for_update(cls, data: Mapping[str, Any]) -> None:
        """Raise ValidationError unless data may update a row."""
        if cls._primary_column().name not in data:
            raise ValidationError(_PK_REQUIRED)
        for index, column in enumerate(cls.columns):
            if column.name in data:
                cls.validate_field(index, column.name, data[column.name], False)

    @classmethod
    def validate_masqueraded_for_update(
        cls, data: Mapping[str, Any], aliases: Sequence[str]
    ) -> None:
        """Like validate_for_update, with data keyed by aliases."""
        aliases = cls._check_aliases(aliases)
        for index, (column, alias) in enumerate(zip(cls.columns, aliases)):
            present = bool(alias) and alias in data
            if column.primary_key and not present:
                raise ValidationError(_PK_REQUIRED)
            if present:
                cls.validate_field(index, alias, data[alias], False)

    @classmethod
    def validate_field(
        cls, index: int, field_name: str, value: Any, for_creation: bool
    ) -> None:
        """Raise ValidationError unless value suits the column at index."""
        if not 0 <= index < len(cls.columns):
            raise ValidationError("Internal error in the server")
        column = cls.columns[index]
        if value is None:
            if column.not_null:
                raise ValidationError(f"The {field_name} column cannot be null")
            return
        if column.auto and for_creation:
            raise ValidationError("The automatic primary key cannot be set")
        type_error = ValidationError(f"Type error in the {field_name} field")
        if column.py_type is int:
            if isinstance(value, bool):
                raise type_error
            if isinstance(value, float):
                if not value.is_integer():
                    raise type_error
                value = int(value)
            if not isinstance(value, int) or not INT32_MIN <= value <= INT32_MAX:
                raise type_error
            return
        if not isinstance(value, str):
            raise type_error
        if column.length > 0 and len(value.encode("utf-8")) > column.length:
            raise ValidationError(
                f"String length exceeds limit for the {field_name} field "
                f"(the maximum value is {column.length})"
            )

    # -- SQL support -----------------------------------------------------

    @classmethod
    def column_name(cls, index: int) -> str:
        return cls.columns[index].name

    def primary_key(self) -> Any:
        """Return the primary key value; ValueError if it is not set."""
        value = self._values.get(self._primary_column().name)
        if value is None:
            raise ValueError("primary key is not set")
        return value

    @classmethod
    def insert_columns(cls) -> tuple[str, ...]:
        return tuple(column.name for column in cls.columns if not column.auto)

    def insert_args(self) -> list[Any]:
        return [
            self._values.get(column.name)
            for column in self.columns
            if not column.auto and column.name in self._dirty
        ]

    def update_columns(self) -> list[str]:
        return [
            column.name
            for column in self.columns
            if not column.primary_key and column.name in self._dirty
        ]

    def update_args(self) -> list[Any]:
        return [self._values.get(name) for name in self.update_columns()]

    def insert_sql(self) -> tuple[str, bool]:
        """Return the insert statement and whether it selects the new row back."""
        names: list[str] = []
        values: list[str] = []
        need_selection = False
        for column in self.columns:
            if column.auto:
                names.append(column.name)
                values.append("default")
                need_selection = True
            elif column.name in self._dirty:
                names.append(column.name)
                values.append(f"${len([v for v in values if v != 'default']) + 1}")
        sql = (
            f"insert into {self.table_name} ({','.join(names)}) "
            f"values ({','.join(values)})"
        )
        if need_selection:
            sql += " returning *"
        return sql, need_selection

    @classmethod
    def find_by_primary_key_sql(cls) -> str:
        return f"select * from {cls.table_name} where {cls._primary_column().name} = $1"

    @classmethod
    def delete_by_primary_key_sql(cls) -> str:
        return f"delete from {cls.table_name} where {cls._primary_column().name} = $1"