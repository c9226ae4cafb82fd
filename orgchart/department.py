"""The department table."""

from __future__ import annotations

from .model import Field, Model


class Department(Model):
    """A department row: an automatic integer id and a name of up to 50 bytes."""

    table_name = "department"

    id = Field(int, "integer", 4, auto=True, primary_key=True, not_null=True)
    name = Field(str, "character varying", 50, not_null=True)