"""The job table."""

from __future__ import annotations

from .model import Field, Model


class Job(Model):
    """A job row: an automatic integer id and a title of up to 50 bytes."""

    table_name = "job"

    id = Field(int, "integer", 4, auto=True, primary_key=True, not_null=True)
    title = Field(str, "character varying", 50, not_null=True)