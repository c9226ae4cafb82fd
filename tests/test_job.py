import pytest

from orgchart.job import Job
from orgchart.model import ValidationError


def test_columns_in_declared_order():
    assert [c.name for c in Job.columns] == ["id", "title"]
    assert Job.column_name(0) == "id"
    assert Job.column_name(1) == "title"


def test_from_json_round_trip():
    job = Job.from_json({"id": 3, "title": "Engineer"})
    assert job.id == 3
    assert job.title == "Engineer"
    assert job.to_json() == {"id": 3, "title": "Engineer"}


def test_to_json_reports_null_columns():
    assert Job().to_json() == {"id": None, "title": None}


def test_from_json_with_null_title_leaves_it_unset():
    job = Job.from_json({"title": None})
    assert job.title is None
    assert job.update_columns() == ["title"]


def test_masqueraded_round_trip():
    aliases = ["job_id", "job_title"]
    job = Job.from_masqueraded_json({"job_id": 7, "job_title": "Manager"}, aliases)
    assert job.to_json() == {"id": 7, "title": "Manager"}
    assert job.to_masqueraded_json(aliases) == {"job_id": 7, "job_title": "Manager"}


def test_masqueraded_bad_vector():
    with pytest.raises(ValidationError, match="Bad masquerading vector"):
        Job.from_masqueraded_json({"id": 1}, ["id"])


def test_to_masqueraded_json_falls_back_on_bad_vector():
    job = Job(title="Clerk")
    assert job.to_masqueraded_json(["a"]) == job.to_json()


def test_update_from_json_does_not_mark_primary_key():
    job = Job.from_row({"id": 4, "title": "Old"})
    assert job.update_columns() == []
    job.update_from_json({"id": 9, "title": "New"})
    assert job.id == 9
    assert job.title == "New"
    assert job.update_columns() == ["title"]
    assert job.update_args() == ["New"]


def test_validate_for_creation_requires_title():
    with pytest.raises(ValidationError, match="The title column cannot be null"):
        Job.validate_for_creation({})


def test_validate_for_creation_rejects_primary_key():
    with pytest.raises(ValidationError, match="The automatic primary key cannot be set"):
        Job.validate_for_creation({"id": 1, "title": "Engineer"})


def test_validate_for_creation_rejects_wrong_type():
    with pytest.raises(ValidationError, match="Type error in the title field"):
        Job.validate_for_creation({"title": 12})


def test_validate_for_creation_rejects_long_title():
    with pytest.raises(
        ValidationError,
        match=r"String length exceeds limit for the title field \(the maximum value is 50\)",
    ):
        Job.validate_for_creation({"title": "x" * 51})


def test_validate_for_creation_accepts_title_at_limit():
    Job.validate_for_creation({"title": "x" * 50})
    assert Job.from_json({"title": "x" * 50}).title == "x" * 50


def test_validate_for_update_requires_primary_key():
    with pytest.raises(
        ValidationError,
        match="The value of primary key must be set in the json object for update",
    ):
        Job.validate_for_update({"title": "Engineer"})


def test_validate_for_update_rejects_null_title():
    with pytest.raises(ValidationError, match="The title column cannot be null"):
        Job.validate_for_update({"id": 1, "title": None})


def test_validate_field_bad_index():
    with pytest.raises(ValidationError, match="Internal error in the server"):
        Job.validate_field(2, "extra", "value", True)


def test_sql_statements():
    job = Job(title="Engineer")
    assert job.insert_sql() == (
        "insert into job (id,title) values (default,$1) returning *",
        True,
    )
    assert Job.find_by_primary_key_sql() == "select * from job where id = $1"
    assert Job.delete_by_primary_key_sql() == "delete from job where id = $1"
    assert Job.insert_columns() == ("title",)
    assert job.insert_args() == ["Engineer"]


def test_primary_key():
    assert Job(id=5).primary_key() == 5
    with pytest.raises(ValueError):
        Job().primary_key()


def test_from_row_by_position():
    job = Job.from_row((2, "Analyst"))
    assert job.to_json() == {"id": 2, "title": "Analyst"}


def test_from_row_too_short():
    with pytest.raises(ValidationError, match="Invalid SQL result for this model"):
        Job.from_row((1,))