# orgchart

A small JSON REST API for the departments and jobs of an organisation
chart. It is a plain WSGI application on top of SQLite and uses nothing
beyond the Python standard library.

## Installing

```
pip install .
```

## Running the server

```
orgchart --config config.json
```

Without `--config` the command reads `../config.json`. If the file
cannot be read or is not valid, it prints a message and exits with
status 1. Otherwise it creates the tables if needed and serves the
application with the standard library's `wsgiref` server until
interrupted.

The configuration is a JSON object. Only the first entry of each list
is used:

```json
{
  "listeners": [{"address": "127.0.0.1", "port": 3000}],
  "db_clients": [{"filename": "org_chart.db"}]
}
```

`address` defaults to `127.0.0.1`, `port` to `3000`, and the database
file is taken from `filename`, else `dbname`, else `org_chart.db`.
`orgchart.app.load_config` returns these settings as a `Config`.

## Endpoints

Departments:

| Method | Path                  | Result                                              |
|--------|-----------------------|-----------------------------------------------------|
| GET    | `/departments`        | list, 200                                           |
| GET    | `/departments/{id}`   | the department with status 201, or an empty 404     |
| POST   | `/departments`        | create from `{"name": ...}`, 201 with the new row   |
| PUT    | `/departments/{id}`   | change the name, 204; 404 if there is no such row   |
| DELETE | `/departments/{id}`   | delete, 204 (also when nothing was deleted)         |

Jobs offer the same routes under `/jobs`, with a `title` instead of a
`name`. A `PUT` to `/jobs/{id}` without a JSON object body answers an
empty 400.

List endpoints take the query parameters `offset` (default 0), `limit`
(default 25), `sort_field` (default `id`) and `sort_order` (`asc` by
default; any other value sorts descending). An unknown `sort_field`
gives a 500.

Request bodies are read as JSON when the `Content-Type` is
`application/json`. Errors come back as a JSON object with a single
`error` key, for example `{"error": "database error"}` with status 500.
An unknown path answers 404 and a known path with the wrong method 405.

## Using it from Python

```python
import sqlite3

from orgchart.app import create_app
from orgchart.http import Request

connection = sqlite3.connect(":memory:")
app = create_app(connection)

response = app.dispatch(Request("POST", "/departments", json={"name": "Sales"}))
print(response.status, response.body)
```

`create_app` returns a `orgchart.http.Router`, which is also a WSGI
callable and can be handed to any WSGI server.

The models `orgchart.department.Department` and `orgchart.job.Job` can
be used on their own: `from_json`, `to_json` and `validate_for_creation`
build, serialise and check records (raising
`orgchart.model.ValidationError`), and `orgchart.mapper.Mapper` reads
and writes them in a SQLite connection prepared with
`orgchart.mapper.create_schema`.

## What it does not do

- It keeps only departments and jobs: there are no person records, no
  lists of the people in a department or job, and no reporting lines.
- There is no user registration, login or token check; every route is
  open to anyone who can reach the server.
- Storage is SQLite only.

## Tests

```
pip install .[test]
pytest
```