"""HTTP handlers for the department resource."""

from __future__ import annotations

import logging
import sqlite3
from http import HTTPStatus

from .department import Department
from .http import Request, Response, Router, error_response, json_response
from .mapper import DatabaseError, Mapper, NotFoundError, SortOrder
from .model import ValidationError

log = logging.getLogger(__name__)

DEFAULT_OFFSET = 0
DEFAULT_LIMIT = 25


def _int_param(request: Request, name: str, default: int) -> int:
    try:
        return int(request.query[name])
    except (KeyError, ValueError):
        return default


def _department_from_request(request: Request) -> Department:
    if not isinstance(request.json, dict):
        raise ValidationError("No json object is found in the request")
    return Department.from_json(request.json)


def _database_error(exc: Exception) -> Response:
    log.error("%s", exc)
    return error_response("database error", HTTPStatus.INTERNAL_SERVER_ERROR)


class DepartmentsController:
    """List, read, create, update and delete departments."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def _mapper(self) -> Mapper:
        return Mapper(self._connection, Department)

    def get(self, request: Request) -> Response:
        """List departments, honouring offset, limit, sort_field and sort_order."""
        offset = _int_param(request, "offset", DEFAULT_OFFSET)
        limit = _int_param(request, "limit", DEFAULT_LIMIT)
        sort_field = request.query.get("sort_field", "id")
        order = SortOrder.ASC if request.query.get("sort_order", "asc") == "asc" else SortOrder.DESC
        try:
            departments = (
                self._mapper().order_by(sort_field, order).offset(offset).limit(limit).find_all()
            )
        except DatabaseError as exc:
            return _database_error(exc)
        return json_response([department.to_json() for department in departments], HTTPStatus.OK)

    def get_one(self, request: Request, department_id: int) -> Response:
        """Return one department, or an empty 404."""
        try:
            department = self._mapper().find_by_primary_key(department_id)
        except NotFoundError:
            return Response(HTTPStatus.NOT_FOUND)
        except DatabaseError as exc:
            return _database_error(exc)
        return json_response(department.to_json(), HTTPStatus.CREATED)

    def create_one(self, request: Request) -> Response:
        """Insert a department from the JSON body and return it."""
        try:
            department = _department_from_request(request)
        except ValidationError as exc:
            return error_response(str(exc), HTTPStatus.BAD_REQUEST)
        try:
            created = self._mapper().insert(department)
        except DatabaseError as exc:
            return _database_error(exc)
        return json_response(created.to_json(), HTTPStatus.CREATED)

    def update_one(self, request: Request, department_id: int) -> Response:
        """Change the name of a department."""
        try:
            details = _department_from_request(request)
        except ValidationError as exc:
            return error_response(str(exc), HTTPStatus.BAD_REQUEST)
        mapper = self._mapper()
        try:
            department = mapper.find_by_primary_key(department_id)
        except DatabaseError:
            return error_response("resource not found", HTTPStatus.NOT_FOUND)
        if details.name is not None:
            department.name = details.name
        try:
            mapper.update(department)
        except DatabaseError as exc:
            return _database_error(exc)
        return Response(HTTPStatus.NO_CONTENT)

    def delete_one(self, request: Request, department_id: int) -> Response:
        """Delete a department."""
        try:
            self._mapper().delete_by("id", department_id)
        except DatabaseError as exc:
            return _database_error(exc)
        return Response(HTTPStatus.NO_CONTENT)

    def register(self, router: Router) -> None:
        """Add this controller's routes to router."""
        router.add("GET", "/departments", self.get)
        router.add("GET", "/departments/{department_id:int}", self.get_one)
        router.add("POST", "/departments", self.create_one)
        router.add("PUT", "/departments/{department_id:int}", self.update_one)
        router.add("DELETE", "/departments/{department_id:int}", self.delete_one)