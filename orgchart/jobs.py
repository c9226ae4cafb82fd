"""HTTP handlers for the job resource."""

from __future__ import annotations

import logging
import sqlite3
from http import HTTPStatus

from .http import Request, Response, Router, error_response, json_response
from .job import Job
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


def _database_error(exc: Exception) -> Response:
    log.error("%s", exc)
    return error_response("database error", HTTPStatus.INTERNAL_SERVER_ERROR)


class JobsController:
    """List, read, create, update and delete jobs."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def _mapper(self) -> Mapper:
        return Mapper(self._connection, Job)

    def get(self, request: Request) -> Response:
        """List jobs, honouring offset, limit, sort_field and sort_order."""
        offset = _int_param(request, "offset", DEFAULT_OFFSET)
        limit = _int_param(request, "limit", DEFAULT_LIMIT)
        sort_field = request.query.get("sort_field", "id")
        order = SortOrder.ASC if request.query.get("sort_order", "asc") == "asc" else SortOrder.DESC
        try:
            jobs = self._mapper().order_by(sort_field, order).offset(offset).limit(limit).find_all()
        except DatabaseError as exc:
            return _database_error(exc)
        return json_response([job.to_json() for job in jobs], HTTPStatus.OK)

    def get_one(self, request: Request, job_id: int) -> Response:
        """Return one job, or an empty 404."""
        try:
            job = self._mapper().find_by_primary_key(job_id)
        except NotFoundError:
            return Response(HTTPStatus.NOT_FOUND)
        except DatabaseError as exc:
            return _database_error(exc)
        return json_response(job.to_json(), HTTPStatus.CREATED)

    def create_one(self, request: Request) -> Response:
        """Insert a job from the JSON body and return it."""
        if not isinstance(request.json, dict):
            return error_response(
                "No json object is found in the request", HTTPStatus.BAD_REQUEST
            )
        try:
            job = Job.from_json(request.json)
        except ValidationError as exc:
            return error_response(str(exc), HTTPStatus.BAD_REQUEST)
        try:
            created = self._mapper().insert(job)
        except DatabaseError as exc:
            return _database_error(exc)
        return json_response(created.to_json(), HTTPStatus.CREATED)

    def update_one(self, request: Request, job_id: int) -> Response:
        """Change the title of a job; an empty 400 without a JSON body."""
        if not isinstance(request.json, dict):
            return Response(HTTPStatus.BAD_REQUEST)
        try:
            details = Job.from_json(request.json)
        except ValidationError as exc:
            return error_response(str(exc), HTTPStatus.BAD_REQUEST)
        mapper = self._mapper()
        try:
            job = mapper.find_by_primary_key(job_id)
        except DatabaseError:
            return error_response("resource not found", HTTPStatus.NOT_FOUND)
        if details.title is not None:
            job.title = details.title
        try:
            mapper.update(job)
        except DatabaseError as exc:
            return _database_error(exc)
        return Response(HTTPStatus.NO_CONTENT)

    def delete_one(self, request: Request, job_id: int) -> Response:
        """Delete a job."""
        try:
            self._mapper().delete_by("id", job_id)
        except DatabaseError as exc:
            return _database_error(exc)
        return Response(HTTPStatus.NO_CONTENT)

    def register(self, router: Router) -> None:
        """Add this controller's routes to router."""
        router.add("GET", "/jobs", self.get)
        router.add("GET", "/jobs/{job_id:int}", self.get_one)
        router.add("POST", "/jobs", self.create_one)
        router.add("PUT", "/jobs/{job_id:int}", self.update_one)
        router.add("DELETE", "/jobs/{job_id:int}", self.delete_one)