"""Minimal HTTP plumbing: requests, JSON responses and a WSGI router."""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any
from urllib.parse import parse_qsl

JSON_CONTENT_TYPE = "application/json"


@dataclass
class Request:
    """An incoming request; ``json`` holds the parsed body or None."""

    method: str
    path: str
    query: dict[str, str] = field(default_factory=dict)
    json: Any = None
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class Response:
    """An outgoing response with an encoded body."""

    status: int = HTTPStatus.OK
    body: bytes = b""
    content_type: str | None = None


def json_response(data: Any, status: int = HTTPStatus.OK) -> Response:
    """Return a response carrying data encoded as JSON."""
    return Response(int(status), json.dumps(data).encode("utf-8"), JSON_CONTENT_TYPE)


def error_response(message: str, status: int) -> Response:
    """Return a JSON response of the form {"error": message}."""
    return json_response({"error": message}, status)


Handler = Callable[..., Response]

_PLACEHOLDER = re.compile(r"\{(\w+)(?::(int))?\}")
_CONVERTERS: dict[str | None, tuple[str, Callable[[str], Any]]] = {
    None: (r"[^/]+", str),
    "int": (r"-?\d+", int),
}


@dataclass(frozen=True)
class _Route:
    method: str
    regex: re.Pattern[str]
    converters: tuple[Callable[[str], Any], ...]
    handler: Handler


def _compile(pattern: str) -> tuple[re.Pattern[str], tuple[Callable[[str], Any], ...]]:
    parts: list[str] = []
    converters: list[Callable[[str], Any]] = []
    position = 0
    for match in _PLACEHOLDER.finditer(pattern):
        parts.append(re.escape(pattern[position : match.start()]))
        regex, converter = _CONVERTERS[match.group(2)]
        parts.append(f"({regex})")
        converters.append(converter)
        position = match.end()
    parts.append(re.escape(pattern[position:]))
    return re.compile("".join(parts)), tuple(converters)


def _status_line(status: int) -> str:
    try:
        phrase = HTTPStatus(status).phrase
    except ValueError:
        phrase = ""
    return f"{status} {phrase}".rstrip()


def _request_from_environ(environ: dict[str, Any]) -> Request:
    try:
        length = int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError:
        length = 0
    body = environ["wsgi.input"].read(length) if length > 0 else b""

    headers = {
        key[5:].replace("_", "-").title(): value
        for key, value in environ.items()
        if key.startswith("HTTP_")
    }
    content_type = environ.get("CONTENT_TYPE") or ""
    if content_type:
        headers["Content-Type"] = content_type

    payload = None
    if body and content_type.lower().startswith(JSON_CONTENT_TYPE):
        try:
            payload = json.loads(body)
        except ValueError:
            payload = None

    return Request(
        method=environ.get("REQUEST_METHOD", "GET").upper(),
        path=environ.get("PATH_INFO") or "/",
        query=dict(parse_qsl(environ.get("QUERY_STRING", ""), keep_blank_values=True)),
        json=payload,
        headers=headers,
    )


class Router:
    """Routes requests to handlers by method and path; usable as a WSGI app.

    Patterns may hold placeholders: ``{name}`` matches one path segment and
    ``{name:int}`` matches an integer, passed to the handler as an int.
    """

    def __init__(self) -> None:
        self._routes: list[_Route] = []

    def add(self, method: str, pattern: str, handler: Handler) -> None:
        """Register handler for method and path pattern."""
        regex, converters = _compile(pattern)
        self._routes.append(_Route(method.upper(), regex, converters, handler))

    def dispatch(self, request: Request) -> Response:
        """Call the matching handler, or answer 404 or 405."""
        path_matched = False
        for route in self._routes:
            match = route.regex.fullmatch(request.path)
            if match is None:
                continue
            if route.method != request.method.upper():
                path_matched = True
                continue
            args = [convert(value) for convert, value in zip(route.converters, match.groups())]
            return route.handler(request, *args)
        if path_matched:
            return error_response("method not allowed", HTTPStatus.METHOD_NOT_ALLOWED)
        return error_response("not found", HTTPStatus.NOT_FOUND)

    def __call__(
        self, environ: dict[str, Any], start_response: Callable[..., Any]
    ) -> Iterable[bytes]:
        response = self.dispatch(_request_from_environ(environ))
        headers = [("Content-Length", str(len(response.body)))]
        if response.content_type:
            headers.append(("Content-Type", response.content_type))
        start_response(_status_line(int(response.status)), headers)
        return [response.body]