import io
import json
from http import HTTPStatus
from wsgiref.util import setup_testing_defaults

from orgchart.http import Request, Response, Router, error_response, json_response


def _call(app, method, path, body=b"", content_type="application/json", query=""):
    environ = {}
    setup_testing_defaults(environ)
    environ.update(
        {
            "REQUEST_METHOD": method,
            "PATH_INFO": path,
            "QUERY_STRING": query,
            "CONTENT_LENGTH": str(len(body)),
            "CONTENT_TYPE": content_type,
            "wsgi.input": io.BytesIO(body),
        }
    )
    captured = {}

    def start_response(status, headers):
        captured["status"] = status
        captured["headers"] = dict(headers)

    chunks = app(environ, start_response)
    return captured["status"], captured["headers"], b"".join(chunks)


def test_error_response_holds_message():
    response = error_response("test error", HTTPStatus.BAD_REQUEST)
    assert response.status == HTTPStatus.BAD_REQUEST
    assert json.loads(response.body) == {"error": "test error"}


def test_error_response_empty_message():
    response = error_response("", HTTPStatus.BAD_REQUEST)
    assert json.loads(response.body)["error"] == ""


def test_json_response_round_trip():
    data = {"id": 3, "name": "Sales", "tags": ["a", "b"]}
    response = json_response(data, HTTPStatus.CREATED)
    assert response.status == HTTPStatus.CREATED
    assert response.content_type == "application/json"
    assert json.loads(response.body) == data


def test_json_response_default_status_is_ok():
    assert json_response([]).status == HTTPStatus.OK


def test_dispatch_converts_int_placeholder():
    router = Router()
    router.add("GET", "/items/{item_id:int}", lambda request, item_id: json_response({"id": item_id}))
    response = router.dispatch(Request("GET", "/items/7"))
    assert json.loads(response.body) == {"id": 7}


def test_dispatch_string_placeholder():
    router = Router()
    router.add("GET", "/tags/{name}", lambda request, name: json_response(name))
    response = router.dispatch(Request("GET", "/tags/blue"))
    assert json.loads(response.body) == "blue"


def test_dispatch_non_integer_is_not_found():
    router = Router()
    router.add("GET", "/items/{item_id:int}", lambda request, item_id: json_response(item_id))
    assert router.dispatch(Request("GET", "/items/abc")).status == HTTPStatus.NOT_FOUND


def test_dispatch_wrong_method():
    router = Router()
    router.add("GET", "/items", lambda request: json_response([]))
    assert router.dispatch(Request("DELETE", "/items")).status == HTTPStatus.METHOD_NOT_ALLOWED


def test_dispatch_picks_route_by_method():
    router = Router()
    router.add("GET", "/items", lambda request: json_response("get"))
    router.add("POST", "/items", lambda request: json_response("post", HTTPStatus.CREATED))
    response = router.dispatch(Request("POST", "/items"))
    assert response.status == HTTPStatus.CREATED
    assert json.loads(response.body) == "post"


def test_wsgi_posts_json_body():
    router = Router()
    router.add("POST", "/echo", lambda request: json_response(request.json, HTTPStatus.CREATED))
    payload = {"name": "Research"}
    status, headers, body = _call(router, "POST", "/echo", json.dumps(payload).encode())
    assert status.startswith(str(int(HTTPStatus.CREATED)))
    assert headers["Content-Type"] == "application/json"
    assert int(headers["Content-Length"]) == len(body)
    assert json.loads(body) == payload


def test_wsgi_invalid_json_gives_none():
    router = Router()
    router.add("POST", "/echo", lambda request: json_response(request.json is None))
    _, _, body = _call(router, "POST", "/echo", b"{not json")
    assert json.loads(body) is True


def test_wsgi_passes_query_parameters():
    router = Router()
    router.add("GET", "/q", lambda request: json_response(request.query))
    _, _, body = _call(router, "GET", "/q", query="limit=5&sort_order=desc")
    assert json.loads(body) == {"limit": "5", "sort_order": "desc"}


def test_wsgi_empty_response_body():
    router = Router()
    router.add("DELETE", "/x", lambda request: Response(HTTPStatus.NO_CONTENT))
    status, headers, body = _call(router, "DELETE", "/x")
    assert status.startswith(str(int(HTTPStatus.NO_CONTENT)))
    assert body == b""
    assert "Content-Type" not in headers