# tests/unit/test_gateway_request.py
import io
import threading
from urllib.parse import parse_qsl, urlsplit

import pytest
import requests

from ipfs_add.adapters.gateway.request import (
    Request,
    option_value,
    to_multipart_file,
)
from ipfs_add.domain import GatewayError, OperationCancelled

API = "http://127.0.0.1:5001/api/v0"


def query(url):
    return parse_qsl(urlsplit(url).query)


def test_url_has_default_options(session):
    url = Request(session, API, "add").url()
    assert url.startswith(API + "/add?")
    assert dict(query(url)) == {"encoding": "json", "stream-channels": "true"}


def test_url_args_come_first_and_repeat(session):
    req = Request(session, API, "cat", "QmA", "QmB").option("offset", 10)
    params = query(req.url())
    assert params[:2] == [("arg", "QmA"), ("arg", "QmB")]
    assert dict(params[2:]) == {
        "encoding": "json",
        "stream-channels": "true",
        "offset": "10",
    }


def test_url_is_stable_for_same_option_set(session):
    a = Request(session, API, "add").option("pin", True).option("progress", False)
    b = Request(session, API, "add").option("progress", False).option("pin", True)
    assert a.url() == b.url()


def test_options_override_defaults(session):
    req = Request(session, API, "add").option("encoding", "text")
    assert dict(query(req.url()))["encoding"] == "text"


def test_args_are_url_encoded(session):
    url = Request(session, API, "cat", "QmRoot/sub dir/a&b.txt").url()
    assert ("arg", "QmRoot/sub dir/a&b.txt") in query(url)


@pytest.mark.parametrize(
    "value, expected",
    [(True, "true"), (False, "false"), ("x", "x"), (b"raw", "raw"), (42, "42")],
)
def test_option_value(value, expected):
    assert option_value(value) == expected


def test_multipart_file_single_part():
    body, ctype = to_multipart_file(io.BytesIO(b"file 1 content"))
    assert ctype.startswith("multipart/form-data; boundary=")
    boundary = ctype.split("boundary=", 1)[1]
    assert body.startswith(b"--" + boundary.encode())
    assert b'Content-Disposition: form-data; name="file"; filename=""' in body
    assert b"file 1 content" in body
    assert body.count(b"Content-Disposition") == 1


def test_no_stream_no_body():
    assert to_multipart_file(None) == (None, None)


def test_send_posts_multipart_with_content_type(session, make_response):
    session.queue(make_response(200, {"Hash": "Qm"}))
    req = Request(session, API, "add").body(io.BytesIO(b"abc"))
    res = req.send()
    call = session.calls[0]
    assert call["url"] == req.url()
    assert call["stream"] is True
    assert call["headers"]["Content-Type"].startswith("multipart/form-data")
    assert b"abc" in call["data"]
    res.close()


def test_send_without_body_has_no_content_type(session, make_response):
    session.queue(make_response(200, {"Hash": "Qm"}))
    Request(session, API, "object/stat", "Qm").send().close()
    call = session.calls[0]
    assert call["data"] is None
    assert "Content-Type" not in call["headers"]


def test_send_propagates_transport_error(session):
    session.queue(requests.ConnectionError("connection refused"))
    with pytest.raises(requests.ConnectionError, match="connection refused"):
        Request(session, API, "add").send()


def test_send_returns_gateway_error_instead_of_raising(session, make_response):
    session.queue(make_response(404, b"404 page not found", "text/plain"))
    res = Request(session, API, "nope").send()
    assert res.output is None
    assert isinstance(res.error, GatewayError)
    assert str(res.error) == "nope: command not found"


def test_exec_decodes_json(session, make_response):
    session.queue(make_response(200, {"Cid": {"/": "QmDir"}}))
    assert Request(session, API, "dag/put").exec() == {"Cid": {"/": "QmDir"}}


def test_exec_raises_gateway_error(session, make_response):
    session.queue(make_response(500, {"Message": "boom", "Code": 7}))
    with pytest.raises(GatewayError, match="^add: 7: boom$"):
        Request(session, API, "add").exec()


def test_cancelled_request_is_never_sent(session):
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(OperationCancelled):
        Request(session, API, "add").exec(cancel)
    assert session.calls == []
