import io
import json
from typing import List, Optional

import pytest
import requests


class TrackedResponse(requests.Response):
    """requests.Response that counts close() calls."""

    def __init__(self):
        super().__init__()
        self.close_calls = 0

    def close(self):
        self.close_calls += 1
        super().close()


def _make_response(
    status: int = 200,
    body=b"",
    content_type: Optional[str] = "application/json",
) -> TrackedResponse:
    if isinstance(body, (dict, list)):
        body = json.dumps(body).encode("utf-8")
    elif isinstance(body, str):
        body = body.encode("utf-8")
    r = TrackedResponse()
    r.status_code = status
    if content_type is not None:
        r.headers["Content-Type"] = content_type
    r.raw = io.BytesIO(body)
    return r


class FakeSession:
    """
    Stands in for requests.Session: replays queued responses in order and
    records every POST.
    """

    def __init__(self, responses: Optional[List] = None):
        self.responses = list(responses or [])
        self.calls = []
        self.closed = False

    def queue(self, response) -> "FakeSession":
        self.responses.append(response)
        return self

    def post(self, url, data=None, headers=None, stream=False, **kwargs):
        self.calls.append(
            {"url": url, "data": data, "headers": dict(headers or {}), "stream": stream}
        )
        if not self.responses:
            raise AssertionError(f"unexpected request: {url}")
        res = self.responses.pop(0)
        if isinstance(res, Exception):
            raise res
        return res

    def close(self):
        self.closed = True


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def make_response():
    return _make_response
