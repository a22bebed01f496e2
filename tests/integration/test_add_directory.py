import json
import os
from pathlib import Path
from urllib.parse import parse_qsl, urlsplit

import pytest

from ipfs_add.adapters.filesystem.local_fs import LocalFS
from ipfs_add.adapters.gateway.http_gateway import HttpGateway
from ipfs_add.domain import GatewayError
from ipfs_add.services import PathAdder

# Responses recorded from a real IPFS node for this exact content.
FILE1 = b"file 1 content"
FILE2 = b"file 2 content"
RECORDED_ADDS = {
    FILE1: {"Name": "", "Hash": "QmSFEbC6Y17cdti7damkjoqESWftkyfSXjdKDQqnf4ECV7", "Size": "22"},
    FILE2: {"Name": "", "Hash": "QmVssUfKob8KkUyUiwzoGqNTKqyaEXfqxeGiUJ7ZGyfPLV", "Size": "22"},
}
RECORDED_DIR = "QmaRt7pb5LE7991M94XzVCcZgUKPLoihD941GyFSuYBQ9Y"
RECORDED_STAT = {
    "Hash": RECORDED_DIR,
    "NumLinks": 2,
    "BlockSize": 106,
    "LinksSize": 104,
    "DataSize": 2,
    "CumulativeSize": 150,
}


def _file_part(data: bytes, content_type: str) -> bytes:
    boundary = content_type.split("boundary=", 1)[1].encode()
    part = data.split(b"--" + boundary)[1]
    return part.split(b"\r\n\r\n", 1)[1].rsplit(b"\r\n", 1)[0]


class FixtureSession:
    """Answers like the recorded node, keyed on what was sent."""

    def __init__(self, make_response):
        self._make_response = make_response
        self.calls = []

    def post(self, url, data=None, headers=None, stream=False, **kwargs):
        parts = urlsplit(url)
        command = parts.path.split("/api/v0/", 1)[1]
        payload = _file_part(data, headers["Content-Type"]) if data else None
        self.calls.append((command, dict(parse_qsl(parts.query)), payload))

        if command == "add":
            if payload not in RECORDED_ADDS:
                return self._make_response(500, {"Message": "unexpected content", "Code": 0})
            return self._make_response(200, RECORDED_ADDS[payload])
        if command == "dag/put":
            return self._make_response(200, {"Cid": {"/": RECORDED_DIR}})
        if command == "object/stat":
            return self._make_response(200, RECORDED_STAT)
        return self._make_response(404, b"404 page not found", "text/plain")

    def close(self):
        pass


class Lines:
    def __init__(self):
        self.lines = []
        self.results = {}

    def added(self, name, result):
        self.lines.append(f"added {result.hash} {name}")
        self.results[name] = result


def test_add_two_file_directory(tmp_path: Path, make_response):
    # Arrange
    subdir = tmp_path / "subdir"
    subdir.mkdir()
    (subdir / "file1.txt").write_bytes(FILE1)
    (subdir / "file2.txt").write_bytes(FILE2)
    (subdir / ".hidden").write_bytes(b"not uploaded")

    session = FixtureSession(make_response)
    lines = Lines()
    adder = PathAdder(HttpGateway("127.0.0.1:5001", session=session), LocalFS(), listener=lines)

    # Act
    adder.add_path(str(subdir))

    # Assert: two adds, one dag/put, one stat, in that order
    assert [c[0] for c in session.calls] == ["add", "add", "dag/put", "object/stat"]

    listing = [e.name for e in os.scandir(subdir) if not e.name.startswith(".")]
    node = json.loads(session.calls[2][2])
    assert node["data"] == "CAE="
    assert [link["Name"] for link in node["links"]] == listing
    by_name = {link["Name"]: link for link in node["links"]}
    assert by_name["file1.txt"] == {
        "Cid": {"/": RECORDED_ADDS[FILE1]["Hash"]},
        "Name": "file1.txt",
        "Size": 22,
    }
    assert by_name["file2.txt"]["Cid"] == {"/": RECORDED_ADDS[FILE2]["Hash"]}

    assert session.calls[3][1]["arg"] == RECORDED_DIR
    # The directory reports its cumulative size, not the sum of its links
    directory = lines.results["subdir"]
    assert directory.hash == RECORDED_DIR
    assert directory.size == 150
    assert lines.results["subdir/file1.txt"].size == 22

    assert lines.lines[-1] == f"added {RECORDED_DIR} subdir"
    assert sorted(lines.lines[:2]) == [
        f"added {RECORDED_ADDS[FILE1]['Hash']} subdir/file1.txt",
        f"added {RECORDED_ADDS[FILE2]['Hash']} subdir/file2.txt",
    ]


def test_gateway_failure_leaves_directory_unmaterialized(tmp_path: Path, make_response):
    root = tmp_path / "d"
    root.mkdir()
    (root / "unknown.bin").write_bytes(b"not recorded")

    session = FixtureSession(make_response)
    adder = PathAdder(HttpGateway("127.0.0.1:5001", session=session), LocalFS())

    with pytest.raises(GatewayError, match="^add: unexpected content$"):
        adder.add_path(str(root))

    assert [c[0] for c in session.calls] == ["add"]
