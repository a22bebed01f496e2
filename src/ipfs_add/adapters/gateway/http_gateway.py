# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

import io
import json
import logging
import threading
from typing import BinaryIO, Optional, Sequence

import requests

from ...domain import AddResult, Cid, Link, ObjectStat, ResponseDecodeError
from ...ports.gateway import GatewayPort
from .request import Request
from .response import ResponseOutput

logger = logging.getLogger(__name__)

# Data of an empty UnixFS directory node (protobuf, base64). dag/put fills in
# the links; the data part is the same for every directory.
DIRECTORY_NODE_DATA = "CAE="


def normalize_url(url: str) -> str:
    if not url.startswith("http"):
        url = "http://" + url
    return url.rstrip("/")


def directory_node_json(links: Sequence[Link]) -> bytes:
    node = {
        "data": DIRECTORY_NODE_DATA,
        "links": [link.to_json() for link in links],
    }
    return json.dumps(node, separators=(",", ":")).encode("utf-8")


class HttpGateway(GatewayPort):
    """
    Client for the IPFS HTTP API (/api/v0).

    Requests run one at a time over a single requests.Session; pass your own
    session to control proxies, adapters or TLS settings.
    """

    def __init__(self, url: str, session: Optional[requests.Session] = None) -> None:
        self.url = normalize_url(url)
        self._session = session if session is not None else requests.Session()
        logger.debug("HttpGateway using %s", self.url)

    @property
    def api_base(self) -> str:
        return self.url + "/api/v0"

    def request(self, command: str, *args: str) -> Request:
        return Request(self._session, self.api_base, command, *args)

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> HttpGateway:
        return self

    # --- commands -------------------------------------------------------------

    def add(self, stream: BinaryIO, cancel: Optional[threading.Event] = None) -> AddResult:
        out = (
            self.request("add")
            .option("progress", False)
            .option("pin", True)
            .body(stream)
            .exec(cancel)
        )
        return AddResult.from_json(_as_object(out, "add"))

    def dag_put_links(
        self, links: Sequence[Link], cancel: Optional[threading.Event] = None
    ) -> Cid:
        out = (
            self.request("dag/put")
            .option("format", "protobuf")
            .option("input-enc", "json")
            .option("pin", True)
            .body(io.BytesIO(directory_node_json(links)))
            .exec(cancel)
        )
        cid = Cid.from_json(_as_object(out, "dag/put").get("Cid"))
        if not cid.defined():
            raise ResponseDecodeError("dag/put: response carries no Cid")
        return cid

    def cat(self, path: str, cancel: Optional[threading.Event] = None) -> ResponseOutput:
        """
        Return the raw content stored at `path` as a live stream.
        The caller must close it.
        """
        res = self.request("cat", path).send(cancel)
        if res.error is not None:
            raise res.error
        assert res.output is not None
        return res.output

    def object_stat(
        self, path: str, cancel: Optional[threading.Event] = None
    ) -> ObjectStat:
        out = self.request("object/stat", path).exec(cancel)
        return ObjectStat.from_json(_as_object(out, "object/stat"))


def _as_object(value, command: str) -> dict:
    if not isinstance(value, dict):
        raise ResponseDecodeError(
            f"{command}: expected a JSON object, got {type(value).__name__}"
        )
    return value
