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

import logging
import threading
from typing import Any, BinaryIO, Dict, Optional, Tuple
from urllib.parse import urlencode

import requests
from urllib3.filepost import encode_multipart_formdata

from ...domain import OperationCancelled
from .response import Response, classify

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS = {
    "encoding": "json",
    "stream-channels": "true",
}


def to_multipart_file(stream: Optional[BinaryIO]) -> Tuple[Optional[bytes], Optional[str]]:
    """
    Wrap `stream` as a single-part multipart/form-data body.

    The part is named "file" with an empty filename. Returns (body, content_type),
    or (None, None) when there is no stream.
    """
    if stream is None:
        return None, None
    data = stream.read()
    if isinstance(data, str):
        data = data.encode("utf-8")
    return encode_multipart_formdata({"file": ("", data)})


def option_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return str(value)


class Request:
    """
    One call to a gateway command: POST {api_base}/{command}?arg=...&opt=...

    Built with chained option()/body() calls, then run with send() or exec().
    """

    def __init__(
        self,
        session: requests.Session,
        api_base: str,
        command: str,
        *args: str,
    ) -> None:
        self._session = session
        self.api_base = api_base
        self.command = command
        self.args = list(args)
        self.opts: Dict[str, str] = dict(DEFAULT_OPTIONS)
        self._body: Optional[BinaryIO] = None

    def option(self, key: str, value: Any) -> Request:
        self.opts[key] = option_value(value)
        return self

    def body(self, stream: Optional[BinaryIO]) -> Request:
        self._body = stream
        return self

    def url(self) -> str:
        params = [("arg", arg) for arg in self.args]
        params.extend(sorted(self.opts.items()))
        return f"{self.api_base}/{self.command}?{urlencode(params)}"

    def send(self, cancel: Optional[threading.Event] = None) -> Response:
        """
        Issue the request. Transport failures propagate as raised by requests;
        gateway failures come back as Response.error with the body released.
        `cancel` is checked once, before the POST; it cannot stop the exchange.
        """
        if cancel is not None and cancel.is_set():
            raise OperationCancelled(f"{self.command}: cancelled")

        data, content_type = to_multipart_file(self._body)
        headers = {}
        if content_type is not None:
            headers["Content-Type"] = content_type

        url = self.url()
        logger.debug("POST %s", url)
        res = self._session.post(url, data=data, headers=headers, stream=True)
        return Response.from_outcome(classify(res), self.command)

    def exec(self, cancel: Optional[threading.Event] = None) -> Any:
        """Send the request and decode the JSON response."""
        return self.send(cancel).decode()
