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

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Union

import requests

from ...domain import GatewayError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class ResponseOutput:
    """
    Read-only file-like view over a streaming HTTP response body.

    close() drains whatever is left before releasing the connection, so the
    underlying socket can be reused. Closing more than once is a no-op.
    """

    def __init__(self, response: requests.Response, chunk_size: int = CHUNK_SIZE) -> None:
        self._response = response
        self._chunks = response.iter_content(chunk_size=chunk_size)
        self._buffer = b""
        self.closed = False

    def _next_chunk(self) -> bytes:
        for chunk in self._chunks:
            if chunk:
                return chunk
        return b""

    def read(self, size: int = -1) -> bytes:
        if self.closed:
            raise ValueError("I/O operation on closed response body")
        if size is None or size < 0:
            data = self._buffer + b"".join(self._chunks)
            self._buffer = b""
            return data
        while len(self._buffer) < size:
            chunk = self._next_chunk()
            if not chunk:
                break
            self._buffer += chunk
        data, self._buffer = self._buffer[:size], self._buffer[size:]
        return data

    def readable(self) -> bool:
        return True

    def __iter__(self) -> Iterator[bytes]:
        while True:
            chunk = self.read(CHUNK_SIZE)
            if not chunk:
                return
            yield chunk

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._buffer = b""
        try:
            for _ in self._chunks:
                pass
        except requests.RequestException as e:
            logger.debug("ipfs: error draining response body: %s", e)
        finally:
            self._response.close()

    def __enter__(self) -> ResponseOutput:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# --- outcome variants ---------------------------------------------------------


@dataclass(frozen=True)
class Success:
    output: ResponseOutput


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class PlainTextError:
    text: str


@dataclass(frozen=True)
class StructuredError:
    message: str = ""
    code: int = 0
    command: str = ""


@dataclass(frozen=True)
class UnknownEncoding:
    content_type: str
    body: bytes


Outcome = Union[Success, NotFound, PlainTextError, StructuredError, UnknownEncoding]


def media_type(response: requests.Response) -> str:
    return response.headers.get("Content-Type", "").split(";")[0].strip()


def _decode_structured(status: int, body: bytes) -> StructuredError:
    """Best-effort decode of a {Command, Message, Code} error body."""
    fields: dict[str, Any] = {}
    try:
        obj = json.loads(body)
        if not isinstance(obj, dict):
            raise ValueError(f"expected a JSON object, got {type(obj).__name__}")
        for key, value in obj.items():
            fields[key.lower()] = value
    except ValueError as e:
        logger.warning("ipfs: response (%d) unmarshal error: %s", status, e)

    message = fields.get("message")
    if not isinstance(message, str):
        message = ""
    code = fields.get("code")
    if isinstance(code, bool) or not isinstance(code, int):
        if code is not None:
            logger.warning("ipfs: response (%d) has a non-integer code: %r", status, code)
        code = 0
    command = fields.get("command")
    if not isinstance(command, str):
        command = ""
    return StructuredError(message=message, code=code, command=command)


def classify(response: requests.Response) -> Outcome:
    """
    Sort an HTTP response into one outcome variant.

    Every variant except Success has already drained and closed the body.
    """
    status = response.status_code
    if status < 400:
        return Success(ResponseOutput(response))

    try:
        # .content reads the body to the end
        body = response.content or b""
    except requests.RequestException as e:
        logger.warning("ipfs: response (%d) read error: %s", status, e)
        body = b""
    finally:
        response.close()

    if status == 404:
        return NotFound()

    ctype = media_type(response)
    if ctype == "text/plain":
        return PlainTextError(body.decode("utf-8", errors="replace"))
    if ctype == "application/json":
        return _decode_structured(status, body)

    logger.warning("ipfs: unhandled response (%d) encoding: %s", status, ctype)
    return UnknownEncoding(content_type=ctype, body=body)


def to_error(outcome: Outcome, command: str) -> Optional[GatewayError]:
    """Translate a failed outcome into a GatewayError; None for Success."""
    if isinstance(outcome, Success):
        return None
    if isinstance(outcome, NotFound):
        return GatewayError(command, "command not found")
    if isinstance(outcome, PlainTextError):
        return GatewayError(command, outcome.text)
    if isinstance(outcome, StructuredError):
        return GatewayError(outcome.command or command, outcome.message, outcome.code)
    body = outcome.body.decode("utf-8", errors="replace")
    return GatewayError(
        command, f'unknown ipfs error encoding: "{outcome.content_type}" - "{body}"'
    )


class Response:
    """Either a live output stream or the gateway error that replaced it."""

    def __init__(
        self,
        output: Optional[ResponseOutput] = None,
        error: Optional[GatewayError] = None,
    ) -> None:
        self.output = output
        self.error = error

    @classmethod
    def from_outcome(cls, outcome: Outcome, command: str) -> Response:
        if isinstance(outcome, Success):
            return cls(output=outcome.output)
        return cls(error=to_error(outcome, command))

    def close(self) -> None:
        if self.output is not None:
            self.output.close()

    def decode(self) -> Any:
        """
        Raise the gateway error if there is one, else parse the first JSON
        value of the output. The output is closed on every path.
        """
        try:
            if self.error is not None:
                raise self.error
            if self.output is None:
                return None
            text = self.output.read().decode("utf-8")
            value, _ = json.JSONDecoder().raw_decode(text.lstrip())
            return value
        finally:
            self.close()
