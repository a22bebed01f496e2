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
from dataclasses import dataclass
from typing import Any, Optional, Union

from .errors import CidFormatError

# Key used by IPLD links: { "/": "<cid-string>" }
# (https://github.com/ipld/specs/tree/master/ipld)
CID_KEY = "/"


@dataclass(frozen=True)
class Cid:
    """
    A self-describing content address, kept as the opaque token the gateway
    hands out. The empty token is the undefined Cid; the gateway, not the
    client, decides what a valid token looks like.
    """

    value: str = ""

    def __str__(self) -> str:
        return self.value

    def defined(self) -> bool:
        return self.value != ""

    def to_json(self) -> Optional[dict]:
        if not self.defined():
            return None
        return {CID_KEY: self.value}

    def marshal(self) -> str:
        """Return the compact JSON form: ``{"/":"<token>"}`` or ``null``."""
        return json.dumps(self.to_json(), separators=(",", ":"))

    @classmethod
    def from_json(cls, obj: Any) -> Cid:
        """Build a Cid from an already-parsed JSON value."""
        if obj is None:
            return cls()
        if not isinstance(obj, dict):
            raise CidFormatError(f"cid must be a JSON object, got {type(obj).__name__}")
        target = obj.get(CID_KEY)
        if not target or not isinstance(target, str):
            raise CidFormatError("cid was incorrectly formatted")
        return cls(target)

    @classmethod
    def unmarshal(cls, blob: Union[str, bytes]) -> Cid:
        if len(blob) < 2:
            raise CidFormatError("invalid cid json blob")
        return cls.from_json(json.loads(blob))

    def to_link(self, name: str, size: int) -> Link:
        return Link(cid=self, name=name, size=size)


@dataclass(frozen=True)
class Link:
    """An IPFS Merkle DAG link from a parent node to a child."""

    cid: Cid
    # should be unique per parent object
    name: str
    # cumulative size of the target object
    size: int

    def to_json(self) -> dict:
        return {"Cid": self.cid.to_json(), "Name": self.name, "Size": self.size}
