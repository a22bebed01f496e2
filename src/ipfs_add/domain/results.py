# Licensed under the Apache License, Version 2.0
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .cid import Cid, Link
from .errors import ResponseDecodeError


def _uint(value: Any, field: str, *, string_encoded: bool = False) -> int:
    if value is None:
        return 0
    if string_encoded and isinstance(value, str):
        if not (value.isascii() and value.isdigit()):
            raise ResponseDecodeError(f"{field}: invalid unsigned integer string {value!r}")
        return int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ResponseDecodeError(f"{field}: expected unsigned integer, got {value!r}")
    return value


@dataclass(frozen=True)
class AddResult:
    """Hash and cumulative size of a stored file or directory node."""

    hash: str
    size: int

    def __str__(self) -> str:
        return f"Hash: {self.hash} Size: {self.size}"

    @property
    def cid(self) -> Cid:
        return Cid(self.hash)

    def to_link(self, name: str) -> Link:
        return self.cid.to_link(name, self.size)

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> AddResult:
        hash = obj.get("Hash")
        if not hash or not isinstance(hash, str):
            raise ResponseDecodeError(f"Hash: expected a non-empty string, got {hash!r}")
        # The add command sends Size as a JSON string ("22"), not a number.
        return cls(
            hash=hash,
            size=_uint(obj.get("Size"), "Size", string_encoded=True),
        )


@dataclass(frozen=True)
class ObjectStat:
    """Information about a DAG node as reported by object/stat."""

    hash: str
    num_links: int = 0
    block_size: int = 0
    links_size: int = 0
    data_size: int = 0
    cumulative_size: int = 0

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> ObjectStat:
        return cls(
            hash=obj.get("Hash") or "",
            num_links=_uint(obj.get("NumLinks"), "NumLinks"),
            block_size=_uint(obj.get("BlockSize"), "BlockSize"),
            links_size=_uint(obj.get("LinksSize"), "LinksSize"),
            data_size=_uint(obj.get("DataSize"), "DataSize"),
            cumulative_size=_uint(obj.get("CumulativeSize"), "CumulativeSize"),
        )
