# Licensed under the Apache License, Version 2.0
from __future__ import annotations

from typing import Protocol

from ..domain import AddResult


class AddedListener(Protocol):
    """
    Receives one event per stored file or directory, in post-order
    (children before their parent directory).
    """

    def added(self, name: str, result: AddResult) -> None: ...
