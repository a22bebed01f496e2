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

import threading
from abc import ABC, abstractmethod
from typing import BinaryIO, Optional, Sequence

from ..domain import AddResult, Cid, Link, ObjectStat


class GatewayPort(ABC):
    """
    Abstract interface to a content-addressed store.

    Every call accepts an optional cancellation event; once it is set, pending
    calls fail with OperationCancelled instead of reaching the store. The event
    is only checked before a request goes out: an exchange already in flight
    (including an upload in progress) runs to completion.

    Gateways may hold connections; use them as context managers or call close().
    """

    def close(self) -> None:
        """Release resources held by the gateway. The default holds none."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @abstractmethod
    def add(
        self, stream: BinaryIO, cancel: Optional[threading.Event] = None
    ) -> AddResult:
        """Store the bytes of `stream` and return their address and size."""
        raise NotImplementedError

    @abstractmethod
    def dag_put_links(
        self, links: Sequence[Link], cancel: Optional[threading.Event] = None
    ) -> Cid:
        """Create a directory node holding `links` (in order) and return its Cid."""
        raise NotImplementedError

    @abstractmethod
    def cat(self, path: str, cancel: Optional[threading.Event] = None) -> BinaryIO:
        """Return a readable stream with the content stored at `path`."""
        raise NotImplementedError

    @abstractmethod
    def object_stat(
        self, path: str, cancel: Optional[threading.Event] = None
    ) -> ObjectStat:
        """Return node statistics (notably the cumulative size) for `path`."""
        raise NotImplementedError
