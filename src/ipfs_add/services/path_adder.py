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

import logging
import os
import posixpath
import threading
from typing import Callable, Dict, List, Optional

from ..domain import AddResult, Link, OperationCancelled
from ..ports.filesystem import EntryKind, FilesystemPort
from ..ports.gateway import GatewayPort
from ..ports.listener import AddedListener

logger = logging.getLogger(__name__)


def normalize_path(path: str) -> str:
    """Clean `path` (collapse separators, `..`, `.`) and use forward slashes."""
    path = os.path.normpath(path)
    # POSIX normpath keeps exactly two leading slashes
    if os.sep == "/" and path.startswith("//"):
        path = "/" + path.lstrip("/")
    return path.replace(os.sep, "/")


class PathAdder:
    """
    Adds a local path to the store, turning directories into a Merkle DAG:
      - files are streamed to the gateway as-is
      - a directory node is created from its children's links, bottom-up
      - every stored node is reported to the listener in post-order

    Notes:
      * Work is strictly sequential; children are visited in listing order,
        and that order is kept in the directory node.
      * The first failure aborts the whole walk. Files already uploaded stay
        stored but are not referenced by any directory node.
    """

    def __init__(
        self,
        gateway: GatewayPort,
        fs: FilesystemPort,
        *,
        handle_hidden_files: bool = False,
        listener: Optional[AddedListener] = None,
    ) -> None:
        self._gateway = gateway
        self._fs = fs
        self._handle_hidden_files = bool(handle_hidden_files)
        self._listener = listener

        self._dispatch: Dict[
            EntryKind, Callable[[str, str, Optional[threading.Event]], AddResult]
        ] = {
            EntryKind.FILE: self._add_file,
            EntryKind.DIRECTORY: self._add_dir,
        }

    def add_path(self, path: str, cancel: Optional[threading.Event] = None) -> None:
        """
        Add `path` to the store. Directories are added recursively.

        Raises:
            OSError: the path (or anything below it) cannot be read.
            GatewayError: the gateway rejected a request.
            OperationCancelled: `cancel` was set before the walk finished.
        """
        path = normalize_path(path)
        if path == ".":
            path = normalize_path(self._fs.cwd())

        kind = self._fs.kind(path)
        self._add(kind, posixpath.basename(path) or path, path, cancel)

    def _add(
        self,
        kind: EntryKind,
        name: str,
        path: str,
        cancel: Optional[threading.Event],
    ) -> AddResult:
        if cancel is not None and cancel.is_set():
            raise OperationCancelled(f"cancelled before adding {path}")
        return self._dispatch[kind](name, path, cancel)

    def _add_dir(
        self, name: str, path: str, cancel: Optional[threading.Event]
    ) -> AddResult:
        links: List[Link] = []
        for entry in self._fs.list_dir(path):
            if not self._handle_hidden_files and entry.name.startswith("."):
                logger.debug("Skipping hidden entry %s/%s", path, entry.name)
                continue

            res = self._add(
                entry.kind,
                posixpath.join(name, entry.name),
                posixpath.join(path, entry.name),
                cancel,
            )
            # Links carry the short name: names only need to be unique per directory.
            links.append(res.to_link(entry.name))

        cid = self._gateway.dag_put_links(links, cancel)
        stat = self._gateway.object_stat(str(cid), cancel)

        res = AddResult(hash=str(cid), size=stat.cumulative_size)
        self._added(name, res)
        return res

    def _add_file(
        self, name: str, path: str, cancel: Optional[threading.Event]
    ) -> AddResult:
        with self._fs.open_binary(path) as fh:
            res = self._gateway.add(fh, cancel)

        self._added(name, res)
        return res

    def _added(self, name: str, res: AddResult) -> None:
        logger.debug("added %s %s", res.hash, name)
        if self._listener is not None:
            self._listener.added(name, res)
