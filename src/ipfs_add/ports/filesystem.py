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

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, List


class EntryKind(Enum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class DirEntry:
    name: str
    kind: EntryKind


class FilesystemPort(ABC):
    """Abstract interface for filesystem access."""

    @abstractmethod
    def cwd(self) -> str:
        """Return the current working directory with symlinks resolved."""
        raise NotImplementedError

    @abstractmethod
    def kind(self, path: str) -> EntryKind:
        """Classify `path` without following a terminal symlink."""
        raise NotImplementedError

    @abstractmethod
    def list_dir(self, path: str) -> List[DirEntry]:
        """Return the immediate entries of a directory in listing order."""
        raise NotImplementedError

    @abstractmethod
    def open_binary(self, path: str) -> BinaryIO:
        """Open a file for reading bytes. The caller closes it."""
        raise NotImplementedError
