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

import os
import stat
from typing import BinaryIO, List

from ...ports.filesystem import DirEntry, EntryKind, FilesystemPort


class LocalFS(FilesystemPort):
    """Local filesystem adapter. OSErrors are left to propagate."""

    def cwd(self) -> str:
        return os.path.realpath(os.getcwd())

    def kind(self, path: str) -> EntryKind:
        st = os.lstat(path)
        if stat.S_ISDIR(st.st_mode):
            return EntryKind.DIRECTORY
        return EntryKind.FILE

    def list_dir(self, path: str) -> List[DirEntry]:
        # NOTE: scandir order is whatever the OS returns; callers rely on it as-is.
        with os.scandir(path) as it:
            return [
                DirEntry(
                    name=entry.name,
                    kind=(
                        EntryKind.DIRECTORY
                        if entry.is_dir(follow_symlinks=False)
                        else EntryKind.FILE
                    ),
                )
                for entry in it
            ]

    def open_binary(self, path: str) -> BinaryIO:
        return open(path, "rb")
