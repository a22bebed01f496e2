# Licensed under the Apache License, Version 2.0
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

DEFAULT_NODE = "https://ipfs.infura.io:5001"
NODE_ENV = "IPFS_ADD_NODE"


def default_node() -> str:
    return os.getenv(NODE_ENV) or DEFAULT_NODE


@dataclass
class Config:
    """
    Settings for one run: which gateway to talk to and what to add.

    handle_hidden_files only affects entries found while walking a directory;
    a hidden path given explicitly is always added.
    """

    node: str = field(default_factory=default_node)
    paths: List[str] = field(default_factory=list)
    handle_hidden_files: bool = False
