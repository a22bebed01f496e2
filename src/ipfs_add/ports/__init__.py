from .filesystem import DirEntry, EntryKind, FilesystemPort
from .gateway import GatewayPort
from .listener import AddedListener

__all__ = ["AddedListener", "DirEntry", "EntryKind", "FilesystemPort", "GatewayPort"]
