"""Local anonymous key-value stores."""

from .base import LocalAnonymousStore, StorageKeys
from .memory import InMemoryStore, NullStore
from .file_store import FileStore

__all__ = [
    "LocalAnonymousStore",
    "StorageKeys",
    "InMemoryStore",
    "NullStore",
    "FileStore",
]
