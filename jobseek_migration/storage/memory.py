"""In-memory and no-op stores."""

from typing import Dict, List, Optional

from .base import LocalAnonymousStore


class InMemoryStore(LocalAnonymousStore):
    """Store backed by a dictionary. Lives as long as the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data.keys())


class NullStore(LocalAnonymousStore):
    """Store for environments without local storage; reads nothing, keeps nothing."""

    @property
    def available(self) -> bool:
        return False

    def get_item(self, key: str) -> Optional[str]:
        return None

    def set_item(self, key: str, value: str) -> None:
        pass

    def remove_item(self, key: str) -> None:
        pass

    def keys(self) -> List[str]:
        return []
