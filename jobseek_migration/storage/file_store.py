"""JSON-file backed store that persists across processes."""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

from .base import LocalAnonymousStore

logger = logging.getLogger(__name__)


class FileStore(LocalAnonymousStore):
    """
    Persistent store kept in a single JSON object on disk.

    Every write rewrites the file through a temporary file and an atomic
    rename, so a crash never leaves a half-written store behind.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    @property
    def available(self) -> bool:
        """True if the store file can be written, checked without creating anything."""
        directory = self.path.parent
        while not directory.exists():
            if directory.parent == directory:
                return False
            directory = directory.parent

        if self.path.exists():
            return os.access(self.path, os.R_OK | os.W_OK) and os.access(self.path.parent, os.W_OK)
        return directory.is_dir() and os.access(directory, os.W_OK | os.X_OK)

    def _load(self, set_aside_unreadable: bool = False) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Could not read store file {self.path}: {e}")
        else:
            if isinstance(data, dict):
                return {str(k): v if isinstance(v, str) else json.dumps(v) for k, v in data.items()}
            logger.error(f"Store file {self.path} does not contain an object")

        if set_aside_unreadable:
            self._set_aside()
        return {}

    def _set_aside(self) -> None:
        """Keep an unreadable store file next to the new one instead of overwriting it."""
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%f")
        target = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        os.replace(self.path, target)
        logger.warning(f"Moved unreadable store file {self.path} to {target}")

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load(set_aside_unreadable=True)
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def remove_items(self, keys: List[str]) -> None:
        data = self._load()
        removed = [k for k in keys if data.pop(k, None) is not None]
        if removed:
            self._save(data)
            logger.debug(f"Removed {len(removed)} keys from {self.path}")

    def keys(self) -> List[str]:
        return list(self._load().keys())
