from __future__ import annotations
import enum
import json
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_DIRECTORY = Path("~/.fbauth")


class Persistence(str, enum.Enum):
    NONE = "NONE"  # memory only, gone when the process exits
    LOCAL = "LOCAL"  # json file on disk, survives restarts


def user_key(api_key: str, app_name: str) -> str:
    return f"fbauth:authUser:{api_key}:{app_name}"


class InMemoryStore:
    def __init__(self) -> None:
        self._items: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        return self._items.get(key)

    def set(self, key: str, value: Dict[str, Any]) -> None:
        self._items[key] = dict(value)

    def remove(self, key: str) -> None:
        self._items.pop(key, None)


class FileStore:
    """One JSON file per key inside `directory`."""

    def __init__(self, directory: Optional[Path] = None) -> None:
        self.directory = Path(directory or DEFAULT_DIRECTORY).expanduser()

    def _path(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self.directory / f"{safe}.json"

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._path(key)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def set(self, key: str, value: Dict[str, Any]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        # holds a refresh token, never readable by other users
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(json.dumps(value))
        path.chmod(0o600)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


def make_store(mode: Persistence, directory: Optional[Path] = None):
    if mode == Persistence.NONE:
        return InMemoryStore()
    if mode == Persistence.LOCAL:
        return FileStore(directory)
    raise ValueError(f"Unsupported persistence: {mode!r}")
