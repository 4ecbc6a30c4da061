"""Key-value persistence used for plans and session history."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Protocol


def default_data_dir() -> Path:
    return Path.home() / ".pose-timer"


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any) -> bool: ...

    async def remove(self, key: str) -> bool: ...


def _key_to_filename(key: str) -> str:
    s = re.sub(r"[^a-zA-Z0-9_.-]+", "-", key.strip()).strip("-.")
    if not s:
        raise ValueError(f"Invalid storage key {key!r}")
    return f"{s}.json"


class JsonFileStore:
    """One pretty-printed JSON document per key under ``base_dir``."""

    def __init__(self, base_dir: Path | None = None) -> None:
        self._base_dir = base_dir or default_data_dir()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def path_for(self, key: str) -> Path:
        return self._base_dir / _key_to_filename(key)

    async def get(self, key: str) -> Any | None:
        target = self.path_for(key)
        if not target.exists():
            return None
        try:
            return json.loads(target.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            return None

    async def set(self, key: str, value: Any) -> bool:
        target = self.path_for(key)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp = target.with_suffix(".json.tmp")
            tmp.write_text(json.dumps(value, ensure_ascii=True, indent=2), encoding="utf-8")
            tmp.replace(target)
        except (OSError, TypeError, ValueError):
            return False
        return True

    async def remove(self, key: str) -> bool:
        target = self.path_for(key)
        try:
            target.unlink()
        except OSError:
            return False
        return True


class MemoryStore:
    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self._data[key] = json.dumps(value)

    async def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    async def set(self, key: str, value: Any) -> bool:
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError):
            return False
        return True

    async def remove(self, key: str) -> bool:
        return self._data.pop(key, None) is not None
