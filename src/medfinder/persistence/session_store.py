"""Client session storage.

The location core never reads or writes session state itself; callers pass
a ``SessionStore`` around explicitly.
"""

from __future__ import annotations

import json
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol

from ..config import settings

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class SessionStore(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def clear(self, key: str) -> None: ...


class InMemorySessionStore:
    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        return self._values.get(key)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def clear(self, key: str) -> None:
        self._values.pop(key, None)


class FileSessionStore:
    """Stores each key as a JSON document under ``<root>/sessions``."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.session_root = self.root / "sessions"
        self.session_root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not key:
            raise ValueError("Session key cannot be empty.")
        return self.session_root / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> Any | None:
        path = self._path(key)
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(value, handle, ensure_ascii=False, indent=2)

    def clear(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


@lru_cache()
def get_session_store() -> SessionStore:
    """Get the configured session store instance."""
    if settings.session_backend == "file":
        return FileSessionStore()
    return InMemorySessionStore()
