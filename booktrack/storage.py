from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """Durable string key/value storage.

    ``update`` applies every change in one step: readers see either all of
    the changes or none of them. A ``None`` value removes the key.
    ``read`` returns several keys from one consistent view of the storage.
    """

    def get(self, key: str) -> str | None: ...

    def read(self, keys: Iterable[str]) -> dict[str, str | None]: ...

    def update(self, changes: Mapping[str, str | None]) -> None: ...


class MemoryStorage:
    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def read(self, keys: Iterable[str]) -> dict[str, str | None]:
        data = self._data
        return {key: data.get(key) for key in keys}

    def update(self, changes: Mapping[str, str | None]) -> None:
        data = dict(self._data)
        for key, value in changes.items():
            if value is None:
                data.pop(key, None)
            else:
                data[key] = value
        self._data = data

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)


class JsonFileStorage:
    """Key/value pairs kept in a single JSON object on disk.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace``, so a multi-key update lands atomically.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def _load(self, *, strict: bool = True) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError as exc:
            if strict:
                raise ValueError("invalid session storage encoding") from exc
            logger.warning("discarding undecodable session storage", extra={"path": str(self.path)})
            return {}
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            if strict:
                raise ValueError("invalid session storage json") from exc
            logger.warning("discarding unreadable session storage", extra={"path": str(self.path)})
            return {}
        if not isinstance(data, dict):
            if strict:
                raise ValueError("session storage must be an object")
            return {}
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def read(self, keys: Iterable[str]) -> dict[str, str | None]:
        data = self._load()
        return {key: data.get(key) for key in keys}

    def update(self, changes: Mapping[str, str | None]) -> None:
        data = self._load(strict=False)
        for key, value in changes.items():
            if value is None:
                data.pop(key, None)
            else:
                data[key] = value
        self._write(data)

    def snapshot(self) -> dict[str, str]:
        return self._load(strict=False)

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".session-", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(json.dumps(data, ensure_ascii=False, indent=2) + "\n")
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
