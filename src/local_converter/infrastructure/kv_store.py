"""Key-value store adapters backing settings, history and artifacts."""

from __future__ import annotations

import os
import re
from collections.abc import Iterator
from pathlib import Path

from local_converter.errors import StorageError, StorageFullError

_KEY_PATTERN = re.compile(r"[A-Za-z0-9_.-]+")
_TEMP_PREFIX = "."


def _check_key(key: str) -> str:
    if not _KEY_PATTERN.fullmatch(key) or key.startswith(_TEMP_PREFIX):
        raise StorageError(f"Invalid storage key '{key}'.")
    return key


def _entry_size(key: str, value: str) -> int:
    return len(key) + len(value.encode("utf-8"))


def _check_quota(quota_bytes: int | None, used: int, key: str, previous: int, value: str) -> None:
    if quota_bytes is None:
        return
    needed = used - previous + _entry_size(key, value)
    if needed > quota_bytes:
        raise StorageFullError(
            f"Storage quota exceeded: writing '{key}' needs {needed} bytes, "
            f"quota is {quota_bytes} bytes."
        )


class FileKeyValueStore:
    """Store each key as one UTF-8 file under ``root``.

    Writes go to a hidden temp file first and are moved into place, so a
    failed write never leaves a truncated value behind.
    """

    def __init__(self, root: Path, quota_bytes: int | None = None) -> None:
        self._root = root
        self._quota_bytes = quota_bytes

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, key: str) -> Path:
        return self._root / _check_key(key)

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Unable to read '{key}': {exc}") from exc

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        previous = _entry_size(key, "") + path.stat().st_size if path.exists() else 0
        _check_quota(self._quota_bytes, self.size_bytes(), key, previous, value)
        tmp_path = self._root / f"{_TEMP_PREFIX}{key}.tmp"
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Unable to write '{key}': {exc}") from exc

    def remove(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Unable to remove '{key}': {exc}") from exc

    def keys(self) -> Iterator[str]:
        if not self._root.is_dir():
            return
        for path in sorted(self._root.iterdir()):
            if path.is_file() and not path.name.startswith(_TEMP_PREFIX):
                yield path.name

    def size_bytes(self) -> int:
        return sum(len(key) + (self._root / key).stat().st_size for key in self.keys())


class MemoryKeyValueStore:
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        self._data: dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def get(self, key: str) -> str | None:
        return self._data.get(_check_key(key))

    def set(self, key: str, value: str) -> None:
        _check_key(key)
        previous = _entry_size(key, self._data[key]) if key in self._data else 0
        _check_quota(self._quota_bytes, self.size_bytes(), key, previous, value)
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(_check_key(key), None)

    def keys(self) -> Iterator[str]:
        yield from sorted(self._data)

    def size_bytes(self) -> int:
        return sum(_entry_size(key, value) for key, value in self._data.items())
