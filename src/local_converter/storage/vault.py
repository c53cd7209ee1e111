"""Artifact vault: base64-encoded blobs keyed by history id."""

from __future__ import annotations

import base64
import binascii
import logging

from local_converter.application.ports import KeyValueStore
from local_converter.errors import StorageError
from local_converter.types import MAX_ARTIFACT_BYTES

logger = logging.getLogger(__name__)

ARTIFACT_KEY_PREFIX = "file_"


def artifact_key(entry_id: str) -> str:
    return f"{ARTIFACT_KEY_PREFIX}{entry_id}"


def format_file_size(size: int) -> str:
    """Render a byte count as ``Bytes``/``KB``/``MB``/``GB`` with two decimals."""
    if size <= 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB")
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{round(value, 2):g} {units[index]}"


class ArtifactVault:
    """Keep produced artifacts for later re-download.

    The ceiling applies to the raw blob. Stored text is base64, so a blob at
    the ceiling occupies 4/3 of it on disk.
    """

    def __init__(self, store: KeyValueStore, max_bytes: int = MAX_ARTIFACT_BYTES) -> None:
        self._store = store
        self._max_bytes = max_bytes

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    def put(self, entry_id: str, blob: bytes) -> bool:
        """Store ``blob`` under ``entry_id``.

        Returns
        -------
        bool
            ``False`` when the blob is over the ceiling or the write failed;
            nothing is written in that case.
        """
        if len(blob) > self._max_bytes:
            logger.warning(
                "artifact %s too large to keep (%s, max %s)",
                entry_id,
                format_file_size(len(blob)),
                format_file_size(self._max_bytes),
            )
            return False
        encoded = base64.b64encode(blob).decode("ascii")
        try:
            self._store.set(artifact_key(entry_id), encoded)
        except StorageError as exc:
            logger.warning("artifact %s not saved: %s", entry_id, exc)
            return False
        logger.info("artifact saved: %s (%s)", entry_id, format_file_size(len(blob)))
        return True

    def get(self, entry_id: str) -> bytes | None:
        try:
            encoded = self._store.get(artifact_key(entry_id))
        except StorageError as exc:
            logger.warning("artifact %s unreadable: %s", entry_id, exc)
            return None
        if encoded is None:
            return None
        try:
            return base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            logger.warning("artifact %s is corrupt: %s", entry_id, exc)
            return None

    def exists(self, entry_id: str) -> bool:
        try:
            return self._store.get(artifact_key(entry_id)) is not None
        except StorageError:
            return False

    def delete(self, entry_id: str) -> None:
        self._store.remove(artifact_key(entry_id))

    def ids(self) -> list[str]:
        return [
            key[len(ARTIFACT_KEY_PREFIX):]
            for key in self._store.keys()
            if key.startswith(ARTIFACT_KEY_PREFIX)
        ]

    def clear(self) -> int:
        """Delete every artifact and return how many were removed."""
        removed = self.ids()
        for entry_id in removed:
            self.delete(entry_id)
        if removed:
            logger.info("removed %d artifacts", len(removed))
        return len(removed)
