"""
Persistence sinks

The autosave core writes snapshots to an abstract string key-value store.
set() may fail; callers must handle StorageFailure.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol, Union, runtime_checkable

from ..core.document import PersistedSnapshot
from ..exceptions.errors import SnapshotError, StorageFailure

logger = logging.getLogger(__name__)


@runtime_checkable
class PersistenceSink(Protocol):
    """String key-value store protocol"""

    def get(self, key: str) -> Optional[str]:
        """Stored value, or None when the key is absent"""
        ...

    def set(self, key: str, value: str) -> None:
        """Store value; raises StorageFailure when it cannot be stored"""
        ...

    def remove(self, key: str) -> None:
        """Delete key; absent keys are ignored"""
        ...


class MemorySink:
    """
    In-memory sink

    Args:
        quota_bytes: optional total size limit (UTF-8 bytes of keys and
            values); a write that would exceed it raises StorageFailure
    """

    def __init__(self, quota_bytes: Optional[int] = None):
        self.quota_bytes = quota_bytes
        self._items: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageFailure(
                f"Value for '{key}' must be a string, got {type(value).__name__}"
            )

        if self.quota_bytes is not None:
            used = sum(
                len(k.encode("utf-8")) + len(v.encode("utf-8"))
                for k, v in self._items.items()
                if k != key
            )
            needed = len(key.encode("utf-8")) + len(value.encode("utf-8"))
            if used + needed > self.quota_bytes:
                raise StorageFailure(
                    f"Quota exceeded writing '{key}'",
                    {"quota_bytes": self.quota_bytes, "required_bytes": used + needed},
                )

        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self):
        return list(self._items)


class FileSink:
    """
    JSON file sink

    All keys live in one JSON object file. Writes go to a temporary file that
    replaces the original, so a failed write leaves the previous content.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageFailure(f"Cannot read store {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StorageFailure(f"Store {self.path} must contain a JSON object")
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StorageFailure(f"Cannot write store {self.path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)

    def keys(self):
        return list(self._read_all())


class SnapshotStore:
    """
    Snapshot persistence on top of a sink

    One key holds the latest snapshot; every save replaces it.
    """

    def __init__(self, sink: PersistenceSink, key: str):
        self.sink = sink
        self.key = key

    def save(self, snapshot: PersistedSnapshot) -> None:
        """
        Write the snapshot

        Raises:
            StorageFailure: serialization or sink failure
        """
        try:
            payload = snapshot.to_json()
        except (TypeError, ValueError) as e:
            raise StorageFailure(f"Cannot serialize snapshot: {e}") from e

        self.sink.set(self.key, payload)
        logger.debug("Saved snapshot under '%s' (%d bytes)", self.key, len(payload))

    def load(self) -> Optional[PersistedSnapshot]:
        """
        Read the snapshot back

        Returns:
            The stored snapshot, or None when nothing usable is stored
        """
        try:
            raw = self.sink.get(self.key)
        except StorageFailure as e:
            logger.warning("Cannot read snapshot '%s': %s", self.key, e)
            return None

        if raw is None:
            return None

        try:
            return PersistedSnapshot.from_json(raw)
        except SnapshotError as e:
            logger.warning("Ignoring unreadable snapshot '%s': %s", self.key, e)
            return None

    def clear(self) -> None:
        self.sink.remove(self.key)
