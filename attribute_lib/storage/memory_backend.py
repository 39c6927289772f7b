"""In-memory record cache.

Holds the last loaded or saved attribute map per record file for the
lifetime of one `FileRecordStore`. Nothing is shared across processes.
"""
import copy
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Optional


class RecordCache:
    def __init__(self):
        self._lock = RLock()
        self._store: Dict[str, Dict[str, Any]] = {}

    def get(self, path: Path | str) -> Optional[Dict[str, Any]]:
        with self._lock:
            data = self._store.get(str(path))
            # Hand out copies so callers cannot mutate cached state.
            return copy.deepcopy(data) if data is not None else None

    def put(self, path: Path | str, attributes: Dict[str, Any]) -> None:
        with self._lock:
            self._store[str(path)] = copy.deepcopy(attributes)

    def evict(self, path: Path | str) -> None:
        with self._lock:
            self._store.pop(str(path), None)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return str(path) in self._store

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
