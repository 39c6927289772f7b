"""Flat-file record store.

Each (namespace, user) record lives in one file directly under the storage
root, named ``<encoded namespace>.<encoded user>``. Writes go to a sibling
temporary file which then replaces the record, so readers never see a half
written packet.
"""
from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from .base import (
    SEPARATOR,
    LoadResult,
    RecordStatus,
    RecordStore,
    decode_component,
    encode_component,
    record_key,
)
from .codec import RecordCodec
from .memory_backend import RecordCache

logger = logging.getLogger(__name__)


class FileRecordStore(RecordStore):
    def __init__(
        self,
        store_path: str | Path,
        codec: Optional[RecordCodec] = None,
        compress: bool = True,
        cache: Optional[RecordCache] = None,
    ) -> None:
        self.store_path = Path(store_path)
        self.codec = codec or RecordCodec()
        self.compress = compress
        self.cache = cache if cache is not None else RecordCache()

    def record_key(self, namespace: str, user: str) -> str:
        return record_key(namespace, user)

    def path_for(self, namespace: str, user: str) -> Path:
        return self.store_path / self.record_key(namespace, user)

    def load_record(self, namespace: str, user: str) -> LoadResult:
        path = self.path_for(namespace, user)

        cached = self.cache.get(path)
        if cached is not None:
            logger.debug("Cache hit for %s", path.name)
            return LoadResult(cached, RecordStatus.OK if cached else RecordStatus.ABSENT)

        try:
            present = path.is_file()
        except OSError as e:
            # e.g. a name longer than the filesystem allows; no such record can exist.
            logger.warning("Attribute record %s cannot be looked up: %s", path, e)
            return LoadResult({}, RecordStatus.ABSENT)
        if not present:
            self.cache.put(path, {})
            return LoadResult({}, RecordStatus.ABSENT)

        try:
            with open(path, "rb") as f:
                packet = f.read()
        except OSError as e:
            logger.warning("Attribute record %s could not be read: %s", path, e)
            return LoadResult({}, RecordStatus.CORRUPT)

        result = self.codec.decode(packet)
        expected = self.record_key(namespace, user)
        if not result.ok or result.key != expected:
            # Fall back to an empty record rather than trusting bad data.
            logger.warning(
                "Attribute record %s is corrupt (decoded=%s, key=%r); treating as empty",
                path, result.ok, result.key,
            )
            self.cache.put(path, {})
            return LoadResult({}, RecordStatus.CORRUPT)

        self.cache.put(path, result.attributes)
        return LoadResult(result.attributes, RecordStatus.OK)

    def save(self, namespace: str, user: str, attributes: Dict[str, Any]) -> bool:
        path = self.path_for(namespace, user)
        try:
            packet = self.codec.encode(self.record_key(namespace, user), attributes, self.compress)
        except Exception as e:
            # json, pickle and yaml each raise their own error types here.
            logger.error("Attributes for %s are not serializable: %s", path.name, e)
            return False

        tmp = path.with_name(path.name + ".tmp")
        try:
            with open(tmp, "wb") as f:
                f.write(packet)
                f.flush()
                os.fsync(f.fileno())
            tmp.replace(path)
        except OSError as e:
            logger.error("Failed to write attribute record %s: %s", path, e)
            tmp.unlink(missing_ok=True)
            return False

        # Cache what a later load would read back, not the caller's objects.
        self.cache.put(path, self.codec.decode(packet).attributes)
        return True

    def delete(self, namespace: str, user: str) -> bool:
        path = self.path_for(namespace, user)
        self.cache.evict(path)
        try:
            path.unlink()
        except FileNotFoundError:
            # Already in the desired state.
            return True
        except OSError as e:
            logger.error("Failed to delete attribute record %s: %s", path, e)
            return False
        return True

    def list_users(self, namespace: str) -> List[str]:
        prefix = encode_component(namespace) + SEPARATOR
        if not self.store_path.is_dir():
            return []
        users = []
        for p in self.store_path.iterdir():
            name = p.name
            if not name.startswith(prefix) or not p.is_file():
                continue
            suffix = name[len(prefix):]
            user = decode_component(suffix)
            # Skip anything we did not write ourselves (temp files etc.).
            if encode_component(user) != suffix:
                continue
            users.append(user)
        return sorted(users)
