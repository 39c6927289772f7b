"""Storage layer for the attribute store."""

from .base import RecordStore, RecordStatus, LoadResult, record_key
from .codec import RecordCodec, DecodeResult
from .file_backend import FileRecordStore
from .locks import LockManager
from .memory_backend import RecordCache
from .serializer import get_serializer

__all__ = [
    "RecordStore",
    "RecordStatus",
    "LoadResult",
    "record_key",
    "RecordCodec",
    "DecodeResult",
    "FileRecordStore",
    "LockManager",
    "RecordCache",
    "get_serializer",
]
