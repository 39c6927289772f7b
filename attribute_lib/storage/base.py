"""Record store interface definitions.

A record is the complete attribute map of one (namespace, user) pair.
Implementations persist records and report how a load went through
`LoadResult` so callers can tell a missing record from a corrupt one while
treating both as empty.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List
from urllib.parse import quote, unquote

SEPARATOR = "."


def encode_component(value: str) -> str:
    """Percent-encode one key component.

    Every reserved character is encoded, and so is `.`, which leaves the
    separator unambiguous.
    """
    return quote(value, safe="").replace(".", "%2E")


def decode_component(value: str) -> str:
    return unquote(value)


def record_key(namespace: str, user: str) -> str:
    return encode_component(namespace) + SEPARATOR + encode_component(user)


class RecordStatus(str, Enum):
    OK = "ok"
    ABSENT = "absent"
    CORRUPT = "corrupt"


@dataclass(frozen=True)
class LoadResult:
    attributes: Dict[str, Any] = field(default_factory=dict)
    status: RecordStatus = RecordStatus.ABSENT

    @property
    def ok(self) -> bool:
        return self.status is RecordStatus.OK


class RecordStore(ABC):
    """Abstract record store.

    Implementations must never raise for a missing or unreadable record;
    both load as an empty map.
    """

    @abstractmethod
    def load_record(self, namespace: str, user: str) -> LoadResult:
        """Load the record and report whether it was present, absent or corrupt."""

    def load(self, namespace: str, user: str) -> Dict[str, Any]:
        return self.load_record(namespace, user).attributes

    @abstractmethod
    def save(self, namespace: str, user: str, attributes: Dict[str, Any]) -> bool:
        """Replace the whole record. Return False if it could not be written."""

    @abstractmethod
    def delete(self, namespace: str, user: str) -> bool:
        """Remove the record. An already absent record counts as success."""

    @abstractmethod
    def list_users(self, namespace: str) -> List[str]:
        """Return the users that have a record in `namespace`."""
