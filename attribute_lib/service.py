"""AttributeService: namespaced, per-user attribute storage.

Every operation resolves the effective user first, then holds the record
lock for (namespace, effective user) around its load/modify/save sequence.
Failures come back as return values, never as exceptions:

- `get` returns a `GetResult` whose `found` flag separates a stored falsy
  value from a missing attribute.
- Mutating operations return a boolean success flag.
- Enumerations return None on failure.

Records that cannot be decoded are read as empty. This is lossy on purpose:
the next successful write replaces the unreadable record.
"""
from __future__ import annotations
import logging
from typing import Any, List, NamedTuple, Optional

from attribute_lib.auth.gate import resolve_effective_user
from attribute_lib.auth.identity import IdentityProvider
from attribute_lib.errors import LockTimeoutError
from attribute_lib.storage.base import RecordStore
from attribute_lib.storage.locks import LockManager

logger = logging.getLogger(__name__)


class GetResult(NamedTuple):
    value: Any = None
    found: bool = False


NOT_FOUND = GetResult()


class AttributeService:
    """Public operation surface of the attribute store.

    `store` and `locks` are None when the storage root could not be set up;
    the service is then unavailable and every operation fails without I/O.
    """

    def __init__(
        self,
        store: Optional[RecordStore],
        locks: Optional[LockManager],
        identity: IdentityProvider,
    ) -> None:
        self._store = store
        self._locks = locks
        self._identity = identity

    @property
    def available(self) -> bool:
        return self._store is not None and self._locks is not None

    def _resolve(self, user: Optional[str]) -> Optional[str]:
        login_target = self._identity.login_target()
        effective = resolve_effective_user(
            requested_user=user,
            caller=self._identity.current_user(),
            caller_is_admin=self._identity.is_admin(),
            login_in_progress=login_target is not None,
            login_target=login_target,
        )
        if effective is None:
            logger.warning("Attribute access denied: no authenticated user (requested=%r)", user)
        return effective

    def get(self, namespace: str, attribute: str, user: Optional[str] = None) -> GetResult:
        """Return the stored value and whether the attribute was found."""
        store, locks = self._store, self._locks
        if store is None or locks is None:
            return NOT_FOUND
        effective = self._resolve(user)
        if effective is None:
            return NOT_FOUND
        try:
            with locks.lock(namespace, effective):
                data = store.load(namespace, effective)
        except (LockTimeoutError, OSError) as e:
            logger.warning("get %s/%s failed: %s", namespace, attribute, e)
            return NOT_FOUND
        if attribute not in data:
            return NOT_FOUND
        return GetResult(data[attribute], True)

    def set(self, namespace: str, attribute: str, value: Any, user: Optional[str] = None) -> bool:
        """Store `value` under `attribute`. Returns False if it could not be saved."""
        store, locks = self._store, self._locks
        if store is None or locks is None:
            return False
        effective = self._resolve(user)
        if effective is None:
            return False
        try:
            with locks.lock(namespace, effective):
                data = store.load(namespace, effective)
                data[attribute] = value
                return store.save(namespace, effective, data)
        except (LockTimeoutError, OSError) as e:
            logger.warning("set %s/%s failed: %s", namespace, attribute, e)
            return False

    def exists(self, namespace: str, attribute: str, user: Optional[str] = None) -> bool:
        store, locks = self._store, self._locks
        if store is None or locks is None:
            return False
        effective = self._resolve(user)
        if effective is None:
            return False
        try:
            with locks.lock(namespace, effective):
                data = store.load(namespace, effective)
        except (LockTimeoutError, OSError) as e:
            logger.warning("exists %s/%s failed: %s", namespace, attribute, e)
            return False
        return attribute in data

    def delete(self, namespace: str, attribute: str, user: Optional[str] = None) -> bool:
        """Remove `attribute`. Removing a missing attribute succeeds without a write."""
        store, locks = self._store, self._locks
        if store is None or locks is None:
            return False
        effective = self._resolve(user)
        if effective is None:
            return False
        try:
            with locks.lock(namespace, effective):
                data = store.load(namespace, effective)
                if attribute not in data:
                    return True
                del data[attribute]
                return store.save(namespace, effective, data)
        except (LockTimeoutError, OSError) as e:
            logger.warning("delete %s/%s failed: %s", namespace, attribute, e)
            return False

    def purge(self, namespace: str, user: str) -> bool:
        """Delete every attribute `user` has in `namespace`. Admin only."""
        store, locks = self._store, self._locks
        if store is None or locks is None:
            return False
        if not self._identity.is_admin():
            logger.warning("Purge of %s/%s denied: caller is not an admin", namespace, user)
            return False
        try:
            with locks.lock(namespace, user):
                ok = store.delete(namespace, user)
        except (LockTimeoutError, OSError) as e:
            logger.warning("purge %s/%s failed: %s", namespace, user, e)
            return False
        if ok:
            logger.info("Purged attributes for %s in namespace %s", user, namespace)
        return ok

    def enumerate_attributes(self, namespace: str, user: Optional[str] = None) -> Optional[List[str]]:
        """Return the attribute names (not values) stored for the user."""
        store, locks = self._store, self._locks
        if store is None or locks is None:
            return None
        effective = self._resolve(user)
        if effective is None:
            return None
        try:
            with locks.lock(namespace, effective):
                data = store.load(namespace, effective)
        except (LockTimeoutError, OSError) as e:
            logger.warning("enumerate_attributes %s failed: %s", namespace, e)
            return None
        return sorted(data)

    def enumerate_users(self, namespace: str) -> Optional[List[str]]:
        """Return every user with a record in `namespace`.

        This lists names only and is not restricted to the caller.
        """
        store = self._store
        if store is None or self._locks is None:
            return None
        try:
            return store.list_users(namespace)
        except OSError as e:
            logger.error("Failed to list users in namespace %s: %s", namespace, e)
            return None

    @staticmethod
    def get_info() -> dict:
        return {
            'name': 'Attribute Store',
            'desc': 'Arbitrary attribute definition and storage for user associated data.',
        }

    @staticmethod
    def get_methods() -> List[dict]:
        """Describe the public operations for host-side discovery."""
        user_note = "If user is given the caller must be an admin, otherwise the logged in user is used."
        return [
            {
                'name': 'enumerate_attributes',
                'desc': f"List the attribute names in a namespace for a user. {user_note}",
                'parameters': {'namespace': 'str', 'user': 'str (optional)'},
                'return': {'attributes': 'list[str] | None'},
            },
            {
                'name': 'enumerate_users',
                'desc': "List the users that have attributes in a namespace.",
                'parameters': {'namespace': 'str'},
                'return': {'users': 'list[str] | None'},
            },
            {
                'name': 'set',
                'desc': f"Set the value of an attribute in a namespace. {user_note}",
                'parameters': {'namespace': 'str', 'attribute': 'str', 'value': 'Any (serializable)', 'user': 'str (optional)'},
                'return': {'success': 'bool'},
            },
            {
                'name': 'exists',
                'desc': f"Check whether an attribute exists in a namespace. {user_note}",
                'parameters': {'namespace': 'str', 'attribute': 'str', 'user': 'str (optional)'},
                'return': {'exists': 'bool'},
            },
            {
                'name': 'delete',
                'desc': f"Delete an attribute in a namespace. {user_note}",
                'parameters': {'namespace': 'str', 'attribute': 'str', 'user': 'str (optional)'},
                'return': {'success': 'bool'},
            },
            {
                'name': 'get',
                'desc': f"Get an attribute value; `found` tells a stored falsy value from a missing one. {user_note}",
                'parameters': {'namespace': 'str', 'attribute': 'str', 'user': 'str (optional)'},
                'return': {'result': 'GetResult(value, found)'},
            },
            {
                'name': 'purge',
                'desc': "Delete all attributes in a namespace for a user. Admin only.",
                'parameters': {'namespace': 'str', 'user': 'str'},
                'return': {'success': 'bool'},
            },
        ]
