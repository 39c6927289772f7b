from pathlib import Path

from attribute_lib.storage import FileRecordStore


def record_file(service_or_store, namespace: str, user: str) -> Path:
    """Return the on-disk path of a record for tests that poke at files directly."""
    store = getattr(service_or_store, "_store", service_or_store)
    assert isinstance(store, FileRecordStore)
    return store.path_for(namespace, user)
