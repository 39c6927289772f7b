"""Composition root for the attribute store.

    from attribute_lib import create_attribute_service, load_config, StaticIdentity
    service = create_attribute_service(load_config(), StaticIdentity('alice'))

Nothing is created at import time so hosts and tests can compose isolated
services.
"""
import logging
from pathlib import Path
from typing import Optional

from attribute_lib.auth.identity import IdentityProvider
from attribute_lib.config.config import AttributeConfig
from attribute_lib.errors import ConfigurationError
from attribute_lib.service import AttributeService
from attribute_lib.storage import FileRecordStore, LockManager, RecordCodec, get_serializer
from attribute_lib.storage.locks import LOCK_DIR_NAME

logger = logging.getLogger(__name__)


def prepare_store_path(config: AttributeConfig, base_dir: str | Path = ".") -> Path:
    """Return the storage root, creating it if needed.

    Raises `ConfigurationError` if `store` is empty or not a writeable directory.
    """
    path = config.store_path(base_dir)
    if path is None:
        raise ConfigurationError("Configuration item 'store' is not set")
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigurationError(f"Cannot create storage root {path}: {e}") from e
    if not path.is_dir():
        raise ConfigurationError(f"Storage root {path} is not a directory")
    return path


def create_attribute_service(
    config: AttributeConfig,
    identity: IdentityProvider,
    base_dir: str | Path = ".",
) -> AttributeService:
    """Compose an `AttributeService` from `config`.

    When the storage root cannot be established the error is logged and an
    unavailable service is returned; its operations all fail without I/O.
    """
    try:
        store_path = prepare_store_path(config, base_dir)
    except ConfigurationError as e:
        logger.error("Attribute: Configuration item 'store' is not set to a writeable directory (%s)", e)
        return AttributeService(store=None, locks=None, identity=identity)

    codec = RecordCodec(serializer=get_serializer(config.serializer))
    store = FileRecordStore(store_path, codec=codec, compress=not config.no_compress)
    lock_dir: Optional[Path] = config.lock_path(base_dir)
    locks = LockManager(lock_dir or store_path / LOCK_DIR_NAME, timeout=config.lock_timeout)
    logger.debug("Attribute store ready at %s (compress=%s, serializer=%s)",
                 store_path, store.compress, config.serializer)
    return AttributeService(store=store, locks=locks, identity=identity)
