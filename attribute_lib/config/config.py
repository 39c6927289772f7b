"""Attribute store configuration.

Configuration lives in a YAML file. Settings may sit at the top level or
under an `attribute_store` mapping, so the store can share a file with the
host's own configuration:

    attribute_store:
      store: data/attributes
      no_compress: false
      serializer: json
      lock_timeout: 3.0
"""
import logging
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, field_validator

from attribute_lib.storage.locks import LOCK_DIR_NAME

logger = logging.getLogger(__name__)

CONFIG_PATH = Path("data/config/attribute_store.yml")
SECTION = "attribute_store"


class AttributeConfig(BaseModel):
    store: str = "data/attributes"
    no_compress: bool = False
    serializer: Literal["json", "pickle", "yaml"] = "json"
    lock_timeout: float = 3.0
    lock_dir: Optional[str] = None
    log_level: str = "WARNING"

    @field_validator("lock_timeout")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("lock_timeout must be positive")
        return v

    def store_path(self, base_dir: str | Path = ".") -> Optional[Path]:
        """Resolve `store` against `base_dir`; None when it is not set."""
        if not self.store:
            return None
        p = Path(self.store)
        return p if p.is_absolute() else Path(base_dir) / p

    def lock_path(self, base_dir: str | Path = ".") -> Optional[Path]:
        if self.lock_dir:
            p = Path(self.lock_dir)
            return p if p.is_absolute() else Path(base_dir) / p
        store = self.store_path(base_dir)
        return store / LOCK_DIR_NAME if store is not None else None


def load_yaml_file(path: Path) -> dict:
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_config(path: Optional[Path] = None) -> AttributeConfig:
    """Load `AttributeConfig` from YAML, falling back to defaults when the file is missing."""
    cfg_path = Path(path) if path is not None else CONFIG_PATH
    raw = load_yaml_file(cfg_path)
    if isinstance(raw.get(SECTION), dict):
        raw = raw[SECTION]
    logger.debug("Loaded attribute store config from %s: present=%s", cfg_path, bool(raw))
    return AttributeConfig(**raw)
