from pathlib import Path

import pytest
from pydantic import ValidationError

from attribute_lib.config import AttributeConfig, load_config


def test_defaults_when_file_missing(tmp_path):
    cfg = load_config(tmp_path / "missing.yml")
    assert cfg == AttributeConfig()
    assert cfg.no_compress is False
    assert cfg.serializer == "json"


def test_load_top_level(tmp_path):
    p = tmp_path / "attrs.yml"
    p.write_text("store: /srv/attrs\nno_compress: true\nserializer: yaml\nlock_timeout: 1.5\n")
    cfg = load_config(p)
    assert cfg.store == "/srv/attrs"
    assert cfg.no_compress is True
    assert cfg.serializer == "yaml"
    assert cfg.lock_timeout == 1.5


def test_load_section_of_host_config(tmp_path):
    p = tmp_path / "server_config.yml"
    p.write_text("log_level: DEBUG\nattribute_store:\n  store: attrs\n  log_level: INFO\n")
    cfg = load_config(p)
    assert cfg.store == "attrs"
    assert cfg.log_level == "INFO"


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        AttributeConfig(lock_timeout=0)
    with pytest.raises(ValidationError):
        AttributeConfig(serializer="xml")


def test_paths_resolve_against_base_dir(tmp_path):
    cfg = AttributeConfig(store="attrs")
    assert cfg.store_path(tmp_path) == tmp_path / "attrs"
    assert cfg.lock_path(tmp_path) == tmp_path / "attrs" / "%locks"

    cfg = AttributeConfig(store="/abs/attrs", lock_dir="locks")
    assert cfg.store_path(tmp_path) == Path("/abs/attrs")
    assert cfg.lock_path(tmp_path) == tmp_path / "locks"


def test_empty_store_has_no_path():
    cfg = AttributeConfig(store="")
    assert cfg.store_path() is None
    assert cfg.lock_path() is None
