"""Pytest configuration helpers for test collection.

Ensure the project root is on sys.path so tests can import the package
without requiring PYTHONPATH to be set externally.
"""
import sys
from pathlib import Path

import pytest


def pytest_configure(config):
    # Insert repo root (one level up from tests/) to sys.path
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


@pytest.fixture
def config(tmp_path):
    from attribute_lib.config import AttributeConfig

    return AttributeConfig(store=str(tmp_path / "attributes"), lock_timeout=0.5)


@pytest.fixture
def make_service(config, tmp_path):
    """Factory building a service for a given identity on the shared tmp store."""
    from attribute_lib import create_attribute_service, StaticIdentity

    def _make(user=None, admin=False, logging_in=None, cfg=None):
        identity = StaticIdentity(user=user, admin=admin, logging_in=logging_in)
        return create_attribute_service(cfg or config, identity, base_dir=tmp_path)

    return _make
