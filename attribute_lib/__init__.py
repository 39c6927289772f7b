"""Namespaced, per-user attribute storage backed by flat files."""

from .auth import IdentityProvider, SessionIdentity, StaticIdentity, resolve_effective_user
from .config import AttributeConfig, load_config
from .main import create_attribute_service
from .service import AttributeService, GetResult

__all__ = [
    "AttributeService",
    "GetResult",
    "AttributeConfig",
    "load_config",
    "create_attribute_service",
    "IdentityProvider",
    "SessionIdentity",
    "StaticIdentity",
    "resolve_effective_user",
]
