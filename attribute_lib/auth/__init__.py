from .gate import resolve_effective_user
from .identity import IdentityProvider, StaticIdentity, SessionIdentity

__all__ = [
    "resolve_effective_user",
    "IdentityProvider",
    "StaticIdentity",
    "SessionIdentity",
]
