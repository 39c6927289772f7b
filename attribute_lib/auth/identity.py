"""Caller identity as seen by the attribute service.

The host application owns authentication. It hands the service an
`IdentityProvider`, which is asked afresh on every operation who the caller
is, whether they are an admin and whether a login is in progress.
"""
from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable
import logging

from starlette.requests import Request

logger = logging.getLogger(__name__)

# Cookie and header names used by the session layer
SESSION_COOKIE = "sessionId"
SESSION_HEADER = "X-Session-Id"


@runtime_checkable
class IdentityProvider(Protocol):
    def current_user(self) -> Optional[str]: ...

    def is_admin(self) -> bool: ...

    def login_target(self) -> Optional[str]:
        """Return the user being logged in, or None when no login is in progress."""
        ...


@runtime_checkable
class SessionLookupProtocol(Protocol):
    """The part of the host's session manager used here."""

    def get(self, session_id: str) -> Optional[dict[str, Any]]: ...


@runtime_checkable
class AdminCheckerProtocol(Protocol):
    def is_admin(self, email: str) -> bool: ...


@dataclass
class StaticIdentity:
    """Fixed identity, for embedding in scripts and for tests."""

    user: Optional[str] = None
    admin: bool = False
    logging_in: Optional[str] = None

    def current_user(self) -> Optional[str]:
        return self.user

    def is_admin(self) -> bool:
        return self.admin

    def login_target(self) -> Optional[str]:
        return self.logging_in


class SessionIdentity:
    """Identity resolved from a Starlette request and the host's sessions.

    The session id comes from the `X-Session-Id` header or the `sessionId`
    cookie. A request to `login_path` counts as an in-progress login for the
    user named in the `login_field` query parameter.
    """

    def __init__(
        self,
        request: Request,
        session_manager: SessionLookupProtocol,
        admin_checker: AdminCheckerProtocol,
        login_path: str = "/login",
        login_field: str = "u",
    ) -> None:
        self._request = request
        self._sessions = session_manager
        self._admins = admin_checker
        self._login_path = login_path
        self._login_field = login_field

    def _session_id(self) -> Optional[str]:
        return self._request.headers.get(SESSION_HEADER) or self._request.cookies.get(SESSION_COOKIE)

    def current_user(self) -> Optional[str]:
        sid = self._session_id()
        if not sid:
            return None
        ctx = self._sessions.get(sid) or {}
        return ctx.get("email") or None

    def is_admin(self) -> bool:
        user = self.current_user()
        if not user:
            return False
        try:
            return bool(self._admins.is_admin(user))
        except Exception:
            # An admin check that cannot be answered counts as "not admin".
            logger.warning("Admin lookup failed for %s", user, exc_info=True)
            return False

    def login_target(self) -> Optional[str]:
        if self._request.url.path.rstrip("/") != self._login_path.rstrip("/"):
            return None
        return self._request.query_params.get(self._login_field) or None
