"""Decide whose attributes an operation acts on."""
from typing import Optional


def resolve_effective_user(
    requested_user: Optional[str],
    caller: Optional[str],
    caller_is_admin: bool,
    login_in_progress: bool = False,
    login_target: Optional[str] = None,
) -> Optional[str]:
    """Return the user an operation may act on, or None to deny it.

    - While a login is in progress and nobody is authenticated yet, the user
      being logged in may be named explicitly to reach their own attributes.
    - Otherwise an unauthenticated caller is denied.
    - Callers act on their own record unless they are an admin naming
      someone else; a non-admin naming another user is silently redirected
      to their own record.
    """
    if not caller and login_in_progress and requested_user and requested_user == login_target:
        return requested_user
    if not caller:
        return None
    if not requested_user or (requested_user != caller and not caller_is_admin):
        return caller
    return requested_user
