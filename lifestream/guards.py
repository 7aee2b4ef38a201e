"""
Authentication and Role Guards.

Two layers share one rule set:

* ``require_auth`` / ``require_role`` produce decorators that gate
  service-layer callables behind the session.
* ``RouteGuard`` decides whether a screen may be shown, and where to send
  the user otherwise.

Usage::

    from lifestream.auth import SessionManager
    from lifestream.guards import require_role
    from lifestream.models.enums import Role

    session = SessionManager()
    admin_only = require_role(session, Role.ADMIN)

    @admin_only
    def delete_everything() -> str:
        return "only reachable by an admin"
"""

from __future__ import annotations

from enum import StrEnum
from functools import wraps
from typing import Callable, Iterable, ParamSpec, TypeVar

from lifestream.auth import SessionManager
from lifestream.errors import AuthenticationError, AuthorizationError
from lifestream.models.enums import Role

P = ParamSpec("P")
R = TypeVar("R")


def require_auth(session: SessionManager) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Return a decorator that enforces a signed-in session.

    Args:
        session: The injectable ``SessionManager`` that holds the
            current identity.

    Returns:
        A decorator suitable for wrapping service-layer callables.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            if not session.is_authenticated:
                raise AuthenticationError(
                    "Authentication required. Please log in before "
                    "performing this action."
                )
            return func(*args, **kwargs)

        return wrapper

    return decorator


def require_role(
    session: SessionManager, *roles: Role,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Return a decorator that additionally requires one of *roles*.

    An identity whose role has not been resolved is always rejected.
    """
    allowed = frozenset(roles)

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            if not session.is_authenticated:
                raise AuthenticationError(
                    "Authentication required. Please log in before "
                    "performing this action."
                )
            role = session.role
            if role is None or role not in allowed:
                raise AuthorizationError(
                    "You do not have permission to perform this action."
                )
            return func(*args, **kwargs)

        return wrapper

    return decorator


class GuardDecision(StrEnum):
    """Outcome of a route check."""

    WAIT = "wait"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_HOME = "redirect_home"
    ALLOW = "allow"


class RouteGuard:
    """Decides whether the current identity may open a screen.

    Parameters
    ----------
    session:
        The shared session holder.
    """

    def __init__(self, session: SessionManager) -> None:
        self._session = session

    def check(self, required_roles: Iterable[Role] = ()) -> GuardDecision:
        """Evaluate access for a screen.

        An empty *required_roles* means "any signed-in user".  While the
        initial session resolution is running the answer is ``WAIT`` so
        nothing protected is rendered early.
        """
        if self._session.is_loading:
            return GuardDecision.WAIT
        identity = self._session.identity
        if identity is None:
            return GuardDecision.REDIRECT_LOGIN
        roles = frozenset(required_roles)
        if roles and (identity.role is None or identity.role not in roles):
            return GuardDecision.REDIRECT_HOME
        return GuardDecision.ALLOW
