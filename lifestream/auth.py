"""
Authentication & Session State.

Provides an injectable ``SessionManager`` that holds the signed-in
``Identity`` and its provider tokens for the lifetime of a desktop
session, and broadcasts identity changes to subscribed screens.

Usage::

    from lifestream.auth import SessionManager
    from lifestream.models.user import Identity

    session = SessionManager()
    unsubscribe = session.subscribe(lambda identity: print(identity))
    session.publish(Identity(id="abc-123", email="user@example.com", role="donor"))
    identity = session.get_identity()
    unsubscribe()
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from lifestream.errors import AuthenticationError
from lifestream.models.enums import Role
from lifestream.models.user import Identity

IdentityListener = Callable[[Optional[Identity]], None]

# Refresh this long before the provider's stated expiry.
_EXPIRY_SKEW = timedelta(seconds=30)


class SessionManager:
    """Injectable holder for the current identity.

    Each instance maintains its own session state; pass a single
    ``SessionManager`` through the dependency-injection layer so every
    component shares the same session.  Listeners are invoked outside
    the lock, in subscription order, on the thread that published.
    """

    def __init__(self) -> None:
        self._lock: threading.RLock = threading.RLock()
        self._identity: Optional[Identity] = None
        self._is_loading: bool = True
        self._access_token: Optional[str] = None
        self._refresh_token: Optional[str] = None
        self._token_expiry: Optional[datetime] = None
        self._listeners: list[IdentityListener] = []

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def publish(self, identity: Identity) -> None:
        """Record *identity* as the signed-in user and notify listeners."""
        with self._lock:
            self._identity = identity
            self._is_loading = False
        self._notify(identity)

    def get_identity(self) -> Identity:
        """Return the signed-in identity.

        Raises:
            AuthenticationError: If nobody is signed in.
        """
        with self._lock:
            if self._identity is None:
                raise AuthenticationError("No user is signed in. Please log in.")
            return self._identity

    @property
    def identity(self) -> Optional[Identity]:
        """The signed-in identity, or ``None``."""
        with self._lock:
            return self._identity

    @property
    def role(self) -> Optional[Role]:
        with self._lock:
            return self._identity.role if self._identity is not None else None

    @property
    def is_authenticated(self) -> bool:
        """``True`` when a user is currently signed in."""
        with self._lock:
            return self._identity is not None

    @property
    def is_loading(self) -> bool:
        """``True`` until the initial session resolution has finished."""
        with self._lock:
            return self._is_loading

    def set_loading(self, loading: bool) -> None:
        with self._lock:
            self._is_loading = loading

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def set_tokens(
        self,
        access_token: str,
        refresh_token: str,
        expires_at: Optional[int],
    ) -> None:
        """Store provider tokens for bearer auth and session refresh.

        Parameters
        ----------
        access_token:
            The short-lived JWT sent as the bearer token.
        refresh_token:
            The long-lived token used to obtain new access tokens.
        expires_at:
            Unix timestamp (seconds) when the access token expires.
            ``None`` means unknown, which is treated as already expired.
        """
        with self._lock:
            self._access_token = access_token
            self._refresh_token = refresh_token
            self._token_expiry = (
                datetime.fromtimestamp(expires_at, tz=timezone.utc)
                if expires_at is not None
                else None
            )

    @property
    def access_token(self) -> Optional[str]:
        """Return the current access token, or ``None`` if not set."""
        with self._lock:
            return self._access_token

    @property
    def refresh_token(self) -> Optional[str]:
        """Return the refresh token for session renewal."""
        with self._lock:
            return self._refresh_token

    @property
    def is_token_expired(self) -> bool:
        """``True`` when the access token has expired or was never set."""
        with self._lock:
            if self._token_expiry is None:
                return True
            return datetime.now(timezone.utc) >= (self._token_expiry - _EXPIRY_SKEW)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Remove the identity and tokens, ending the session, and notify."""
        with self._lock:
            had_identity = self._identity is not None
            self._identity = None
            self._access_token = None
            self._refresh_token = None
            self._token_expiry = None
            self._is_loading = False
        if had_identity:
            self._notify(None)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, identity: Optional[Identity]) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(identity)
