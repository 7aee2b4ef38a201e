"""
Platform API Client.

Thin wrapper over a ``requests.Session`` that centralises the base URL,
the single global timeout and bearer-token attachment, and translates
transport and HTTP failures into the ``lifestream.errors`` taxonomy.

There is no automatic retry.  Mutations may carry an ``Idempotency-Key``
header so the server can discard duplicate submissions.
"""

from __future__ import annotations

import time
import uuid
from typing import Any, Callable, Mapping, Optional

import requests

from lifestream.errors import (
    AuthenticationError,
    AuthorizationError,
    LifeStreamError,
    NetworkError,
    NotFoundError,
    ServerError,
)
from lifestream.logger import StructuredLogger

TokenProvider = Callable[[], Optional[str]]


def new_idempotency_key() -> str:
    """Return a fresh key for one logical submission."""
    return uuid.uuid4().hex


class ApiClient:
    """HTTP client for the platform REST API.

    Parameters
    ----------
    base_url:
        Root URL of the API, e.g. ``http://localhost:3000``.
    timeout_s:
        Timeout applied to every request.
    logger:
        Structured logger instance.
    token_provider:
        Zero-argument callable returning the current bearer token or
        ``None``.  May be bound after construction with
        :meth:`set_token_provider`.
    http:
        The ``requests.Session`` to send through.  Tests inject a fake.
    on_unauthorized:
        Called once for every 401 answer to an authenticated request.
    """

    def __init__(
        self,
        base_url: str,
        timeout_s: float,
        logger: StructuredLogger,
        token_provider: Optional[TokenProvider] = None,
        http: Optional[requests.Session] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
    ) -> None:
        self._base_url: str = base_url.rstrip("/")
        self._timeout_s: float = timeout_s
        self._logger: StructuredLogger = logger
        self._token_provider: Optional[TokenProvider] = token_provider
        self._http: requests.Session = http if http is not None else requests.Session()
        self._on_unauthorized: Optional[Callable[[], None]] = on_unauthorized

    # ------------------------------------------------------------------
    # Late binding (composition root)
    # ------------------------------------------------------------------

    def set_token_provider(self, provider: TokenProvider) -> None:
        self._token_provider = provider

    def set_unauthorized_handler(self, handler: Callable[[], None]) -> None:
        self._on_unauthorized = handler

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    def get(self, path: str, **kwargs: Any) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Any:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Any:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Any:
        return self.request("DELETE", path, **kwargs)

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
        auth: bool = True,
        token: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Parameters
        ----------
        auth:
            Attach ``Authorization: Bearer <token>``.  When no token is
            available an ``AuthenticationError`` is raised and nothing is
            sent.
        token:
            Explicit bearer token overriding the provider.

        Returns
        -------
        The decoded JSON document, or ``None`` for an empty body.

        Raises
        ------
        LifeStreamError
            ``NetworkError`` for connection failures and timeouts,
            ``AuthenticationError`` for 401, ``AuthorizationError`` for
            403, ``NotFoundError`` for 404, ``ServerError`` otherwise.
        """
        headers: dict[str, str] = {"Accept": "application/json"}
        if auth:
            bearer = token if token is not None else self._current_token()
            if not bearer:
                raise AuthenticationError("Your session has ended. Please sign in again.")
            headers["Authorization"] = f"Bearer {bearer}"
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key

        url = f"{self._base_url}/{path.lstrip('/')}"
        started = time.monotonic()
        try:
            response = self._http.request(
                method,
                url,
                headers=headers,
                json=json,
                params=params,
                timeout=self._timeout_s,
            )
        except requests.Timeout as exc:
            self._logger.warning("%s %s timed out: %s", method, path, exc)
            raise NetworkError("The server took too long to respond. Please try again.") from exc
        except requests.RequestException as exc:
            self._logger.warning("%s %s failed: %s", method, path, exc)
            raise NetworkError("Cannot reach the server. Check your internet connection.") from exc

        elapsed_ms = int((time.monotonic() - started) * 1000)
        self._logger.debug(
            "%s %s -> %s",
            method,
            path,
            response.status_code,
            extra={"elapsed_ms": elapsed_ms},
        )

        if response.status_code >= 400:
            raise self._error_for(method, path, response, authenticated=auth)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ServerError("The server returned an unreadable response.") from exc

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _current_token(self) -> Optional[str]:
        if self._token_provider is None:
            return None
        return self._token_provider()

    def _error_for(
        self,
        method: str,
        path: str,
        response: requests.Response,
        *,
        authenticated: bool,
    ) -> LifeStreamError:
        status = response.status_code
        message = self._server_message(response)
        self._logger.warning(
            "%s %s returned %s: %s", method, path, status, message or "(no message)",
        )

        if status == 401:
            if authenticated and self._on_unauthorized is not None:
                self._on_unauthorized()
            return AuthenticationError(
                message or "Your session has expired. Please sign in again.", status,
            )
        if status == 403:
            return AuthorizationError(
                message or "You do not have permission to perform this action.", status,
            )
        if status == 404:
            return NotFoundError(message or "The requested record was not found.", status)
        return ServerError(
            message or f"The server could not complete the request ({status}).", status,
        )

    @staticmethod
    def _server_message(response: requests.Response) -> Optional[str]:
        """Extract the ``message``/``error`` field from a JSON error body."""
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            for key in ("message", "error"):
                value = body.get(key)
                if isinstance(value, str) and value:
                    return value
        return None
