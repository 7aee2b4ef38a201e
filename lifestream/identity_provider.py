"""
Identity Provider Connection.

Owns the Supabase client used for authentication only: email/password,
OAuth (PKCE code exchange), profile metadata and token refresh.  Platform
data lives behind the REST API (see ``lifestream.api_client``), so no
table access goes through this client.

Usage (dependency injection at app startup)::

    from lifestream.identity_provider import IdentityProvider
    from lifestream.logger import StructuredLogger

    provider = IdentityProvider(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        logger=StructuredLogger(name="identity"),
    )
    # Inject `provider` into AuthService.
"""

from __future__ import annotations

from typing import Any, Optional

from supabase import Client as SupabaseClient
from supabase import ClientOptions, create_client

from lifestream.logger import StructuredLogger


class IdentityProvider:
    """Lazily-validated holder for the Supabase auth client.

    When ``supabase_url`` or ``supabase_key`` is empty the client is
    **not** created; the ``auth`` property then raises ``RuntimeError``,
    which ``AuthService`` reports as "sign-in unavailable".

    Parameters
    ----------
    supabase_url:
        The Supabase project URL (e.g. ``https://xyz.supabase.co``).
    supabase_key:
        The Supabase anonymous key.
    logger:
        A ``StructuredLogger`` instance for structured JSON log output.
    client:
        Pre-built client, used by tests in place of ``create_client``.
    """

    def __init__(
        self,
        supabase_url: str,
        supabase_key: str,
        logger: StructuredLogger,
        client: Optional[SupabaseClient] = None,
    ) -> None:
        self._logger: StructuredLogger = logger
        self._client: Optional[SupabaseClient] = client

        if self._client is not None:
            return

        if supabase_url and supabase_key:
            try:
                self._client = create_client(
                    supabase_url,
                    supabase_key,
                    options=ClientOptions(flow_type="pkce"),
                )
                self._logger.info("Identity provider client initialized.")
            except (ValueError, TypeError) as exc:
                self._logger.warning(
                    "Supabase credential format error: %s. Sign-in disabled.",
                    exc,
                )
            except Exception as exc:
                self._logger.error(
                    "Unexpected identity provider initialization failure: %s. "
                    "Sign-in disabled.",
                    exc,
                    exc_info=True,
                )
        else:
            self._logger.warning(
                "Supabase credentials not configured; sign-in disabled."
            )

    @property
    def auth(self) -> Any:
        """Return the Supabase auth client (``client.auth``).

        Raises
        ------
        RuntimeError
            If the client was not initialised.
        """
        if self._client is None:
            raise RuntimeError(
                "Identity provider is not configured. "
                "Set SUPABASE_URL and SUPABASE_ANON_KEY."
            )
        return self._client.auth

    @property
    def is_available(self) -> bool:
        """``True`` when the Supabase client is available."""
        return self._client is not None
