"""
Role Resolver.

Maps a bearer token to the platform role via ``GET /get-user-role``.
Resolution is a pure function of the token: it never touches the
session.  Any failure is reported as a failed result and never replaced
by a default role; the caller signs the identity out.
"""

from __future__ import annotations

from typing import Any

from lifestream.api_client import ApiClient
from lifestream.errors import AuthenticationError, AuthorizationError, LifeStreamError
from lifestream.models.enums import Role
from lifestream.models.service_models import ServiceResult


def resolve_role(api: ApiClient, token: str) -> ServiceResult[Role]:
    """Ask the platform which role *token* belongs to.

    Returns:
        ``ServiceResult[Role]`` with ``data`` set on success.  Network,
        server and unknown-role failures all yield ``success=False``.
    """
    if not token:
        return ServiceResult[Role].fail(
            AuthenticationError("Cannot resolve a role without a session token.")
        )

    try:
        payload: Any = api.get("/get-user-role", token=token)
    except LifeStreamError as exc:
        return ServiceResult[Role].fail(exc)

    raw = payload.get("role") if isinstance(payload, dict) else None
    try:
        role = Role(str(raw).strip().lower())
    except ValueError:
        return ServiceResult[Role].fail(
            AuthorizationError(f"Your account has no recognised role ({raw!r}).")
        )
    return ServiceResult[Role].ok(role)
