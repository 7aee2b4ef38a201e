"""
Service Layer Data Transfer Objects.

Pydantic models for validated output at service boundaries.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from lifestream.errors import ErrorKind, LifeStreamError
from lifestream.models.donation_request import DonationRequest

T = TypeVar("T")

__all__ = [
    "DashboardStats",
    "RequestCreated",
    "ServiceResult",
]


# ---------------------------------------------------------------------------
# Dashboard models
# ---------------------------------------------------------------------------

class DashboardStats(BaseModel):
    """Everything a role dashboard displays, fetched in one join.

    Counts are ``None`` for roles whose dashboard does not show them.
    """

    total_users: Optional[int] = None
    total_funding: Optional[Decimal] = None
    total_requests: Optional[int] = None
    recent_requests: list[DonationRequest] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Generic service models
# ---------------------------------------------------------------------------

class ServiceResult(BaseModel, Generic[T]):
    """
    Standard service return envelope.

    All service methods return this, providing a consistent contract
    for the view layer.  ``error_kind`` tells the screen how to present
    a failure (inline message, toast or redirect to login).
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    status_code: int = 200

    @classmethod
    def ok(cls, data: Optional[T] = None, status_code: int = 200) -> "ServiceResult[T]":
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def fail(cls, exc: LifeStreamError) -> "ServiceResult[T]":
        """Build a failed result from a taxonomy exception."""
        return cls(
            success=False,
            error=exc.message,
            error_kind=exc.kind,
            status_code=exc.status_code,
        )


# ---------------------------------------------------------------------------
# Mutation outcomes
# ---------------------------------------------------------------------------

class RequestCreated(BaseModel):
    """Result of creating a donation request.

    ``navigate_to`` names the screen the form hands over to.
    """

    request_id: Optional[str] = None
    request: DonationRequest
    navigate_to: str = "my-requests"
