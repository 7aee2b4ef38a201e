"""
Data Models Package.

Re-exports the Pydantic models for short imports:
    from lifestream.models import DonationRequest, Identity, Role
"""

from lifestream.models.blog import BlogDraftInput, BlogPost
from lifestream.models.donation_request import (
    DonationRequest,
    DonationRequestInput,
    DonationRequestUpdate,
)
from lifestream.models.enums import BlogStatus, BloodGroup, RequestStatus, Role, UserStatus
from lifestream.models.location import District, Upazila
from lifestream.models.payment import CardDetails, DonationReceipt
from lifestream.models.service_models import DashboardStats, RequestCreated, ServiceResult
from lifestream.models.user import Identity, ProfileUpdate, RegistrationInput, UserProfile

__all__ = [
    "BlogDraftInput",
    "BlogPost",
    "BlogStatus",
    "BloodGroup",
    "CardDetails",
    "DashboardStats",
    "District",
    "DonationReceipt",
    "DonationRequest",
    "DonationRequestInput",
    "DonationRequestUpdate",
    "Identity",
    "ProfileUpdate",
    "RegistrationInput",
    "RequestCreated",
    "RequestStatus",
    "Role",
    "ServiceResult",
    "Upazila",
    "UserProfile",
    "UserStatus",
]
