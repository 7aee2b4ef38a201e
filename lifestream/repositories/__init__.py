"""
Repository Layer.

Each repository wraps one family of platform API routes and returns
validated Pydantic models.  Repositories never catch taxonomy errors;
services decide how failures reach the user.
"""

from lifestream.repositories.base_repository import BaseRepository
from lifestream.repositories.blog_repository import BlogRepository
from lifestream.repositories.donation_request_repository import DonationRequestRepository
from lifestream.repositories.funding_repository import FundingRepository
from lifestream.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "BlogRepository",
    "DonationRequestRepository",
    "FundingRepository",
    "UserRepository",
]
