"""
Business Logic Services Package.

Services depend on the repository layer for data access and on the
shared ``SessionManager`` for the acting identity.

The ``create_services()`` factory wires every repository and service
together, returning a typed dict that the views can consume without
knowing the internal dependency graph.
"""

from __future__ import annotations

from typing import Optional, TypedDict

import requests

from lifestream.api_client import ApiClient
from lifestream.auth import SessionManager
from lifestream.config import AppConfig
from lifestream.identity_provider import IdentityProvider
from lifestream.logger import get_logger
from lifestream.repositories.blog_repository import BlogRepository
from lifestream.repositories.donation_request_repository import DonationRequestRepository
from lifestream.repositories.funding_repository import FundingRepository
from lifestream.repositories.user_repository import UserRepository
from lifestream.services.auth_service import AuthService
from lifestream.services.blog_service import BlogService
from lifestream.services.dashboard_service import DashboardService
from lifestream.services.donation_request_service import DonationRequestService
from lifestream.services.image_service import ImageHostService
from lifestream.services.location_service import LocationService
from lifestream.services.map_service import MapService
from lifestream.services.payment_service import PaymentService, StripeGateway
from lifestream.services.report_service import ReportService
from lifestream.services.user_service import UserService


class ServiceContainer(TypedDict):
    """Typed container for all application services."""

    # --- Identity ---
    auth_service: AuthService

    # --- Reference data ---
    location_service: LocationService

    # --- Donation requests & dashboards ---
    donation_request_service: DonationRequestService
    dashboard_service: DashboardService

    # --- Administration & content ---
    user_service: UserService
    blog_service: BlogService

    # --- Funding, media, contact, reports ---
    payment_service: PaymentService
    image_service: ImageHostService
    map_service: MapService
    report_service: ReportService


def create_services(
    config: AppConfig,
    session: SessionManager,
    provider: IdentityProvider,
    http: Optional[requests.Session] = None,
) -> ServiceContainer:
    """
    Wire all repositories and services together.

    This is the single composition root for the service layer.  The
    application entry-point calls this once at startup and passes the
    returned dict to the views.

    Args:
        config: Application configuration.
        session: The shared session holder.
        provider: Identity-provider connection.
        http: Shared ``requests.Session``; tests inject a fake.

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    logger = get_logger("lifestream.services")
    http = http if http is not None else requests.Session()

    # ------------------------------------------------------------------
    # 1. HTTP client (token provider and 401 handler bound in step 4)
    # ------------------------------------------------------------------
    api = ApiClient(
        base_url=config.API_BASE_URL,
        timeout_s=config.HTTP_TIMEOUT_S,
        logger=get_logger("lifestream.api"),
        http=http,
    )

    # ------------------------------------------------------------------
    # 2. Repositories (data-access layer)
    # ------------------------------------------------------------------
    user_repo = UserRepository(api=api, logger=logger)
    request_repo = DonationRequestRepository(api=api, logger=logger)
    blog_repo = BlogRepository(api=api, logger=logger)
    funding_repo = FundingRepository(api=api, logger=logger)

    # ------------------------------------------------------------------
    # 3. Leaf services (no service dependencies)
    # ------------------------------------------------------------------
    location_service = LocationService(data_dir=config.reference_data_path, logger=logger)
    image_service = ImageHostService(
        upload_url=config.IMGBB_UPLOAD_URL,
        api_key=config.IMGBB_API_KEY.get_secret_value(),
        timeout_s=config.HTTP_TIMEOUT_S,
        logger=logger,
        http=http,
    )
    map_service = MapService(
        static_url=config.MAPS_STATIC_URL,
        browser_url=config.MAPS_BROWSER_URL,
        api_key=config.MAPS_API_KEY.get_secret_value(),
        latitude=config.CONTACT_LATITUDE,
        longitude=config.CONTACT_LONGITUDE,
        zoom=config.CONTACT_MAP_ZOOM,
        address=config.CONTACT_ADDRESS,
        logger=logger,
    )
    report_service = ReportService(logger=logger)

    # ------------------------------------------------------------------
    # 4. Identity (binds the bearer token and 401 handling into the API)
    # ------------------------------------------------------------------
    auth_service = AuthService(
        provider=provider,
        session=session,
        api=api,
        users=user_repo,
        locations=location_service,
        images=image_service,
        config=config,
        logger=get_logger("lifestream.auth"),
    )
    api.set_token_provider(auth_service.get_bearer_token)
    api.set_unauthorized_handler(auth_service.handle_unauthorized)

    # ------------------------------------------------------------------
    # 5. Feature services
    # ------------------------------------------------------------------
    donation_request_service = DonationRequestService(
        session=session,
        requests=request_repo,
        users=user_repo,
        locations=location_service,
        donor_placeholder=config.DONOR_PLACEHOLDER,
        logger=logger,
    )
    dashboard_service = DashboardService(
        session=session,
        users=user_repo,
        requests=request_repo,
        funding=funding_repo,
        max_workers=config.DASHBOARD_MAX_WORKERS,
        recent_limit=config.RECENT_REQUESTS_LIMIT,
        logger=logger,
    )
    user_service = UserService(
        session=session,
        repo=user_repo,
        locations=location_service,
        logger=logger,
    )
    blog_service = BlogService(
        session=session,
        repo=blog_repo,
        images=image_service,
        logger=logger,
    )
    payment_service = PaymentService(
        session=session,
        funding=funding_repo,
        gateway=StripeGateway(
            api_base=config.STRIPE_API_BASE,
            publishable_key=config.STRIPE_PUBLISHABLE_KEY.get_secret_value(),
            timeout_s=config.HTTP_TIMEOUT_S,
            logger=logger,
            http=http,
        ),
        donation_currency=config.DONATION_CURRENCY,
        settlement_currency=config.SETTLEMENT_CURRENCY,
        settlement_rate=config.SETTLEMENT_RATE,
        min_amount=config.MIN_DONATION_AMOUNT,
        logger=logger,
    )

    return ServiceContainer(
        auth_service=auth_service,
        location_service=location_service,
        donation_request_service=donation_request_service,
        dashboard_service=dashboard_service,
        user_service=user_service,
        blog_service=blog_service,
        payment_service=payment_service,
        image_service=image_service,
        map_service=map_service,
        report_service=report_service,
    )
