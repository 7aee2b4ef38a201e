"""
LifeStream Desktop Application Entry Point.

Bootstraps the entire dependency graph via constructor injection and
launches the CustomTkinter GUI.  Every subsystem is wired here, with no
module-level globals.

Usage::

    python main.py
"""

from __future__ import annotations

import sys
import traceback

from lifestream.auth import SessionManager
from lifestream.config import get_config
from lifestream.identity_provider import IdentityProvider
from lifestream.logger import StructuredLogger, get_logger
from lifestream.models.enums import Role
from lifestream.services import create_services
from lifestream.ui.app_shell import AppShell
from lifestream.ui.module_registry import ALL_ROLES, ModuleRegistry
from lifestream.ui.views.blogs_view import BlogsView
from lifestream.ui.views.contact_view import ContactView
from lifestream.ui.views.content_view import ContentView
from lifestream.ui.views.dashboard_view import DashboardView
from lifestream.ui.views.donate_view import DonateView
from lifestream.ui.views.find_donor_view import FindDonorView
from lifestream.ui.views.pending_requests_view import PendingRequestsView
from lifestream.ui.views.profile_view import ProfileView
from lifestream.ui.views.request_form_view import RequestFormView
from lifestream.ui.views.request_list_view import RequestListView
from lifestream.ui.views.users_view import UsersView

_STAFF: frozenset[Role] = frozenset({Role.ADMIN, Role.VOLUNTEER})


def main() -> None:
    """Application entry point: wire dependencies and launch the GUI."""
    logger: StructuredLogger = get_logger("main")
    logger.info("Starting LifeStream...")

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    # ------------------------------------------------------------------
    # 2. Session Manager + identity provider
    # ------------------------------------------------------------------
    session = SessionManager()
    provider = IdentityProvider(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        logger=StructuredLogger(name="identity"),
    )

    # ------------------------------------------------------------------
    # 3. Service Container (repositories + services, single composition root)
    # ------------------------------------------------------------------
    services = create_services(config=config, session=session, provider=provider)

    # ------------------------------------------------------------------
    # 4. Module Registry (plug-and-play modules)
    # ------------------------------------------------------------------
    registry = ModuleRegistry(logger=get_logger("modules"))
    ui_logger = get_logger("ui")

    registry.register(
        module_id="dashboard",
        display_name="Dashboard",
        icon="\U0001F3E0",  # House
        factory=lambda parent: DashboardView(
            parent=parent,
            service=services["dashboard_service"],
            requests=services["donation_request_service"],
            session=session,
            currency=config.SETTLEMENT_CURRENCY,
            navigate=registry.navigate,
            logger=ui_logger,
        ),
        default=True,
    )
    registry.register(
        module_id="my-requests",
        display_name="My Requests",
        icon="\U0001F4CB",  # Clipboard
        factory=lambda parent: RequestListView(
            parent=parent,
            service=services["donation_request_service"],
            reports=services["report_service"],
            locations=services["location_service"],
            session=session,
            scope="mine",
            page_size=config.PAGE_SIZE,
            logger=ui_logger,
        ),
        required_roles=frozenset({Role.DONOR}),
    )
    registry.register(
        module_id="create-request",
        display_name="New Request",
        icon="➕",  # Plus
        factory=lambda parent: RequestFormView(
            parent=parent,
            service=services["donation_request_service"],
            locations=services["location_service"],
            session=session,
            navigate=registry.navigate,
            logger=ui_logger,
        ),
        required_roles=frozenset({Role.DONOR}),
    )
    registry.register(
        module_id="all-requests",
        display_name="All Requests",
        icon="\U0001FA78",  # Drop of blood
        factory=lambda parent: RequestListView(
            parent=parent,
            service=services["donation_request_service"],
            reports=services["report_service"],
            locations=services["location_service"],
            session=session,
            scope="all",
            page_size=config.PAGE_SIZE,
            logger=ui_logger,
        ),
        required_roles=_STAFF,
    )
    registry.register(
        module_id="users",
        display_name="All Users",
        icon="\U0001F465",  # Silhouettes
        factory=lambda parent: UsersView(
            parent=parent,
            service=services["user_service"],
            reports=services["report_service"],
            page_size=config.PAGE_SIZE,
            logger=ui_logger,
        ),
        required_roles=frozenset({Role.ADMIN}),
    )
    registry.register(
        module_id="content",
        display_name="Content",
        icon="\U0001F4DD",  # Memo
        factory=lambda parent: ContentView(
            parent=parent,
            service=services["blog_service"],
            session=session,
            page_size=config.PAGE_SIZE,
            logger=ui_logger,
        ),
        required_roles=_STAFF,
    )
    registry.register(
        module_id="pending-requests",
        display_name="Donation Requests",
        icon="❤",  # Heart
        factory=lambda parent: PendingRequestsView(
            parent=parent,
            service=services["donation_request_service"],
            session=session,
            page_size=config.PAGE_SIZE,
            logger=ui_logger,
        ),
        public=True,
    )
    registry.register(
        module_id="find-donor",
        display_name="Find Donor",
        icon="\U0001F50D",  # Magnifier
        factory=lambda parent: FindDonorView(
            parent=parent,
            service=services["user_service"],
            locations=services["location_service"],
            page_size=config.PAGE_SIZE,
            logger=ui_logger,
        ),
        public=True,
    )
    registry.register(
        module_id="blogs",
        display_name="Blog",
        icon="\U0001F4F0",  # Newspaper
        factory=lambda parent: BlogsView(
            parent=parent,
            service=services["blog_service"],
            logger=ui_logger,
        ),
        public=True,
    )
    registry.register(
        module_id="donate",
        display_name="Funding",
        icon="\U0001F4B3",  # Card
        factory=lambda parent: DonateView(
            parent=parent,
            service=services["payment_service"],
            logger=ui_logger,
        ),
        required_roles=ALL_ROLES,
    )
    registry.register(
        module_id="profile",
        display_name="Profile",
        icon="\U0001F464",  # Silhouette
        factory=lambda parent: ProfileView(
            parent=parent,
            users=services["user_service"],
            auth=services["auth_service"],
            locations=services["location_service"],
            logger=ui_logger,
        ),
    )
    registry.register(
        module_id="contact",
        display_name="Contact",
        icon="✉",  # Envelope
        factory=lambda parent: ContactView(
            parent=parent,
            service=services["map_service"],
            logger=ui_logger,
        ),
        public=True,
    )

    # ------------------------------------------------------------------
    # 5. Launch the GUI (blocks until window closes)
    # ------------------------------------------------------------------
    logger.info("Launching GUI...")
    app = AppShell(
        session=session,
        services=services,
        registry=registry,
        logger=ui_logger,
    )
    try:
        app.mainloop()
    finally:
        logger.info("LifeStream shut down.")


def _show_fatal_error(exc: BaseException) -> None:
    """Display a fatal-error dialog so double-click users get feedback.

    Uses ``tkinter.messagebox`` (stdlib) rather than CustomTkinter so
    the dialog works even when CTk initialisation itself is the thing
    that failed.
    """
    detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    try:
        import tkinter
        from tkinter import messagebox

        # A hidden root window is required for messagebox to work
        # when no Tk instance exists yet.
        root = tkinter.Tk()
        root.withdraw()
        messagebox.showerror(
            title="LifeStream: Fatal Error",
            message=(
                "The application encountered an unexpected error and "
                "cannot continue.\n\n"
                f"{type(exc).__name__}: {exc}"
            ),
            detail=detail,
        )
        root.destroy()
    except Exception:
        # Headless or missing Tcl/Tk: fall back to stderr.
        sys.stderr.write(
            f"FATAL: {type(exc).__name__}: {exc}\n{detail}"
        )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        _show_fatal_error(exc)
        sys.exit(1)
