"""LifeStream main window.

The window moves through three phases: a splash while a stored session
is resolved, the login screen, and the workspace (sidebar plus the
active screen).  Guests reach the workspace too, with only the public
screens listed.

Every screen change goes through ``RouteGuard``; screens are built on
first use, cached, and refreshed each time they are shown.  When the
session ends for any reason (log-out, an HTTP 401, a rejected token
refresh) the cached screens are destroyed before the login screen
returns, so no data from the previous user survives.
"""

from __future__ import annotations

from typing import Optional

import customtkinter as ctk

from lifestream.auth import SessionManager
from lifestream.guards import GuardDecision, RouteGuard
from lifestream.logger import StructuredLogger
from lifestream.models.auth_models import AuthErrorCode, AuthResult
from lifestream.models.user import Identity
from lifestream.services import ServiceContainer
from lifestream.services.auth_service import AuthService
from lifestream.ui.login_view import LoginView
from lifestream.ui.module_frame import ModuleFrame
from lifestream.ui.module_registry import ModuleRegistry
from lifestream.ui.sidebar import SidebarNav
from lifestream.ui.theme import (
    CONTENT_BG,
    FONT_BODY,
    FONT_BRAND,
    LOGIN_WINDOW_HEIGHT,
    LOGIN_WINDOW_WIDTH,
    MAIN_WINDOW_HEIGHT,
    MAIN_WINDOW_WIDTH,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from lifestream.utils.task_scope import TaskScope

_TOKEN_REFRESH_MS = 60_000

_SESSION_ENDED = "Your session has ended. Please sign in again."
_SESSION_EXPIRED = "Your session has expired. Please sign in again."


class AppShell(ctk.CTk):
    """Top-level window; owns the sidebar, the screen cache and the refresh timer."""

    def __init__(
        self,
        session: SessionManager,
        services: ServiceContainer,
        registry: ModuleRegistry,
        logger: StructuredLogger,
    ) -> None:
        super().__init__()
        self._session = session
        self._services = services
        self._registry = registry
        self._logger = logger
        self._guard = RouteGuard(session)
        self._tasks = TaskScope(lambda callback: self.after(0, callback), logger)

        self._screens: dict[str, ctk.CTkFrame] = {}
        self._current: Optional[str] = None
        self._refresh_job: Optional[str] = None
        # Whose workspace is on screen; None for a guest or no workspace.
        self._workspace_owner: Optional[str] = None

        self._splash: Optional[ctk.CTkFrame] = None
        self._login: Optional[LoginView] = None
        self._sidebar: Optional[SidebarNav] = None
        self._content: Optional[ctk.CTkFrame] = None

        self.title("LifeStream")
        ctk.set_appearance_mode("light")
        ctk.set_default_color_theme("blue")
        self.geometry(f"{MAIN_WINDOW_WIDTH}x{MAIN_WINDOW_HEIGHT}")
        self.minsize(LOGIN_WINDOW_WIDTH, LOGIN_WINDOW_HEIGHT)
        self.protocol("WM_DELETE_WINDOW", self._on_close)

        registry.bind_navigator(self.navigate)
        self._unsubscribe = session.subscribe(self._on_identity_changed)

        self._show_splash()
        self._tasks.submit(self._auth.restore_session, self._on_restored, name="session-restore")

    @property
    def _auth(self) -> AuthService:
        return self._services["auth_service"]

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def _show_splash(self) -> None:
        self._splash = ctk.CTkFrame(self, fg_color=CONTENT_BG)
        self._splash.pack(fill="both", expand=True)
        for text, font, color, y in (
            ("LifeStream", FONT_BRAND, TEXT_PRIMARY, 0.45),
            ("Restoring your session...", FONT_BODY, TEXT_SECONDARY, 0.52),
        ):
            ctk.CTkLabel(self._splash, text=text, font=font, text_color=color).place(
                relx=0.5, rely=y, anchor="center",
            )

    def _on_restored(self, result: AuthResult) -> None:
        if self._splash is not None:
            self._splash.destroy()
            self._splash = None
        if result.success:
            self._logger.info("Session restored for %s", result.email)
            self._show_workspace()
            return
        message = result.error_message if result.error_code is AuthErrorCode.ROLE_UNAVAILABLE else None
        self._show_login(message)

    def _show_login(self, message: Optional[str] = None) -> None:
        self._teardown_workspace()
        self._drop_login()
        self._login = LoginView(
            parent=self,
            auth_service=self._auth,
            locations=self._services["location_service"],
            on_login_success=self._enter_workspace,
            on_browse_as_guest=self._enter_workspace,
            logger=self._logger,
        )
        self._login.pack(fill="both", expand=True)
        if message:
            self._login.show_message(message)

    def _drop_login(self) -> None:
        if self._login is not None:
            self._login.destroy()
            self._login = None

    def _enter_workspace(self) -> None:
        self._drop_login()
        identity = self._session.identity
        self._logger.info("Opening workspace for %s", identity.email if identity else "guest")
        self._show_workspace()

    def _show_workspace(self) -> None:
        self._teardown_workspace()
        identity = self._session.identity
        self._workspace_owner = identity.id if identity is not None else None

        self._content = ctk.CTkFrame(self, fg_color=CONTENT_BG)
        self._content.pack(side="top", fill="both", expand=True)
        self._mount_sidebar()

        assert self._sidebar is not None
        if not self._sidebar.module_ids:
            self._logger.warning("No screens available for role %s", self._session.role)
            ctk.CTkLabel(
                self._content,
                text="No screens are available for your account. Contact an administrator.",
                font=FONT_BODY,
                text_color=TEXT_SECONDARY,
            ).place(relx=0.5, rely=0.5, anchor="center")
            return

        self.navigate(self._registry.home_for(self._session.is_authenticated))
        if identity is not None:
            self._schedule_token_refresh(0)

    def _mount_sidebar(self) -> None:
        """(Re)build the sidebar for the current identity, left of the content area."""
        if self._sidebar is not None:
            self._sidebar.destroy()
        identity = self._session.identity
        self._sidebar = SidebarNav(
            parent=self,
            entries=self._registry.visible_modules(self._session.role),
            identity=identity,
            on_select=self.navigate,
            on_session_action=self._on_session_action,
            logger=self._logger,
        )
        self._sidebar.pack(side="left", fill="y", before=self._content)
        if self._current:
            self._sidebar.set_active(self._current)

    def _teardown_workspace(self) -> None:
        for frame in self._screens.values():
            frame.destroy()
        self._screens.clear()
        self._current = None
        if self._sidebar is not None:
            self._sidebar.destroy()
            self._sidebar = None
        if self._content is not None:
            self._content.destroy()
            self._content = None

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def navigate(self, module_id: str) -> None:
        """Show *module_id*, or follow the guard's redirect."""
        try:
            entry = self._registry.get(module_id)
        except KeyError:
            self._logger.error("Unknown screen requested: %s", module_id)
            return

        decision = GuardDecision.ALLOW if entry.public else self._guard.check(entry.required_roles)
        if decision is GuardDecision.WAIT:
            self._logger.debug("Role not resolved yet; %s deferred", module_id)
        elif decision is GuardDecision.REDIRECT_LOGIN:
            self._logger.info("%s requires sign-in", module_id)
            self._show_login()
        elif decision is GuardDecision.REDIRECT_HOME:
            home = self._registry.home_for(self._session.is_authenticated)
            self._logger.warning("%s not permitted for role %s", module_id, self._session.role)
            if home != module_id:
                self._activate(home)
        else:
            self._activate(module_id)

    def _activate(self, module_id: str) -> None:
        if self._content is None:
            return
        if module_id != self._current:
            if self._current in self._screens:
                self._screens[self._current].pack_forget()
            screen = self._screens.get(module_id)
            if screen is None:
                screen = self._registry.get(module_id).factory(self._content)
                self._screens[module_id] = screen
            screen.pack(fill="both", expand=True)
            self._current = module_id
            if self._sidebar is not None:
                self._sidebar.set_active(module_id)
            self._logger.info("Screen shown: %s", module_id)

        screen = self._screens[module_id]
        if isinstance(screen, ModuleFrame):
            screen.refresh()

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def _on_session_action(self) -> None:
        """Sidebar button: log out, or for a guest open the login screen."""
        self._cancel_token_refresh()
        self._workspace_owner = None
        if self._session.is_authenticated:
            self._auth.sign_out()
        self._show_login()

    def _on_identity_changed(self, identity: Optional[Identity]) -> None:
        # Session listeners may fire on worker threads.
        try:
            self.after(0, self._apply_identity, identity)
        except RuntimeError as exc:
            self._logger.debug("Identity change after window close: %s", exc)

    def _apply_identity(self, identity: Optional[Identity]) -> None:
        if self._workspace_owner is None or self._sidebar is None:
            return
        if identity is None:
            self._logger.warning("Session ended while the workspace was open.")
            self._force_login(_SESSION_ENDED)
        elif identity.id == self._workspace_owner:
            self._mount_sidebar()

    def _force_login(self, message: str) -> None:
        self._cancel_token_refresh()
        self._workspace_owner = None
        self._show_login(message)

    def _schedule_token_refresh(self, delay_ms: int = _TOKEN_REFRESH_MS) -> None:
        self._refresh_job = self.after(delay_ms, self._refresh_token)

    def _refresh_token(self) -> None:
        self._refresh_job = None
        if self._session.is_authenticated:
            self._tasks.submit(
                self._auth.refresh_session_token, self._on_token_refreshed, name="token-refresh",
            )

    def _on_token_refreshed(self, result: AuthResult) -> None:
        if not result.success and result.error_code is AuthErrorCode.SESSION_EXPIRED:
            self._logger.warning("Refresh token rejected; signing out.")
            self._workspace_owner = None
            self._auth.sign_out()
            self._force_login(_SESSION_EXPIRED)
        elif self._session.is_authenticated:
            self._schedule_token_refresh()

    def _cancel_token_refresh(self) -> None:
        if self._refresh_job is not None:
            self.after_cancel(self._refresh_job)
            self._refresh_job = None

    def _on_close(self) -> None:
        self._cancel_token_refresh()
        self._tasks.close()
        self._unsubscribe()
        self._registry.bind_navigator(None)
        self._teardown_workspace()
        self.destroy()
