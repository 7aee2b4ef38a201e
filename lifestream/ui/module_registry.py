"""Screen registry for the LifeStream shell.

``main.py`` registers every screen once, with the roles that may open it
and whether guests may browse it.  The shell reads the registry to build
the sidebar for the current role and to find each screen's factory the
first time it is shown.  Views never import each other; they move
between screens through ``ModuleRegistry.navigate``.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from lifestream.logger import StructuredLogger
from lifestream.models.enums import Role

ALL_ROLES: frozenset[Role] = frozenset(Role)

ModuleFactory = Callable[[ctk.CTkFrame], ctk.CTkFrame]
Navigator = Callable[[str], None]


class ModuleEntry:
    """A registered screen.

    ``factory`` builds the screen's root frame inside the content area and
    is only called when the screen is first opened.  ``required_roles``
    applies to signed-in users; ``public`` screens are also listed for
    guests.
    """

    __slots__ = ("module_id", "display_name", "icon", "factory", "required_roles", "public")

    def __init__(
        self,
        module_id: str,
        display_name: str,
        icon: str,
        factory: ModuleFactory,
        required_roles: frozenset[Role],
        public: bool,
    ) -> None:
        self.module_id = module_id
        self.display_name = display_name
        self.icon = icon
        self.factory = factory
        self.required_roles = required_roles
        self.public = public

    def is_visible_to(self, role: Optional[Role]) -> bool:
        if role is None:
            return self.public
        return role in self.required_roles


class ModuleRegistry:
    """Ordered collection of screens plus the shell's navigation hook."""

    def __init__(self, logger: StructuredLogger) -> None:
        self._logger = logger
        self._screens: dict[str, ModuleEntry] = {}
        self._home_id = ""
        self._guest_home_id = ""
        self._navigator: Optional[Navigator] = None

    def register(
        self,
        module_id: str,
        display_name: str,
        icon: str,
        factory: ModuleFactory,
        required_roles: frozenset[Role] = ALL_ROLES,
        *,
        public: bool = False,
        default: bool = False,
    ) -> None:
        """Add a screen; ``default=True`` makes it the landing screen after sign-in.

        The first public screen registered is where guests land.
        """
        if module_id in self._screens:
            self._logger.warning("Screen '%s' registered twice; keeping the last one.", module_id)
        self._screens[module_id] = ModuleEntry(
            module_id, display_name, icon, factory, required_roles, public,
        )
        if default or not self._home_id:
            self._home_id = module_id
        if public and not self._guest_home_id:
            self._guest_home_id = module_id
        self._logger.debug("Screen registered: %s", module_id)

    def visible_modules(self, role: Optional[Role]) -> list[ModuleEntry]:
        """Screens listed in the sidebar for *role* (``None`` for a guest)."""
        return [entry for entry in self._screens.values() if entry.is_visible_to(role)]

    def get(self, module_id: str) -> ModuleEntry:
        try:
            return self._screens[module_id]
        except KeyError:
            raise KeyError(f"Screen '{module_id}' is not registered.") from None

    def home_for(self, authenticated: bool) -> str:
        return self._home_id if authenticated else self._guest_home_id

    def bind_navigator(self, navigator: Optional[Navigator]) -> None:
        self._navigator = navigator

    def navigate(self, module_id: str) -> None:
        """Open *module_id* through the bound shell; a no-op before the shell exists."""
        if self._navigator is None:
            self._logger.warning("No shell bound; ignoring navigation to %s", module_id)
            return
        self._navigator(module_id)
