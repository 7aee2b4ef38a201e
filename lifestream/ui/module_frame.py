"""Module Base Frame.

Every screen the Host Shell can activate derives from ``ModuleFrame``.
The base owns the screen's ``TaskScope``: network work runs on worker
threads, results come back through ``self.after(0, ...)``, and closing
the scope in ``destroy()`` guarantees that a response arriving after the
screen was torn down is dropped instead of touching dead widgets.
"""

from __future__ import annotations

import tkinter as tk
from typing import Callable, Optional, TypeVar

import customtkinter as ctk

from lifestream.errors import ErrorKind
from lifestream.logger import StructuredLogger
from lifestream.models.service_models import ServiceResult
from lifestream.ui.components.toast import show_toast
from lifestream.ui.theme import CONTENT_BG, FONT_HEADING, PADDING_LG, PADDING_SM, TEXT_PRIMARY
from lifestream.utils.task_scope import TaskHandle, TaskScope

T = TypeVar("T")


class ModuleFrame(ctk.CTkFrame):
    """Base class for role-gated screens.

    Subclasses build their widgets in ``__init__`` and fetch data in
    :meth:`refresh`, which the shell calls each time the screen is
    shown.

    Parameters
    ----------
    parent:
        Content container provided by the Host Shell.
    logger:
        Structured logger instance.
    """

    def __init__(self, parent: ctk.CTkFrame, logger: StructuredLogger) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._logger = logger
        self._tasks = TaskScope(self._dispatch, logger)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        """Reload the screen's data.  Static screens leave this empty."""

    def destroy(self) -> None:
        self._tasks.close()
        super().destroy()

    # ------------------------------------------------------------------
    # Background work
    # ------------------------------------------------------------------

    def _run(
        self,
        work: Callable[[], T],
        on_done: Callable[[T], None],
        *,
        name: str,
    ) -> TaskHandle:
        """Run *work* off the UI thread; *on_done* runs on it while mounted."""
        return self._tasks.submit(work, on_done, name=name)

    def _dispatch(self, callback: Callable[[], None]) -> None:
        try:
            self.after(0, callback)
        except (RuntimeError, tk.TclError) as exc:
            # Main loop already gone: the scope would drop the result anyway.
            self._logger.debug("Could not schedule UI callback: %s", exc)

    # ------------------------------------------------------------------
    # Feedback
    # ------------------------------------------------------------------

    def _toast(self, message: str, kind: str = "info") -> None:
        show_toast(self, message, kind)

    def _report_failure(self, result: ServiceResult[object], fallback: str) -> None:
        """Toast a failed result.

        Authentication failures also end the session through the HTTP
        client, after which the shell shows the login screen.
        """
        message = result.error or fallback
        if result.error_kind is ErrorKind.AUTHENTICATION:
            message = f"{message} Please sign in again."
        self._toast(message, "error")

    def _build_header(self, title: str, parent: Optional[ctk.CTkFrame] = None) -> ctk.CTkFrame:
        """Heading row; callers pack extra controls on its right side."""
        header = ctk.CTkFrame(parent or self, fg_color="transparent")
        header.pack(fill="x", padx=PADDING_LG, pady=(PADDING_LG, PADDING_SM))
        ctk.CTkLabel(
            header,
            text=title,
            font=FONT_HEADING,
            text_color=TEXT_PRIMARY,
            anchor="w",
        ).pack(side="left")
        return header
