"""LifeStream look and feel.

A dark maroon sidebar beside a warm off-white content area, with blood
red as the single accent.  Request status colours are shared by the
badges in every table.  Constants only.
"""

from __future__ import annotations

from typing import Final

# ---------------------------------------------------------------------------
# Colour palette: dark sidebar, light content
# ---------------------------------------------------------------------------

SIDEBAR_BG: Final[str] = "#23161a"
SIDEBAR_HOVER: Final[str] = "#3a2026"
SIDEBAR_ACTIVE: Final[str] = "#5c1a26"
SIDEBAR_TEXT: Final[str] = "#ece3e4"

CONTENT_BG: Final[str] = "#f4f1f1"
CONTENT_CARD_BG: Final[str] = "#fffdfd"

ACCENT_PRIMARY: Final[str] = "#c0392b"
ACCENT_HOVER: Final[str] = "#a93226"
TEXT_PRIMARY: Final[str] = "#23161a"
TEXT_SECONDARY: Final[str] = "#7a6a6d"
TEXT_LIGHT: Final[str] = "#fffafa"

# Request status badges
STATUS_PENDING: Final[str] = "#f39c12"
STATUS_IN_PROGRESS: Final[str] = "#2980b9"
STATUS_COMPLETED: Final[str] = "#27ae60"
STATUS_CANCELED: Final[str] = "#7f8c8d"

# Input / form
INPUT_BG: Final[str] = "#fffdfd"
INPUT_BORDER: Final[str] = "#d9c9cb"
ERROR_TEXT: Final[str] = "#b71c1c"
SUCCESS_TEXT: Final[str] = "#2e7d32"

# Toasts
TOAST_INFO_BG: Final[str] = "#2d3436"
TOAST_SUCCESS_BG: Final[str] = "#1e8449"
TOAST_ERROR_BG: Final[str] = "#b03a2e"

# Tab / interactive
TAB_BORDER: Final[str] = "#eadfe0"
TAB_HOVER: Final[str] = "#f7eeef"
ROW_ALT_BG: Final[str] = "#faf7f7"
LOGOUT_PRIMARY: Final[str] = "#ff6b6b"
LOGOUT_HOVER: Final[str] = "#4a1f26"

# ---------------------------------------------------------------------------
# Fonts (Segoe UI on Windows, system fallback elsewhere)
# ---------------------------------------------------------------------------

FONT_FAMILY: Final[str] = "Segoe UI"
FONT_BRAND: Final[tuple[str, int, str]] = (FONT_FAMILY, 24, "bold")
FONT_ICON_LG: Final[tuple[str, int, str]] = (FONT_FAMILY, 26, "bold")
FONT_HEADING: Final[tuple[str, int, str]] = (FONT_FAMILY, 19, "bold")
FONT_SUBHEADING: Final[tuple[str, int, str]] = (FONT_FAMILY, 15, "bold")
FONT_SUBTITLE: Final[tuple[str, int]] = (FONT_FAMILY, 12)
FONT_BODY: Final[tuple[str, int]] = (FONT_FAMILY, 13)
FONT_SIDEBAR: Final[tuple[str, int]] = (FONT_FAMILY, 14)
FONT_SIDEBAR_ACTIVE: Final[tuple[str, int, str]] = (FONT_FAMILY, 14, "bold")
FONT_LABEL: Final[tuple[str, int, str]] = (FONT_FAMILY, 11, "bold")
FONT_SMALL: Final[tuple[str, int]] = (FONT_FAMILY, 11)
FONT_CAPTION: Final[tuple[str, int]] = (FONT_FAMILY, 10)
FONT_BUTTON: Final[tuple[str, int, str]] = (FONT_FAMILY, 13, "bold")
FONT_STAT: Final[tuple[str, int, str]] = (FONT_FAMILY, 28, "bold")

# ---------------------------------------------------------------------------
# Dimensions
# ---------------------------------------------------------------------------

SIDEBAR_WIDTH: Final[int] = 236
LOGIN_WINDOW_WIDTH: Final[int] = 520
LOGIN_WINDOW_HEIGHT: Final[int] = 800
MAIN_WINDOW_WIDTH: Final[int] = 1240
MAIN_WINDOW_HEIGHT: Final[int] = 780
CORNER_RADIUS: Final[int] = 10
INPUT_HEIGHT: Final[int] = 40
BUTTON_HEIGHT: Final[int] = 40
PADDING_SM: Final[int] = 6
PADDING_MD: Final[int] = 14
PADDING_LG: Final[int] = 22
