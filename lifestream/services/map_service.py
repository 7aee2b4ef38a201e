"""
Contact Map Service.

Builds the static-map URL (one marker at the contact coordinates) and
opens the interactive map in the system browser.  Also validates the
contact form, which has no backend endpoint and is only acknowledged.
"""

from __future__ import annotations

import re
import webbrowser
from urllib.parse import quote, urlencode

from lifestream.errors import LifeStreamError, ValidationError
from lifestream.logger import StructuredLogger
from lifestream.models.service_models import ServiceResult
from lifestream.services.base_service import BaseService

_EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}$")


class MapService(BaseService):
    """Map links for the contact screen.

    Parameters
    ----------
    static_url:
        Static-map endpoint (Google Static Maps API).
    browser_url:
        Base URL of the interactive map search page.
    api_key:
        Maps key appended to static-map URLs when set.
    latitude, longitude, zoom:
        Marker position and zoom level.
    address:
        Street address shown next to the map.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        static_url: str,
        browser_url: str,
        api_key: str,
        latitude: float,
        longitude: float,
        zoom: int,
        address: str,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._static_url = static_url
        self._browser_url = browser_url
        self._api_key = api_key
        self.latitude = latitude
        self.longitude = longitude
        self.zoom = zoom
        self.address = address

    @property
    def coordinates(self) -> str:
        return f"{self.latitude:.4f},{self.longitude:.4f}"

    def static_map_url(self, width: int = 600, height: int = 400) -> str:
        """URL of a rendered map image with a single marker."""
        params = {
            "center": self.coordinates,
            "zoom": str(self.zoom),
            "size": f"{width}x{height}",
            "markers": f"color:red|{self.coordinates}",
        }
        if self._api_key:
            params["key"] = self._api_key
        return f"{self._static_url}?{urlencode(params)}"

    def browser_url(self) -> str:
        """Interactive map centred on the marker."""
        return f"{self._browser_url.rstrip('/')}/?api=1&query={quote(self.coordinates)}"

    def open_in_browser(self) -> ServiceResult[str]:
        url = self.browser_url()
        try:
            opened = webbrowser.open(url, new=2)
        except webbrowser.Error as exc:
            self._logger.error("Could not open browser: %s", exc)
            opened = False
        if not opened:
            return ServiceResult[str](
                success=False,
                error=f"Could not open a browser. Visit {url} manually.",
                status_code=500,
            )
        self._logger.info("Opened contact map in browser")
        return ServiceResult[str].ok(url)

    def acknowledge_contact(self, name: str, email: str, message: str) -> ServiceResult[str]:
        """Validate the contact form; nothing is sent anywhere."""
        try:
            if not name.strip():
                raise ValidationError("Please enter your name.")
            if not _EMAIL_RE.match(email.strip()):
                raise ValidationError("Please enter a valid email address.")
            if not message.strip():
                raise ValidationError("Please write a message.")
        except LifeStreamError as exc:
            return self._failure(exc, "contact_message")
        return ServiceResult[str].ok(f"Thanks, {name.strip()}! We will get back to you soon.")
