"""
Image Hosting Service.

Uploads avatars and blog thumbnails to imgbb and returns the public URL
stored on the profile or post.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import requests

from lifestream.errors import LifeStreamError, NetworkError, ServerError, ValidationError
from lifestream.logger import StructuredLogger
from lifestream.models.service_models import ServiceResult
from lifestream.services.base_service import BaseService

_ALLOWED_SUFFIXES: frozenset[str] = frozenset({".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp"})
_MAX_UPLOAD_BYTES: int = 32 * 1024 * 1024


class ImageHostService(BaseService):
    """Client for the imgbb upload endpoint.

    Parameters
    ----------
    upload_url:
        ``https://api.imgbb.com/1/upload``.
    api_key:
        imgbb API key; uploads are rejected when empty.
    timeout_s:
        Request timeout.
    logger:
        Structured logger instance.
    http:
        ``requests.Session`` to send through; tests inject a fake.
    """

    def __init__(
        self,
        upload_url: str,
        api_key: str,
        timeout_s: float,
        logger: StructuredLogger,
        http: Optional[requests.Session] = None,
    ) -> None:
        super().__init__(logger)
        self._upload_url = upload_url
        self._api_key = api_key
        self._timeout_s = timeout_s
        self._http: requests.Session = http if http is not None else requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def upload(self, path: Path) -> ServiceResult[str]:
        """Upload the image at *path*; ``data`` is the hosted URL."""
        try:
            return ServiceResult[str].ok(self._upload(path))
        except LifeStreamError as exc:
            return ServiceResult[str].fail(exc)

    def _upload(self, path: Path) -> str:
        if not self._api_key:
            raise ValidationError("Image uploads are not configured.")
        if path.suffix.lower() not in _ALLOWED_SUFFIXES:
            raise ValidationError("Please choose a PNG, JPEG, GIF, WEBP or BMP image.")
        try:
            size = path.stat().st_size
        except OSError as exc:
            raise ValidationError(f"Cannot read image file: {path.name}") from exc
        if size > _MAX_UPLOAD_BYTES:
            raise ValidationError("Images must be smaller than 32 MB.")

        try:
            with path.open("rb") as image:
                response = self._http.request(
                    "POST",
                    self._upload_url,
                    params={"key": self._api_key},
                    files={"image": (path.name, image)},
                    timeout=self._timeout_s,
                )
        except requests.RequestException as exc:
            self._logger.warning("Image upload failed: %s", exc)
            raise NetworkError("Could not reach the image host. Please try again.") from exc

        if response.status_code >= 400:
            self._logger.warning("Image host returned %s", response.status_code)
            raise ServerError("The image host rejected the upload.", response.status_code)

        try:
            body: Any = response.json()
        except ValueError as exc:
            raise ServerError("The image host returned an unreadable response.") from exc

        url = body.get("data", {}).get("url") if isinstance(body, dict) else None
        if not url:
            raise ServerError("The image host did not return an image URL.")
        self._logger.info("Image uploaded: %s", path.name)
        return str(url)
