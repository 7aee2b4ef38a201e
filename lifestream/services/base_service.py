"""
Base Service Class.

Minimal base class standardizing the logger pattern for all services.
Services extend this and add their own repository dependencies via __init__.
"""

from __future__ import annotations

from typing import Any

from lifestream.errors import LifeStreamError
from lifestream.logger import StructuredLogger
from lifestream.models.service_models import ServiceResult


class BaseService:
    """Base class for all service classes. Provides a logger."""

    def __init__(self, logger: StructuredLogger) -> None:
        self._logger: StructuredLogger = logger

    def _failure(self, exc: LifeStreamError, operation: str) -> ServiceResult[Any]:
        """Log *exc* and wrap it in a failed ``ServiceResult``."""
        self._logger.warning(
            "%s failed (%s): %s", operation, exc.kind, exc.message,
            extra={"operation": operation, "status_code": exc.status_code},
        )
        return ServiceResult.fail(exc)
