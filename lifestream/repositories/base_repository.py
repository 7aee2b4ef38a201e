"""
Base Repository.

Provides shared infrastructure for all repositories:
- ApiClient reference (bearer auth, timeout, error mapping)
- Logger reference
- Helpers that validate the shape of API payloads
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from lifestream.api_client import ApiClient
from lifestream.errors import ServerError
from lifestream.logger import StructuredLogger

M = TypeVar("M", bound=BaseModel)


class BaseRepository:
    """Base class for all repositories. Receives dependencies via __init__."""

    def __init__(self, api: ApiClient, logger: StructuredLogger) -> None:
        self._api = api
        self._logger = logger

    def _parse(self, model: type[M], payload: Any, *, operation_name: str) -> M:
        """Validate a single JSON object into *model*.

        Raises
        ------
        ServerError
            If the payload does not match the model.
        """
        try:
            return model.model_validate(payload)
        except PydanticValidationError as exc:
            self._logger.error("Malformed payload from %s: %s", operation_name, exc)
            raise ServerError(
                "The server returned data in an unexpected format."
            ) from exc

    def _parse_list(self, model: type[M], payload: Any, *, operation_name: str) -> list[M]:
        """Validate a JSON array into a list of *model*.

        Records that fail validation are skipped and logged so one bad
        legacy row does not hide the rest of a table.
        """
        if not isinstance(payload, list):
            self._logger.error(
                "Expected a list from %s, got %s", operation_name, type(payload).__name__,
            )
            raise ServerError("The server returned data in an unexpected format.")

        items: list[M] = []
        for raw in payload:
            try:
                items.append(model.model_validate(raw))
            except (PydanticValidationError, ValueError) as exc:
                self._logger.warning(
                    "Skipping malformed record from %s: %s", operation_name, exc,
                )
        return items

    def _read_number(
        self,
        payload: Any,
        key: str,
        convert: Callable[[Any], Any],
        *,
        operation_name: str,
    ) -> Any:
        """Read ``payload[key]`` as a number, treating a missing value as zero."""
        if not isinstance(payload, dict):
            raise ServerError("The server returned data in an unexpected format.")
        value = payload.get(key) or 0
        try:
            return convert(value)
        except (TypeError, ValueError, ArithmeticError) as exc:
            self._logger.error("Non-numeric %s from %s: %r", key, operation_name, value)
            raise ServerError("The server returned data in an unexpected format.") from exc
