"""
Audit trail for client-initiated state changes.

Creating, claiming, editing or cancelling a donation request, blocking a
user, changing a role, publishing a blog post and confirming a donation
each emit exactly one ``AUDIT:`` log line.  The payload is an
``AuditEvent`` validated by Pydantic, so an unknown action or a nested
detail value is rejected where it is raised rather than in log tooling.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional, Union

from pydantic import BaseModel, Field

from lifestream.logger import StructuredLogger

__all__ = ["AuditAction", "AuditEvent", "log_audit_event"]

DetailValue = Union[str, int, float, bool, None]


class AuditAction(StrEnum):
    CREATE = "CREATE"
    CLAIM = "CLAIM"
    UPDATE = "UPDATE"
    UPDATE_STATUS = "UPDATE_STATUS"
    UPDATE_ROLE = "UPDATE_ROLE"
    DELETE = "DELETE"
    DONATE = "DONATE"


class AuditEvent(BaseModel):
    """One entry of the audit trail; ``details`` holds flat scalars only."""

    timestamp: str
    action: AuditAction
    entity_type: str
    entity_id: str
    user_id: str
    details: dict[str, DetailValue] = Field(default_factory=dict)

    def to_log_line(self) -> str:
        return "AUDIT: " + json.dumps(self.model_dump(mode="json"), ensure_ascii=False)


def log_audit_event(
    logger: StructuredLogger,
    action: Union[AuditAction, str],
    entity_type: str,
    entity_id: str,
    user_id: str,
    details: Optional[dict[str, DetailValue]] = None,
) -> AuditEvent:
    """Validate, log and return an audit event.

    *entity_type* is the record kind (``"DonationRequest"``, ``"User"``,
    ``"BlogPost"``, ``"Payment"``); *user_id* is the acting user, not the
    affected one.  Raises ``pydantic.ValidationError`` for an unknown
    *action*.
    """
    event = AuditEvent(
        timestamp=datetime.now(timezone.utc).isoformat(),
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        user_id=user_id,
        details=details or {},
    )
    logger.info("%s", event.to_log_line())
    return event
