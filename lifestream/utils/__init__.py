"""Shared utilities for the LifeStream client.

Convenience re-exports so consumers can import directly from
``lifestream.utils``.
"""

from lifestream.utils.audit import AuditEvent, log_audit_event
from lifestream.utils.task_scope import TaskHandle, TaskScope

__all__ = [
    "AuditEvent",
    "TaskHandle",
    "TaskScope",
    "log_audit_event",
]
