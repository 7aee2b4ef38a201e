"""
Donation Request Lifecycle Rules.

Pure functions that decide who may move a donation request where.
Every check runs before any network call and raises a taxonomy error;
``DonationRequestService`` converts those into failed results.

Transitions::

    pending    -> inProgress | canceled
    inProgress -> completed  | canceled
    completed, canceled: terminal

Edit-screen permissions:
    - owner: any listed transition except ``completed`` (owners use the
      confirmed *complete* action instead)
    - volunteer (not owner): ``pending`` <-> ``inProgress`` only, and
      only the status and donor fields
    - admin: every listed transition and every field
"""

from __future__ import annotations

from typing import Optional

from lifestream.errors import AuthorizationError, InvalidTransitionError, ValidationError
from lifestream.models.donation_request import (
    TRIAGE_FIELDS,
    DonationRequest,
    DonationRequestUpdate,
)
from lifestream.models.enums import RequestStatus, Role
from lifestream.models.user import Identity

ALLOWED_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({RequestStatus.IN_PROGRESS, RequestStatus.CANCELED}),
    RequestStatus.IN_PROGRESS: frozenset({RequestStatus.COMPLETED, RequestStatus.CANCELED}),
    RequestStatus.COMPLETED: frozenset(),
    RequestStatus.CANCELED: frozenset(),
}

_VOLUNTEER_STATUSES: frozenset[RequestStatus] = frozenset(
    {RequestStatus.PENDING, RequestStatus.IN_PROGRESS}
)

_STATUS_ORDER: tuple[RequestStatus, ...] = tuple(RequestStatus)


def can_transition(current: RequestStatus, target: RequestStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def is_privileged(actor: Identity) -> bool:
    return actor.role in (Role.VOLUNTEER, Role.ADMIN)


def allowed_next_statuses(
    request: DonationRequest,
    actor: Identity,
) -> tuple[RequestStatus, ...]:
    """Statuses the edit screen offers *actor*, current status first.

    An empty tuple means the actor may not edit the request at all.
    """
    owner = request.is_owned_by(actor)
    if not owner and not is_privileged(actor):
        return ()

    targets = set(ALLOWED_TRANSITIONS[request.status])
    if actor.role is not Role.ADMIN:
        targets.discard(RequestStatus.COMPLETED)
        if not owner:
            targets &= _VOLUNTEER_STATUSES
    ordered = tuple(s for s in _STATUS_ORDER if s in targets)
    return (request.status,) + ordered


def check_edit(
    actor: Identity,
    request: DonationRequest,
    update: DonationRequestUpdate,
    placeholder: str,
) -> None:
    """Validate an edit submitted by *actor*.

    Raises:
        AuthorizationError: Caller may not edit, may not set the target
            status, or touched fields outside their permission.
        InvalidTransitionError: Target status is not reachable from the
            current one (every move out of a terminal state included).
        ValidationError: ``inProgress``/``completed`` without a donor.
    """
    owner = request.is_owned_by(actor)
    admin = actor.role is Role.ADMIN
    if not owner and not is_privileged(actor):
        raise AuthorizationError("Only the requester, a volunteer or an admin can edit this request.")

    changed = update.changed_fields(request)

    if not owner and not admin:
        outside = changed - TRIAGE_FIELDS
        if outside:
            raise AuthorizationError(
                "Volunteers can only change the status and donor of a request."
            )

    target: Optional[RequestStatus] = update.status
    if target is None or target is request.status:
        return

    if request.status.is_terminal:
        raise InvalidTransitionError(
            f"A {request.status.label.lower()} request cannot be changed."
        )
    if target is RequestStatus.COMPLETED and not admin:
        raise AuthorizationError("Only an admin can mark a request as completed here.")
    if not owner and not admin and target not in _VOLUNTEER_STATUSES:
        raise AuthorizationError("Volunteers can only move a request between Pending and In Progress.")
    if not can_transition(request.status, target):
        raise InvalidTransitionError(
            f"Cannot move a request from {request.status.label} to {target.label}."
        )

    if target in (RequestStatus.IN_PROGRESS, RequestStatus.COMPLETED):
        donor_name = update.donor_name if update.donor_name is not None else request.donor_name
        donor_email = update.donor_email if update.donor_email is not None else request.donor_email
        if not donor_email or not donor_name or donor_name == placeholder:
            raise ValidationError(f"Select a donor before setting the status to {target.label}.")


def check_claim(actor: Identity, request: DonationRequest) -> None:
    """A signed-in non-owner may claim a pending request."""
    if request.is_owned_by(actor):
        raise AuthorizationError("You cannot donate to your own request.")
    if request.status is not RequestStatus.PENDING:
        raise InvalidTransitionError(
            f"This request is already {request.status.label.lower()}."
        )


def check_complete(actor: Identity, request: DonationRequest, placeholder: str) -> None:
    """The owner (or an admin) completes an in-progress request."""
    if not request.is_owned_by(actor) and actor.role is not Role.ADMIN:
        raise AuthorizationError("Only the requester can mark this request as completed.")
    if request.status is not RequestStatus.IN_PROGRESS:
        raise InvalidTransitionError(
            f"Only an in-progress request can be completed (this one is {request.status.label})."
        )
    if not request.has_donor(placeholder):
        raise ValidationError("This request has no donor yet.")


def check_cancel(actor: Identity, request: DonationRequest) -> None:
    """The owner (or an admin) deletes a request."""
    if not request.is_owned_by(actor) and actor.role is not Role.ADMIN:
        raise AuthorizationError("Only the requester or an admin can cancel this request.")
