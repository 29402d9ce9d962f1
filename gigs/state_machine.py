# gigs/state_machine.py
"""
Application State Machine.

    pending → accepted
           └→ rejected

Both outcomes are terminal. Every transition is a conditional write on the
current status (compare-and-swap), so two requests racing on the same row
cannot both win.
"""
from typing import Tuple
import logging

from django.utils import timezone

from .models import Application

logger = logging.getLogger('gigboard.gigs')


# Valid state transitions: from_status -> list of allowed to_statuses
VALID_TRANSITIONS = {
    Application.STATUS_PENDING: [Application.STATUS_ACCEPTED, Application.STATUS_REJECTED],
    Application.STATUS_ACCEPTED: [],
    Application.STATUS_REJECTED: [],
}


def can_transition(application: Application, new_status: str) -> Tuple[bool, str]:
    """
    Check if an application can transition to a new status.

    Returns (can_transition: bool, reason: str)
    """
    current_status = application.status

    if new_status not in dict(Application.STATUS_CHOICES):
        return False, f"Invalid status: {new_status}"

    if is_terminal_status(current_status):
        return False, f"Application is already {current_status}"

    allowed = VALID_TRANSITIONS.get(current_status, [])

    if new_status not in allowed:
        return False, f"Cannot transition from '{current_status}' to '{new_status}'"

    return True, ""


def transition(application: Application, new_status: str, actor=None) -> Tuple[bool, str]:
    """
    Attempt to move an application to a new status.

    The write only lands if the row is still in the status we read, so a
    concurrent decision on the same application makes this return False.

    Returns (success: bool, message: str)
    """
    can, reason = can_transition(application, new_status)

    if not can:
        logger.warning(
            f"Invalid application transition attempted: application={application.id}, "
            f"from={application.status}, to={new_status}, actor={getattr(actor, 'id', 'unknown')}. "
            f"Reason: {reason}"
        )
        return False, reason

    old_status = application.status
    now = timezone.now()

    updated = Application.objects.filter(
        pk=application.pk,
        status=old_status,
    ).update(status=new_status, decided_at=now)

    if not updated:
        logger.warning(
            f"Application changed underneath transition: application={application.id}, "
            f"expected={old_status}, to={new_status}, actor={getattr(actor, 'id', 'unknown')}"
        )
        return False, "Application was decided by another request"

    application.status = new_status
    application.decided_at = now

    logger.info(
        f"Application state transition: application={application.id}, "
        f"from={old_status}, to={new_status}, actor={getattr(actor, 'id', 'unknown')}"
    )

    return True, f"Transitioned from '{old_status}' to '{new_status}'"


def reject_pending_siblings(application: Application, actor=None) -> int:
    """
    Close out every other pending application on the same slot.

    Unconditional: applications submitted after the accepted one are
    rejected too.
    """
    rejected = (
        Application.objects
        .filter(slot_id=application.slot_id, status=Application.STATUS_PENDING)
        .exclude(pk=application.pk)
        .update(status=Application.STATUS_REJECTED, decided_at=timezone.now())
    )
    if rejected:
        logger.info(
            f"Rejected {rejected} sibling application(s): slot={application.slot_id}, "
            f"accepted={application.id}, actor={getattr(actor, 'id', 'unknown')}"
        )
    return rejected


def is_terminal_status(status: str) -> bool:
    """
    Check if a status is terminal (no further transitions).
    """
    return status not in VALID_TRANSITIONS or len(VALID_TRANSITIONS[status]) == 0
