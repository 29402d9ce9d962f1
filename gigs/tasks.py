# gigs/tasks.py
import logging

from celery import shared_task

from .models import Application
from .emails import send_application_email, send_confirmation_email

logger = logging.getLogger("gigboard.gigs")


def _load_application(application_id: int):
    return (
        Application.objects
        .select_related("gig__owner", "slot", "applicant")
        .filter(id=application_id)
        .first()
    )


@shared_task
def send_application_email_task(application_id: int):
    """
    Async wrapper for telling the gig poster about a new application.
    """
    application = _load_application(application_id)
    if application is None:
        return "application_not_found"

    try:
        send_application_email(application)
    except Exception as e:
        # Notification is best-effort; the application stands
        logger.warning(f"Failed to send application email for application {application_id}: {e}")
        return "failed"
    return "sent"


@shared_task
def send_confirmation_email_task(application_id: int):
    """
    Async wrapper for the acceptance confirmation sent to the musician.
    """
    application = _load_application(application_id)
    if application is None:
        return "application_not_found"

    if application.status != Application.STATUS_ACCEPTED:
        return "not_accepted"

    try:
        send_confirmation_email(application)
    except Exception as e:
        # Never reverses the acceptance
        logger.warning(f"Failed to send confirmation email for application {application_id}: {e}")
        return "failed"
    return "sent"
