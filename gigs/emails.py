# gigs/emails.py
from django.conf import settings

from core.messaging import send_email


def build_gig_url(gig):
    """
    Absolute URL of the gig page on the frontend.
    """
    base = getattr(settings, "FRONTEND_URL", "").rstrip("/")
    return f"{base}/gigs/{gig.id}"


def contact_email(user):
    """
    Prefer the address on the musician profile, fall back to the login email.
    """
    musician = getattr(user, "musician", None)
    if musician is not None and musician.email:
        return musician.email
    return getattr(user, "email", "") or ""


def display_name(user):
    musician = getattr(user, "musician", None)
    if musician is not None and musician.name:
        return musician.name
    return user.get_full_name() or user.username


def send_application_email(application):
    """
    Tell the gig poster that someone applied for a slot.
    """
    gig = application.gig
    owner = gig.owner
    to = contact_email(owner)

    if not to:
        # No email set, nothing to send
        return 0

    subject = f"New application for {gig.title}"
    message = (
        f"Hi {display_name(owner)},\n\n"
        f"{display_name(application.applicant)} applied to play "
        f"{application.instrument} at:\n"
        f"  {gig.title}\n"
        f"  Location: {gig.location or 'TBC'}\n"
        f"  Starts: {gig.start_time or 'TBC'}\n\n"
        f"Review applications here:\n"
        f"{build_gig_url(gig)}\n\n"
        f"Gigboard"
    )

    return send_email(to, subject, message)


def send_confirmation_email(application):
    """
    Confirm the slot to the musician whose application was accepted.
    """
    gig = application.gig
    musician = application.applicant
    to = contact_email(musician)

    if not to:
        return 0

    slot = application.slot
    payment = f"  Payment: {slot.payment}\n" if slot.is_paid else ""

    subject = f"You're confirmed for: {gig.title}"
    message = (
        f"Hi {display_name(musician)},\n\n"
        f"{display_name(gig.owner)} confirmed you on {application.instrument} for:\n"
        f"  {gig.title}\n"
        f"  Location: {gig.location or 'TBC'}\n"
        f"  Starts: {gig.start_time or 'TBC'}\n"
        f"  Ends: {gig.end_time or 'TBC'}\n"
        f"{payment}\n"
        f"Gig details:\n"
        f"{build_gig_url(gig)}\n\n"
        f"See you there,\n"
        f"Gigboard"
    )

    return send_email(to, subject, message)
