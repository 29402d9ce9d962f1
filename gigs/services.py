"""Gig service - slot application lifecycle.

Services:
- Take the resolved ``Capabilities`` of the actor as an explicit argument
- Validate domain invariants
- Perform orchestration and error mapping
- Return models or raise domain errors

Notifications are dispatched after the state change has committed and can
never fail or undo it.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from core.constants import INSTRUMENTS
from core.errors import (
    ApplicationNotFound,
    ApplicationNotPending,
    DuplicateApplication,
    GigNotFound,
    GigNotOpen,
    MusicianNotFound,
    NotEligible,
    SlotAlreadyFilled,
    SlotNotFound,
    ValidationError,
    VenueNotFound,
)
from venues.models import Venue
from venues.network import NetworkRegistry

from . import state_machine
from .models import Application, Gig, GigInvitation, Slot
from .slots import is_gig_filled, parse_slots
from .tasks import send_application_email_task, send_confirmation_email_task

logger = logging.getLogger("gigboard.gigs")

User = get_user_model()


def _dispatch(task, application_id: int) -> None:
    """Fire-and-forget a notification task; a broker outage is only logged."""
    try:
        task.delay(application_id)
    except Exception as e:
        logger.warning(f"Could not queue {task.name} for application {application_id}: {e}")


# ─────────────────────────────────────────────────────────────
# Gigs
# ─────────────────────────────────────────────────────────────

def get_gig(gig_id) -> Gig:
    gig = Gig.objects.select_related("owner", "venue").filter(pk=gig_id).first()
    if gig is None:
        raise GigNotFound()
    return gig


def create_gig(caps, *, title: str, slots: list, venue_id=None, description: str = "",
               location: str = "", start_time=None, end_time=None) -> Gig:
    """
    Post a gig with its ordered slots.

    Raises:
        InvalidSlot: If any slot definition is invalid.
        VenueNotFound / NotVenueManager: When posting against a venue.
    """
    definitions = parse_slots(slots)

    if start_time and end_time and start_time >= end_time:
        raise ValidationError("Start time must be before end time")

    if venue_id is not None:
        if not Venue.objects.filter(pk=venue_id).exists():
            raise VenueNotFound()
        caps.require_venue_manager(venue_id)

    with transaction.atomic():
        gig = Gig.objects.create(
            owner=caps.user,
            venue_id=venue_id,
            title=title,
            description=description,
            location=location,
            start_time=start_time,
            end_time=end_time,
        )
        Slot.objects.bulk_create([
            Slot(
                gig=gig,
                position=position,
                instruments=list(definition.instruments),
                invite_only=definition.invite_only,
                payment=definition.payment,
            )
            for position, definition in enumerate(definitions)
        ])

    logger.info(f"Gig created: gig={gig.id}, slots={len(definitions)}, owner={caps.actor_id}")
    return gig


def cancel_gig(caps, gig: Gig) -> Gig:
    caps.require_gig_owner(gig)

    if gig.status == Gig.STATUS_CANCELLED:
        return gig

    old_status = gig.status
    gig.status = Gig.STATUS_CANCELLED
    gig.save(update_fields=["status", "updated_at"])
    logger.info(f"Gig cancelled: gig={gig.id}, from={old_status}, actor={caps.actor_id}")
    return gig


def refresh_gig_status(gig: Gig) -> str:
    """
    Recompute open/filled from the slots. Cancelled gigs are left alone.
    """
    if gig.status == Gig.STATUS_CANCELLED:
        return gig.status

    slot_ids = Slot.objects.filter(gig=gig).values_list("id", flat=True)
    accepted_slot_ids = Application.objects.filter(
        gig=gig,
        status=Application.STATUS_ACCEPTED,
    ).values_list("slot_id", flat=True)

    new_status = Gig.STATUS_FILLED if is_gig_filled(slot_ids, accepted_slot_ids) else Gig.STATUS_OPEN
    if new_status != gig.status:
        Gig.objects.filter(pk=gig.pk).exclude(status=Gig.STATUS_CANCELLED).update(status=new_status)
        logger.info(f"Gig status recomputed: gig={gig.id}, from={gig.status}, to={new_status}")
        gig.status = new_status
    return gig.status


# ─────────────────────────────────────────────────────────────
# Applications
# ─────────────────────────────────────────────────────────────

def _check_eligibility(caps, gig: Gig, slot: Slot, instrument: str) -> None:
    if not slot.requires(instrument):
        raise NotEligible(f"This slot does not need {instrument}")

    musician = getattr(caps.user, "musician", None)
    if musician is None:
        raise NotEligible("Please complete your musician profile first")
    if not musician.plays(instrument):
        raise NotEligible(f"You don't play {instrument}. Please update your profile.")

    if slot.invite_only:
        if not caps.is_invited_for(gig, instrument):
            raise NotEligible("This slot is invite-only")
        # Leaving the venue network withdraws standing invitations
        if gig.venue_id is not None and not caps.is_network_member(gig.venue_id):
            raise NotEligible("Invite-only slots at this venue are for its network")


def submit_application(caps, gig: Gig, slot_id, instrument: str) -> Application:
    """
    Claim a slot on a gig.

    Raises:
        SlotNotFound: If the slot is not part of the gig.
        GigNotOpen: If the gig is cancelled.
        NotEligible: Instrument mismatch or missing invitation.
        SlotAlreadyFilled: If the slot already has an accepted application.
        DuplicateApplication: If the applicant already holds an active claim.
    """
    slot = Slot.objects.filter(pk=slot_id, gig=gig).first()
    if slot is None:
        raise SlotNotFound()

    if gig.status == Gig.STATUS_CANCELLED:
        raise GigNotOpen()

    _check_eligibility(caps, gig, slot, instrument)

    try:
        with transaction.atomic():
            # Serialise with accepts on the same slot
            Slot.objects.select_for_update().get(pk=slot.pk)

            if Application.objects.filter(slot=slot, status=Application.STATUS_ACCEPTED).exists():
                raise SlotAlreadyFilled()

            if Gig.objects.filter(pk=gig.pk).values_list("status", flat=True).first() != Gig.STATUS_OPEN:
                raise GigNotOpen()

            if Application.objects.filter(
                slot=slot,
                applicant=caps.user,
                status__in=Application.ACTIVE_STATUSES,
            ).exists():
                raise DuplicateApplication()

            application = Application.objects.create(
                gig=gig,
                slot=slot,
                applicant=caps.user,
                instrument=instrument,
            )
    except IntegrityError:
        # Lost a race against our own earlier request
        raise DuplicateApplication()

    logger.info(
        f"Application submitted: application={application.id}, gig={gig.id}, "
        f"slot={slot.id}, instrument={instrument}, applicant={caps.actor_id}"
    )

    _dispatch(send_application_email_task, application.id)
    return application


def _get_application(application_id) -> Application:
    application = (
        Application.objects
        .select_related("gig", "slot", "applicant")
        .filter(pk=application_id)
        .first()
    )
    if application is None:
        raise ApplicationNotFound()
    return application


def accept_application(caps, application_id) -> Application:
    """
    Accept one application and close out the rest of its slot.

    Any pending application may be accepted; submission order is not a
    ranking. Safe under concurrent accepts on the same slot: exactly one
    wins, the others see SlotAlreadyFilled. Accepts on different slots of
    the same gig queue on the gig row so the filled recompute sees every
    committed acceptance.

    Raises:
        ApplicationNotFound, NotGigOwner, GigNotOpen,
        SlotAlreadyFilled, ApplicationNotPending
    """
    application = _get_application(application_id)
    gig = application.gig
    caps.require_gig_owner(gig)

    if gig.status == Gig.STATUS_CANCELLED:
        raise GigNotOpen()

    try:
        with transaction.atomic():
            # Lock order: gig, then slot
            gig = Gig.objects.select_for_update().get(pk=gig.pk)
            if gig.status == Gig.STATUS_CANCELLED:
                raise GigNotOpen()

            Slot.objects.select_for_update().get(pk=application.slot_id)

            if (
                Application.objects
                .filter(slot_id=application.slot_id, status=Application.STATUS_ACCEPTED)
                .exclude(pk=application.pk)
                .exists()
            ):
                raise SlotAlreadyFilled()

            application.refresh_from_db(fields=["status", "decided_at"])
            ok, reason = state_machine.transition(application, Application.STATUS_ACCEPTED, actor=caps.user)
            if not ok:
                raise ApplicationNotPending(reason)

            state_machine.reject_pending_siblings(application, actor=caps.user)
            refresh_gig_status(gig)
            application.gig = gig
    except IntegrityError:
        logger.warning(
            f"Concurrent accept lost on slot: application={application.id}, slot={application.slot_id}"
        )
        raise SlotAlreadyFilled()

    _dispatch(send_confirmation_email_task, application.id)
    return application


def reject_application(caps, application_id) -> Application:
    """
    Raises:
        ApplicationNotFound, NotGigOwner, ApplicationNotPending
    """
    application = _get_application(application_id)
    caps.require_gig_owner(application.gig)

    ok, reason = state_machine.transition(application, Application.STATUS_REJECTED, actor=caps.user)
    if not ok:
        raise ApplicationNotPending(reason)
    return application


def list_applications(caps, gig: Gig):
    caps.require_gig_owner(gig)
    return (
        Application.objects
        .filter(gig=gig)
        .select_related("applicant", "slot")
        .order_by("slot__position", "submitted_at", "id")
    )


# ─────────────────────────────────────────────────────────────
# Gig invitations (invite-only gating)
# ─────────────────────────────────────────────────────────────

def _validate_invite_target(gig: Gig, musician_id, instrument: str):
    if instrument not in INSTRUMENTS:
        raise ValidationError(f"Unknown instrument: {instrument}")
    if not any(slot.requires(instrument) for slot in gig.slots.all()):
        raise ValidationError(f"This gig has no slot for {instrument}")

    musician = User.objects.filter(pk=musician_id).first()
    if musician is None:
        raise MusicianNotFound()

    if gig.venue_id is not None and not NetworkRegistry.exists(gig.venue_id, musician.id):
        raise NotEligible("Only musicians in the venue network can be invited")
    return musician


def invite_to_gig(caps, gig: Gig, musician_id, instrument: str):
    """
    Grant a musician the right to apply for invite-only slots on this
    instrument. Idempotent; returns (invitation, created).
    """
    caps.require_gig_owner(gig)
    musician = _validate_invite_target(gig, musician_id, instrument)

    try:
        with transaction.atomic():
            invitation, created = GigInvitation.objects.get_or_create(
                gig=gig,
                instrument=instrument,
                musician=musician,
                defaults={"invited_by": caps.user},
            )
    except IntegrityError:
        invitation = GigInvitation.objects.get(gig=gig, instrument=instrument, musician=musician)
        created = False

    if created:
        logger.info(
            f"Gig invitation granted: gig={gig.id}, instrument={instrument}, "
            f"musician={musician.id}, actor={caps.actor_id}"
        )
    return invitation, created


def revoke_gig_invitation(caps, gig: Gig, musician_id, instrument: str) -> bool:
    caps.require_gig_owner(gig)
    deleted, _ = GigInvitation.objects.filter(
        gig=gig,
        instrument=instrument,
        musician_id=musician_id,
    ).delete()
    if deleted:
        logger.info(
            f"Gig invitation revoked: gig={gig.id}, instrument={instrument}, "
            f"musician={musician_id}, actor={caps.actor_id}"
        )
    return bool(deleted)
