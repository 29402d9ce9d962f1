# venues/invitations.py
"""
Invitation protocol.

A venue manager creates a short code; whoever redeems it joins the venue's
network (VenueInvitation) or becomes a manager of the venue
(VenueManagerInvitation).

Acceptance is a sequence of independently committed steps:

    1. validate   - code exists, not expired, still pending
    2. profile    - ensure the accepting musician has a profile
    3. claim      - conditional write pending -> accepted (single use)
    4. register   - idempotent insert of the membership / role grant
    5. confirm    - re-read the membership (diagnostic only)

If step 4 fails for any reason other than "already there", step 3 is
undone by ``release_invitation`` so the code stays usable.
"""
from dataclasses import dataclass, field
from datetime import timedelta
import logging

from django.conf import settings
from django.db import DatabaseError
from django.utils import timezone

from core.errors import (
    AlreadyAccepted,
    InternalError,
    InvitationExpired,
    InvitationNotFound,
    ValidationError,
    WrongAccount,
)
from core.store import insert_if_absent
from users.services import ensure_musician, provided

from .codes import generate_unique_code, normalize_code
from .models import VenueInvitation, VenueManager, VenueManagerInvitation
from .network import NetworkRegistry
from .services import get_venue

logger = logging.getLogger("gigboard.venues")


@dataclass(frozen=True)
class AcceptResult:
    venue_id: int
    created: bool
    already_existed: bool = False
    musician_created: bool = False
    warnings: tuple = field(default_factory=tuple)


def _ttl(ttl_days) -> timedelta:
    days = ttl_days if ttl_days is not None else getattr(settings, "INVITATION_TTL_DAYS", 30)
    if days <= 0:
        raise ValidationError("Expiry must be at least one day")
    return timedelta(days=days)


def _validate_pending(invitation, now=None) -> None:
    if invitation.is_expired(now):
        raise InvitationExpired()
    if invitation.status != invitation.STATUS_PENDING:
        raise AlreadyAccepted()


# ─────────────────────────────────────────────────────────────
# Claim / release (steps 3 and its compensation)
# ─────────────────────────────────────────────────────────────

def claim_invitation(invitation, user, extra_updates=None) -> None:
    """
    Atomically move a pending invitation to accepted.

    A second concurrent claim matches zero rows and fails with
    AlreadyAccepted, so one code can never produce two acceptances.
    """
    now = timezone.now()
    updates = {
        "status": invitation.STATUS_ACCEPTED,
        "accepted_by": user,
        "accepted_at": now,
        **(extra_updates or {}),
    }
    claimed = type(invitation).objects.filter(
        pk=invitation.pk,
        status=invitation.STATUS_PENDING,
    ).update(**updates)

    if not claimed:
        logger.warning(f"Invitation already claimed: code={invitation.invitation_code}, actor={user.id}")
        raise AlreadyAccepted()

    for key, value in updates.items():
        setattr(invitation, key, value)

    logger.info(f"Invitation claimed: code={invitation.invitation_code}, actor={user.id}")


def release_invitation(invitation, user) -> bool:
    """
    Compensating action for ``claim_invitation``: put the invitation back to
    pending so it can be redeemed again. Only undoes this actor's claim.
    """
    released = type(invitation).objects.filter(
        pk=invitation.pk,
        status=invitation.STATUS_ACCEPTED,
        accepted_by=user,
    ).update(status=invitation.STATUS_PENDING, accepted_by=None, accepted_at=None)

    if released:
        invitation.status = invitation.STATUS_PENDING
        invitation.accepted_by = None
        invitation.accepted_at = None
        logger.warning(f"Invitation released after failed registration: code={invitation.invitation_code}")
    else:
        logger.error(f"Invitation release found nothing to undo: code={invitation.invitation_code}")
    return bool(released)


# ─────────────────────────────────────────────────────────────
# Venue network invitations
# ─────────────────────────────────────────────────────────────

PREFILL_FIELDS = {
    "email": "musician_email",
    "first_name": "musician_first_name",
    "last_name": "musician_last_name",
    "phone": "musician_phone",
    "instruments": "musician_instruments",
}


def invitation_prefill(invitation: VenueInvitation) -> dict:
    return {key: getattr(invitation, column) for key, column in PREFILL_FIELDS.items()}


def create_invitation(caps, venue_id, prefill=None, ttl_days=None) -> VenueInvitation:
    """
    Raises:
        VenueNotFound, NotVenueManager, ValidationError, CodeGenerationFailed
    """
    venue = get_venue(venue_id)
    caps.require_venue_manager(venue.id)

    prefill = provided(prefill)
    invitation = VenueInvitation.objects.create(
        venue=venue,
        invitation_code=generate_unique_code(VenueInvitation),
        created_by=caps.user,
        expires_at=timezone.now() + _ttl(ttl_days),
        **{PREFILL_FIELDS[key]: value for key, value in prefill.items()},
    )
    logger.info(
        f"Venue invitation created: venue={venue.id}, code={invitation.invitation_code}, "
        f"actor={caps.actor_id}"
    )
    return invitation


def list_invitations(caps, venue_id):
    get_venue(venue_id)
    caps.require_venue_manager(venue_id)
    return VenueInvitation.objects.filter(venue_id=venue_id).order_by("-created_at")


def get_invitation(code) -> VenueInvitation:
    invitation = (
        VenueInvitation.objects
        .select_related("venue")
        .filter(invitation_code=normalize_code(code))
        .first()
    )
    if invitation is None:
        raise InvitationNotFound()
    return invitation


def accept_invitation(caps, code, overrides=None) -> AcceptResult:
    """
    Redeem a venue invitation for the acting musician.

    Returns an AcceptResult whose ``created`` flag tells whether a new
    network membership was made (False when the musician was already in the
    network, e.g. added manually by a manager).

    Raises:
        InvitationNotFound, InvitationExpired, AlreadyAccepted,
        InternalError (after releasing the invitation)
    """
    # 1. validate
    invitation = get_invitation(code)
    _validate_pending(invitation)

    overrides = provided(overrides)
    prefill = invitation_prefill(invitation)

    # 2. profile
    try:
        _, musician_created = ensure_musician(caps.user, overrides=overrides, fallback=prefill)
    except DatabaseError as e:
        logger.error(f"Musician profile step failed: code={invitation.invitation_code}, error={e}")
        raise InternalError("Could not save your musician profile") from e

    # 3. claim, keeping what the musician confirmed for audit
    audit = {
        PREFILL_FIELDS[key]: overrides.get(key, prefill.get(key))
        for key in PREFILL_FIELDS
    }
    audit["musician_instruments"] = audit["musician_instruments"] or []
    claim_invitation(invitation, caps.user, extra_updates=audit)

    # 4. register
    try:
        _, created = NetworkRegistry.add(
            invitation.venue_id,
            caps.actor_id,
            added_by_id=invitation.created_by_id,
        )
    except Exception as e:
        release_invitation(invitation, caps.user)
        logger.error(
            f"Network registration failed, invitation released: "
            f"code={invitation.invitation_code}, actor={caps.actor_id}, error={e}"
        )
        raise InternalError("Could not add you to the venue network. Please try again.") from e

    # 5. confirm
    warnings = ()
    if not NetworkRegistry.exists(invitation.venue_id, caps.actor_id):
        logger.warning(
            f"Network membership not visible after insert: venue={invitation.venue_id}, "
            f"musician={caps.actor_id}"
        )
        warnings = ("membership_not_confirmed",)

    logger.info(
        f"Venue invitation accepted: code={invitation.invitation_code}, venue={invitation.venue_id}, "
        f"actor={caps.actor_id}, membership_created={created}"
    )
    return AcceptResult(
        venue_id=invitation.venue_id,
        created=created,
        already_existed=not created,
        musician_created=musician_created,
        warnings=warnings,
    )


# ─────────────────────────────────────────────────────────────
# Venue manager invitations
# ─────────────────────────────────────────────────────────────

def create_manager_invitation(caps, venue_id, email: str, ttl_days=None) -> VenueManagerInvitation:
    venue = get_venue(venue_id)
    caps.require_venue_manager(venue.id)

    email = (email or "").strip()
    if not email:
        raise ValidationError("Email is required")

    invitation = VenueManagerInvitation.objects.create(
        venue=venue,
        email=email,
        invitation_code=generate_unique_code(VenueManagerInvitation),
        invited_by=caps.user,
        expires_at=timezone.now() + _ttl(ttl_days),
    )
    logger.info(
        f"Manager invitation created: venue={venue.id}, code={invitation.invitation_code}, "
        f"actor={caps.actor_id}"
    )
    return invitation


def list_manager_invitations(caps, venue_id):
    get_venue(venue_id)
    caps.require_venue_manager(venue_id)
    return VenueManagerInvitation.objects.filter(venue_id=venue_id).order_by("-created_at")


def get_manager_invitation(code) -> VenueManagerInvitation:
    invitation = (
        VenueManagerInvitation.objects
        .select_related("venue")
        .filter(invitation_code=normalize_code(code))
        .first()
    )
    if invitation is None:
        raise InvitationNotFound()
    return invitation


def accept_manager_invitation(caps, code) -> AcceptResult:
    """
    Redeem a manager invitation. The acting account's verified email must
    match the invited address (case-insensitive).

    Raises:
        InvitationNotFound, WrongAccount, AlreadyAccepted, InvitationExpired,
        InternalError (after releasing the invitation)
    """
    invitation = get_manager_invitation(code)

    if invitation.email.strip().lower() != caps.verified_email.lower():
        logger.warning(f"Manager invitation email mismatch: code={invitation.invitation_code}, actor={caps.actor_id}")
        raise WrongAccount()

    _validate_pending(invitation)
    claim_invitation(invitation, caps.user)

    try:
        _, created = insert_if_absent(
            VenueManager,
            venue_id=invitation.venue_id,
            user_id=caps.actor_id,
        )
    except Exception as e:
        release_invitation(invitation, caps.user)
        logger.error(
            f"Manager grant failed, invitation released: "
            f"code={invitation.invitation_code}, actor={caps.actor_id}, error={e}"
        )
        raise InternalError("Could not make you a manager of this venue. Please try again.") from e

    logger.info(
        f"Manager invitation accepted: code={invitation.invitation_code}, venue={invitation.venue_id}, "
        f"actor={caps.actor_id}, role_granted={created}"
    )
    return AcceptResult(
        venue_id=invitation.venue_id,
        created=created,
        already_existed=not created,
    )
