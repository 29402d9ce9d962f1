# venues/services.py
"""
Manual network management: venue rosters for venue managers, and each
musician's own roster.

Invitation acceptance writes through the same NetworkRegistry, so a manual
add racing an acceptance resolves to a single membership.
"""
import logging

from core.errors import Forbidden, MusicianNotFound, ValidationError, VenueNotFound
from users.models import Musician

from .models import Venue
from .network import NetworkRegistry, PersonalNetwork

logger = logging.getLogger("gigboard.venues")


def get_venue(venue_id) -> Venue:
    venue = Venue.objects.filter(pk=venue_id).first()
    if venue is None:
        raise VenueNotFound()
    return venue


def is_manager(caps, venue_id) -> bool:
    get_venue(venue_id)
    return caps.manages_venue(venue_id)


def list_network(caps, venue_id):
    get_venue(venue_id)
    caps.require_venue_manager(venue_id)
    return NetworkRegistry.list_for(venue_id)


def add_to_network(caps, venue_id, musician_id):
    """
    Returns (membership, created). Adding someone already in the network is
    a no-op reported through created=False.
    """
    get_venue(venue_id)
    caps.require_venue_manager(venue_id)

    if not Musician.objects.filter(user_id=musician_id).exists():
        raise MusicianNotFound()

    return NetworkRegistry.add(venue_id, musician_id, added_by_id=caps.actor_id)


def remove_from_network(caps, venue_id, musician_id) -> bool:
    """
    Either side may end the association: a manager of the venue, or the
    musician removing themselves.
    """
    get_venue(venue_id)
    if str(musician_id) != str(caps.actor_id) and not caps.manages_venue(venue_id):
        raise Forbidden("Only venue managers or the musician can remove a network member")

    return NetworkRegistry.remove(venue_id, musician_id)


# ─────────────────────────────────────────────────────────────
# Personal network (musician-scoped)
# ─────────────────────────────────────────────────────────────

SEARCH_LIMIT = 10


def list_my_network(caps):
    return PersonalNetwork.list_for(caps.actor_id)


def add_to_my_network(caps, musician_id):
    """
    Returns (connection, created). Adding someone already in the network is
    a no-op reported through created=False.
    """
    if str(musician_id) == str(caps.actor_id):
        raise ValidationError("You cannot add yourself to your network")
    if not Musician.objects.filter(user_id=musician_id).exists():
        raise MusicianNotFound()

    return PersonalNetwork.add(caps.actor_id, musician_id)


def remove_from_my_network(caps, musician_id) -> bool:
    return PersonalNetwork.remove(caps.actor_id, musician_id)


def search_musicians(caps, query: str):
    """
    Find musicians to add. A query containing "@" matches on email,
    anything else must match every word of the name. The actor and people
    already in their network are left out.
    """
    query = (query or "").strip().lower()
    if not query:
        return []

    qs = (
        Musician.objects
        .exclude(user_id=caps.actor_id)
        .exclude(user_id__in=PersonalNetwork.member_ids(caps.actor_id))
    )
    if "@" in query:
        qs = qs.filter(email__icontains=query)
    else:
        for part in query.split():
            qs = qs.filter(name__icontains=part)

    return list(qs.order_by("name", "id")[:SEARCH_LIMIT])


def my_venue_networks(caps):
    """Venues whose roster includes the actor."""
    return NetworkRegistry.venues_for(caps.actor_id)
