# venues/network.py
"""
Network Membership Registry.

Pure data contracts over NetworkMembership (a venue's roster) and
MusicianConnection (a musician's own roster). No business rules of their
own; permission checks live in the callers.
"""
import logging

from core.store import insert_if_absent
from .models import MusicianConnection, NetworkMembership

logger = logging.getLogger("gigboard.venues")


class NetworkRegistry:
    """Venue-scoped "who knows whom"."""

    @staticmethod
    def exists(venue_id, musician_id) -> bool:
        return NetworkMembership.objects.filter(
            venue_id=venue_id,
            musician_id=musician_id,
        ).exists()

    @staticmethod
    def add(venue_id, musician_id, added_by_id=None):
        """
        Idempotent add. Returns (membership, created); adding an existing
        pair is a no-op, never an error.
        """
        membership, created = insert_if_absent(
            NetworkMembership,
            defaults={"added_by_id": added_by_id},
            venue_id=venue_id,
            musician_id=musician_id,
        )
        if created:
            logger.info(f"Network membership created: venue={venue_id}, musician={musician_id}")
        return membership, created

    @staticmethod
    def remove(venue_id, musician_id) -> bool:
        deleted, _ = NetworkMembership.objects.filter(
            venue_id=venue_id,
            musician_id=musician_id,
        ).delete()
        if deleted:
            logger.info(f"Network membership removed: venue={venue_id}, musician={musician_id}")
        return bool(deleted)

    @staticmethod
    def list_for(venue_id):
        return (
            NetworkMembership.objects
            .filter(venue_id=venue_id)
            .select_related("musician__musician")
            .order_by("-created_at")
        )

    @staticmethod
    def venues_for(musician_id):
        """The musician-scoped view: venues whose roster includes this musician."""
        return (
            NetworkMembership.objects
            .filter(musician_id=musician_id)
            .select_related("venue")
            .order_by("-created_at")
        )


class PersonalNetwork:
    """Musician-scoped "who knows whom": the people a musician keeps on hand."""

    @staticmethod
    def exists(owner_id, member_id) -> bool:
        return MusicianConnection.objects.filter(owner_id=owner_id, member_id=member_id).exists()

    @staticmethod
    def add(owner_id, member_id):
        connection, created = insert_if_absent(
            MusicianConnection,
            owner_id=owner_id,
            member_id=member_id,
        )
        if created:
            logger.info(f"Musician connection created: owner={owner_id}, member={member_id}")
        return connection, created

    @staticmethod
    def remove(owner_id, member_id) -> bool:
        deleted, _ = MusicianConnection.objects.filter(owner_id=owner_id, member_id=member_id).delete()
        if deleted:
            logger.info(f"Musician connection removed: owner={owner_id}, member={member_id}")
        return bool(deleted)

    @staticmethod
    def list_for(owner_id):
        return (
            MusicianConnection.objects
            .filter(owner_id=owner_id)
            .select_related("member__musician")
            .order_by("-created_at")
        )

    @staticmethod
    def member_ids(owner_id):
        return MusicianConnection.objects.filter(owner_id=owner_id).values_list("member_id", flat=True)
