# core/capabilities.py
"""
Role resolver.

Turns the authenticated actor into a capability set once per request.
Every mutating service takes the resolved ``Capabilities`` as an explicit
argument instead of re-deriving role booleans inline. Nothing here is
cached across requests: a revoked manager grant or a changed role claim
takes effect on the very next call.
"""
from dataclasses import dataclass
import logging

from core.constants import ROLE_ADMIN
from core.errors import NotGigOwner, NotVenueManager, Unauthenticated
from gigs.models import GigInvitation
from venues.models import NetworkMembership, VenueManager

logger = logging.getLogger("gigboard.auth")


@dataclass(frozen=True)
class Capabilities:
    user: object
    is_admin: bool
    venue_manager_of: frozenset

    @property
    def actor_id(self) -> int:
        return self.user.id

    @property
    def verified_email(self) -> str:
        # Email comes from the signed auth token, so it is the verified identity
        return (self.user.email or "").strip()

    # ─────────────────────────────────────────────────────────────
    # Checks
    # ─────────────────────────────────────────────────────────────

    def is_owner_of(self, gig) -> bool:
        return gig is not None and gig.owner_id == self.user.id

    def can_manage_gig(self, gig) -> bool:
        return self.is_admin or self.is_owner_of(gig)

    def manages_venue(self, venue_id) -> bool:
        return self.is_admin or venue_id in self.venue_manager_of

    def is_network_member(self, venue_id) -> bool:
        return NetworkMembership.objects.filter(
            venue_id=venue_id,
            musician_id=self.user.id,
        ).exists()

    def is_invited_for(self, gig, instrument: str) -> bool:
        return GigInvitation.objects.filter(
            gig=gig,
            instrument=instrument,
            musician_id=self.user.id,
        ).exists()

    # ─────────────────────────────────────────────────────────────
    # Guards (raise instead of returning False)
    # ─────────────────────────────────────────────────────────────

    def require_gig_owner(self, gig) -> None:
        if not self.can_manage_gig(gig):
            logger.warning(f"Gig owner check failed: gig={gig.id}, actor={self.user.id}")
            raise NotGigOwner()

    def require_venue_manager(self, venue_id) -> None:
        if not self.manages_venue(venue_id):
            logger.warning(f"Venue manager check failed: venue={venue_id}, actor={self.user.id}")
            raise NotVenueManager()


def resolve(user) -> Capabilities:
    """
    Resolve the capability set for an actor.

    Raises:
        Unauthenticated: If there is no authenticated actor.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        raise Unauthenticated()

    is_admin = bool(getattr(user, "is_superuser", False)) or getattr(user, "role", None) == ROLE_ADMIN

    managed = frozenset(
        VenueManager.objects.filter(user=user).values_list("venue_id", flat=True)
    )

    return Capabilities(user=user, is_admin=is_admin, venue_manager_of=managed)
