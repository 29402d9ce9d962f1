# core/tests/test_capabilities.py
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.test import TestCase

from core.capabilities import resolve
from core.errors import NotGigOwner, NotVenueManager, Unauthenticated
from gigs.models import Gig, GigInvitation
from venues.models import NetworkMembership, Venue, VenueManager

User = get_user_model()


class ResolveCapabilitiesTest(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(username="owner", password="pass123")
        self.other = User.objects.create_user(username="other", password="pass123")
        self.venue = Venue.objects.create(name="Blue Note", created_by=self.owner)
        self.gig = Gig.objects.create(owner=self.owner, title="Friday Jazz")

    def test_anonymous_actor_is_rejected(self):
        with self.assertRaises(Unauthenticated):
            resolve(AnonymousUser())
        with self.assertRaises(Unauthenticated):
            resolve(None)

    def test_owner_and_non_owner(self):
        caps = resolve(self.owner)
        self.assertTrue(caps.is_owner_of(self.gig))
        self.assertTrue(caps.can_manage_gig(self.gig))
        caps.require_gig_owner(self.gig)

        other_caps = resolve(self.other)
        self.assertFalse(other_caps.is_owner_of(self.gig))
        with self.assertRaises(NotGigOwner):
            other_caps.require_gig_owner(self.gig)

    def test_admin_role_claim_grants_everything(self):
        self.other.role = "admin"
        self.other.save()

        caps = resolve(self.other)
        self.assertTrue(caps.is_admin)
        self.assertTrue(caps.can_manage_gig(self.gig))
        self.assertTrue(caps.manages_venue(self.venue.id))

    def test_superuser_is_admin(self):
        root = User.objects.create_superuser(username="root", password="pass123", email="root@x.com")
        self.assertTrue(resolve(root).is_admin)

    def test_venue_manager_set(self):
        VenueManager.objects.create(venue=self.venue, user=self.other)
        caps = resolve(self.other)
        self.assertEqual(caps.venue_manager_of, frozenset({self.venue.id}))
        caps.require_venue_manager(self.venue.id)

        with self.assertRaises(NotVenueManager):
            resolve(self.owner).require_venue_manager(self.venue.id)

    def test_revoked_grant_applies_on_next_resolve(self):
        grant = VenueManager.objects.create(venue=self.venue, user=self.other)
        self.assertTrue(resolve(self.other).manages_venue(self.venue.id))

        grant.delete()
        self.assertFalse(resolve(self.other).manages_venue(self.venue.id))

    def test_network_and_gig_invitation_lookups(self):
        caps = resolve(self.other)
        self.assertFalse(caps.is_network_member(self.venue.id))
        self.assertFalse(caps.is_invited_for(self.gig, "Trumpet"))

        NetworkMembership.objects.create(venue=self.venue, musician=self.other)
        GigInvitation.objects.create(gig=self.gig, instrument="Trumpet", musician=self.other)

        self.assertTrue(caps.is_network_member(self.venue.id))
        self.assertTrue(caps.is_invited_for(self.gig, "Trumpet"))
        self.assertFalse(caps.is_invited_for(self.gig, "Drums"))

    def test_verified_email_is_stripped(self):
        self.other.email = "  Other@Example.com "
        self.assertEqual(resolve(self.other).verified_email, "Other@Example.com")
