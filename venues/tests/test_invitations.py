# venues/tests/test_invitations.py
from datetime import timedelta
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone

from core.capabilities import resolve
from core.errors import (
    AlreadyAccepted,
    InternalError,
    InvitationExpired,
    InvitationNotFound,
    NotVenueManager,
    ValidationError,
    WrongAccount,
)
from users.models import Musician
from venues import invitations
from venues.models import NetworkMembership, Venue, VenueInvitation, VenueManager, VenueManagerInvitation
from venues.network import NetworkRegistry

User = get_user_model()


class InvitationTestCase(TestCase):
    def setUp(self):
        self.manager = User.objects.create_user(username="mgr", email="mgr@venue.com", password="pass123")
        self.venue = Venue.objects.create(name="The Lexington", created_by=self.manager)
        VenueManager.objects.create(venue=self.venue, user=self.manager)
        self.manager_caps = resolve(self.manager)

        self.musician = User.objects.create_user(
            username="jo", email="jo@login.com", password="pass123", first_name="Jo", last_name="Bloggs"
        )


class CreateInvitationTest(InvitationTestCase):
    def test_create_with_prefill(self):
        inv = invitations.create_invitation(
            self.manager_caps,
            self.venue.id,
            prefill={"email": "jo@prefill.com", "instruments": ["Drums"], "phone": ""},
        )
        self.assertEqual(inv.status, VenueInvitation.STATUS_PENDING)
        self.assertEqual(len(inv.invitation_code), 8)
        self.assertEqual(inv.musician_email, "jo@prefill.com")
        self.assertEqual(inv.musician_instruments, ["Drums"])
        self.assertIsNone(inv.musician_phone)

        ttl = inv.expires_at - timezone.now()
        self.assertGreater(ttl, timedelta(days=29, hours=23))
        self.assertLessEqual(ttl, timedelta(days=30))

    def test_only_managers_create(self):
        with self.assertRaises(NotVenueManager):
            invitations.create_invitation(resolve(self.musician), self.venue.id)

    def test_ttl_must_be_positive(self):
        with self.assertRaises(ValidationError):
            invitations.create_invitation(self.manager_caps, self.venue.id, ttl_days=0)

    def test_lookup_is_case_insensitive_and_reports_expiry(self):
        inv = invitations.create_invitation(self.manager_caps, self.venue.id)
        found = invitations.get_invitation(f"  {inv.invitation_code.lower()} ")
        self.assertEqual(found.pk, inv.pk)
        self.assertEqual(found.effective_status, "pending")

        VenueInvitation.objects.filter(pk=inv.pk).update(expires_at=timezone.now() - timedelta(minutes=1))
        found = invitations.get_invitation(inv.invitation_code)
        self.assertEqual(found.effective_status, "expired")
        # Expiry is evaluated on read, never written back
        self.assertEqual(found.status, "pending")

        with self.assertRaises(InvitationNotFound):
            invitations.get_invitation("NOPE2345")

    def test_list_newest_first(self):
        first = invitations.create_invitation(self.manager_caps, self.venue.id)
        second = invitations.create_invitation(self.manager_caps, self.venue.id)
        VenueInvitation.objects.filter(pk=first.pk).update(created_at=timezone.now() - timedelta(days=1))

        codes = [i.invitation_code for i in invitations.list_invitations(self.manager_caps, self.venue.id)]
        self.assertEqual(codes, [second.invitation_code, first.invitation_code])


class AcceptInvitationTest(InvitationTestCase):
    def test_end_to_end_with_prefilled_email(self):
        with mock.patch("venues.codes.generate_code", return_value="AB3D9F2K"):
            inv = invitations.create_invitation(
                self.manager_caps, self.venue.id, prefill={"email": "someone@else.com"}, ttl_days=30
            )
        self.assertEqual(inv.invitation_code, "AB3D9F2K")

        result = invitations.accept_invitation(resolve(self.musician), "AB3D9F2K")

        self.assertTrue(result.created)
        self.assertTrue(result.musician_created)
        self.assertEqual(result.venue_id, self.venue.id)

        musician = Musician.objects.get(user=self.musician)
        self.assertEqual(musician.email, "someone@else.com")
        self.assertEqual(musician.name, "Jo Bloggs")
        self.assertTrue(NetworkRegistry.exists(self.venue.id, self.musician.id))

        inv.refresh_from_db()
        self.assertEqual(inv.status, VenueInvitation.STATUS_ACCEPTED)
        self.assertEqual(inv.accepted_by, self.musician)
        self.assertIsNotNone(inv.accepted_at)

    def test_second_accept_conflicts_and_adds_nothing(self):
        inv = invitations.create_invitation(self.manager_caps, self.venue.id)
        invitations.accept_invitation(resolve(self.musician), inv.invitation_code)

        other = User.objects.create_user(username="other", email="o@x.com", password="pass123")
        with self.assertRaises(AlreadyAccepted):
            invitations.accept_invitation(resolve(other), inv.invitation_code)
        with self.assertRaises(AlreadyAccepted):
            invitations.accept_invitation(resolve(self.musician), inv.invitation_code)

        self.assertEqual(NetworkMembership.objects.filter(venue=self.venue).count(), 1)

    def test_concurrent_claim_loses_at_the_conditional_write(self):
        inv = invitations.create_invitation(self.manager_caps, self.venue.id)
        stale = invitations.get_invitation(inv.invitation_code)
        invitations.accept_invitation(resolve(self.musician), inv.invitation_code)

        other = User.objects.create_user(username="other", email="o@x.com", password="pass123")
        with self.assertRaises(AlreadyAccepted):
            invitations.claim_invitation(stale, other)

        inv.refresh_from_db()
        self.assertEqual(inv.accepted_by, self.musician)

    def test_expired_code_conflicts_while_still_pending(self):
        inv = invitations.create_invitation(self.manager_caps, self.venue.id)
        VenueInvitation.objects.filter(pk=inv.pk).update(expires_at=timezone.now() - timedelta(seconds=1))

        with self.assertRaises(InvitationExpired):
            invitations.accept_invitation(resolve(self.musician), inv.invitation_code)

        inv.refresh_from_db()
        self.assertEqual(inv.status, VenueInvitation.STATUS_PENDING)
        self.assertFalse(NetworkMembership.objects.exists())

    def test_existing_member_accepts(self):
        NetworkRegistry.add(self.venue.id, self.musician.id, added_by_id=self.manager.id)
        inv = invitations.create_invitation(self.manager_caps, self.venue.id)

        result = invitations.accept_invitation(resolve(self.musician), inv.invitation_code)
        self.assertFalse(result.created)
        self.assertTrue(result.already_existed)
        self.assertEqual(NetworkMembership.objects.count(), 1)

    def test_overrides_update_profile_and_are_audited(self):
        Musician.objects.create(user=self.musician, name="Jo", email="jo@profile.com", instruments=["Piano"])
        inv = invitations.create_invitation(
            self.manager_caps, self.venue.id, prefill={"email": "jo@prefill.com", "phone": "111"}
        )

        result = invitations.accept_invitation(
            resolve(self.musician), inv.invitation_code, overrides={"phone": "222", "instruments": ["Drums"]}
        )
        self.assertFalse(result.musician_created)

        musician = Musician.objects.get(user=self.musician)
        self.assertEqual(musician.phone, "222")
        self.assertEqual(musician.instruments, ["Drums"])
        self.assertEqual(musician.email, "jo@profile.com")

        inv.refresh_from_db()
        self.assertEqual(inv.musician_phone, "222")
        self.assertEqual(inv.musician_instruments, ["Drums"])
        self.assertEqual(inv.musician_email, "jo@prefill.com")

    def test_registration_failure_releases_invitation(self):
        inv = invitations.create_invitation(self.manager_caps, self.venue.id)

        with mock.patch.object(NetworkRegistry, "add", side_effect=DatabaseError("connection reset")):
            with self.assertRaises(InternalError):
                invitations.accept_invitation(resolve(self.musician), inv.invitation_code)

        inv.refresh_from_db()
        self.assertEqual(inv.status, VenueInvitation.STATUS_PENDING)
        self.assertIsNone(inv.accepted_by)
        self.assertIsNone(inv.accepted_at)
        self.assertFalse(NetworkMembership.objects.exists())

        # Still usable
        result = invitations.accept_invitation(resolve(self.musician), inv.invitation_code)
        self.assertTrue(result.created)

    def test_profile_store_failure_leaves_invitation_pending(self):
        inv = invitations.create_invitation(self.manager_caps, self.venue.id)

        with mock.patch("venues.invitations.ensure_musician", side_effect=DatabaseError("disk full")):
            with self.assertRaises(InternalError):
                invitations.accept_invitation(resolve(self.musician), inv.invitation_code)

        inv.refresh_from_db()
        self.assertEqual(inv.status, VenueInvitation.STATUS_PENDING)

    def test_missing_confirmation_is_only_a_warning(self):
        inv = invitations.create_invitation(self.manager_caps, self.venue.id)

        with mock.patch.object(NetworkRegistry, "exists", return_value=False):
            with self.assertLogs("gigboard.venues", level="WARNING"):
                result = invitations.accept_invitation(resolve(self.musician), inv.invitation_code)

        self.assertTrue(result.created)
        self.assertEqual(result.warnings, ("membership_not_confirmed",))

    def test_release_only_undoes_own_claim(self):
        inv = invitations.create_invitation(self.manager_caps, self.venue.id)
        invitations.accept_invitation(resolve(self.musician), inv.invitation_code)

        with self.assertLogs("gigboard.venues", level="ERROR"):
            self.assertFalse(invitations.release_invitation(inv, self.manager))
        inv.refresh_from_db()
        self.assertEqual(inv.status, VenueInvitation.STATUS_ACCEPTED)


class ManagerInvitationTest(InvitationTestCase):
    def setUp(self):
        super().setUp()
        self.invitee = User.objects.create_user(username="sam", email="Sam@Example.com", password="pass123")
        self.inv = invitations.create_manager_invitation(self.manager_caps, self.venue.id, "sam@example.COM")

    def test_email_required(self):
        with self.assertRaises(ValidationError):
            invitations.create_manager_invitation(self.manager_caps, self.venue.id, "  ")

    def test_accept_grants_role(self):
        result = invitations.accept_manager_invitation(resolve(self.invitee), self.inv.invitation_code.lower())
        self.assertTrue(result.created)
        self.assertTrue(resolve(self.invitee).manages_venue(self.venue.id))

        self.inv.refresh_from_db()
        self.assertEqual(self.inv.status, VenueManagerInvitation.STATUS_ACCEPTED)

    def test_wrong_account(self):
        with self.assertRaises(WrongAccount):
            invitations.accept_manager_invitation(resolve(self.musician), self.inv.invitation_code)

        self.inv.refresh_from_db()
        self.assertEqual(self.inv.status, VenueManagerInvitation.STATUS_PENDING)
        self.assertFalse(VenueManager.objects.filter(user=self.musician).exists())

    def test_already_manager_is_success(self):
        VenueManager.objects.create(venue=self.venue, user=self.invitee)
        result = invitations.accept_manager_invitation(resolve(self.invitee), self.inv.invitation_code)
        self.assertFalse(result.created)
        self.assertEqual(VenueManager.objects.filter(user=self.invitee).count(), 1)

    def test_twice_and_expired(self):
        invitations.accept_manager_invitation(resolve(self.invitee), self.inv.invitation_code)
        with self.assertRaises(AlreadyAccepted):
            invitations.accept_manager_invitation(resolve(self.invitee), self.inv.invitation_code)

        other = invitations.create_manager_invitation(self.manager_caps, self.venue.id, "sam@example.com")
        VenueManagerInvitation.objects.filter(pk=other.pk).update(expires_at=timezone.now() - timedelta(days=1))
        with self.assertRaises(InvitationExpired):
            invitations.accept_manager_invitation(resolve(self.invitee), other.invitation_code)

    def test_grant_failure_releases_invitation(self):
        with mock.patch("venues.invitations.insert_if_absent", side_effect=DatabaseError("boom")):
            with self.assertRaises(InternalError):
                invitations.accept_manager_invitation(resolve(self.invitee), self.inv.invitation_code)

        self.inv.refresh_from_db()
        self.assertEqual(self.inv.status, VenueManagerInvitation.STATUS_PENDING)
        self.assertIsNone(self.inv.accepted_by)
