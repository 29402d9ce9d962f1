# gigs/tests/test_state_machine.py
from django.contrib.auth import get_user_model
from django.test import TestCase

from gigs import state_machine
from gigs.models import Application, Gig, Slot

User = get_user_model()


class ApplicationStateMachineTest(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(username="owner", password="pass123")
        self.gig = Gig.objects.create(owner=self.owner, title="Sunday Brunch")
        self.slot = Slot.objects.create(gig=self.gig, position=0, instruments=["Piano"])
        self.applicants = [
            User.objects.create_user(username=f"p{i}", password="pass123") for i in range(3)
        ]
        self.apps = [
            Application.objects.create(gig=self.gig, slot=self.slot, applicant=u, instrument="Piano")
            for u in self.applicants
        ]

    def test_valid_transitions(self):
        app = self.apps[0]
        self.assertEqual(state_machine.can_transition(app, "accepted"), (True, ""))
        ok, _ = state_machine.transition(app, "rejected", actor=self.owner)
        self.assertTrue(ok)
        app.refresh_from_db()
        self.assertEqual(app.status, "rejected")
        self.assertIsNotNone(app.decided_at)

    def test_terminal_states_do_not_move(self):
        app = self.apps[0]
        state_machine.transition(app, "accepted")
        ok, reason = state_machine.transition(app, "rejected")
        self.assertFalse(ok)
        self.assertEqual(reason, "Application is already accepted")
        self.assertTrue(state_machine.is_terminal_status("accepted"))
        self.assertTrue(state_machine.is_terminal_status("rejected"))
        self.assertFalse(state_machine.is_terminal_status("pending"))

    def test_unknown_status(self):
        ok, reason = state_machine.can_transition(self.apps[0], "withdrawn")
        self.assertFalse(ok)
        self.assertIn("Invalid status", reason)

    def test_stale_read_loses_the_compare_and_swap(self):
        stale = Application.objects.get(pk=self.apps[0].pk)
        Application.objects.filter(pk=stale.pk).update(status="rejected")

        ok, reason = state_machine.transition(stale, "accepted")
        self.assertFalse(ok)
        self.assertIn("another request", reason)
        stale.refresh_from_db()
        self.assertEqual(stale.status, "rejected")

    def test_reject_pending_siblings(self):
        winner = self.apps[1]
        state_machine.transition(winner, "accepted")
        count = state_machine.reject_pending_siblings(winner)

        self.assertEqual(count, 2)
        statuses = dict(Application.objects.values_list("id", "status"))
        self.assertEqual(statuses[winner.id], "accepted")
        self.assertEqual(statuses[self.apps[0].id], "rejected")
        self.assertEqual(statuses[self.apps[2].id], "rejected")
