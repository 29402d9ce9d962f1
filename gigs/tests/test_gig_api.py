# gigs/tests/test_gig_api.py
from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework.test import APIClient

from gigs.models import Application, Gig, GigInvitation

from .helpers import make_musician

User = get_user_model()


@override_settings(EMAIL_BACKEND="django.core.mail.backends.locmem.EmailBackend")
class GigFlowAPITest(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(username="owner", email="owner@example.com", password="pass123")
        self.m = make_musician("m", ["Alto Sax"])
        self.n = make_musician("n", ["Alto Sax"])

        self.client_owner = APIClient()
        self.client_owner.force_authenticate(self.owner)
        self.client_m = APIClient()
        self.client_m.force_authenticate(self.m)
        self.client_n = APIClient()
        self.client_n.force_authenticate(self.n)

    def _create_gig(self, slots):
        res = self.client_owner.post(
            reverse("gig-create"),
            {"title": "Late Show", "location": "Pizza Express", "slots": slots},
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        return res.data

    def test_end_to_end_single_slot(self):
        gig = self._create_gig([{"instruments": ["Alto Sax"], "invite_only": False}])
        slot_id = gig["slots"][0]["id"]
        apply_url = reverse("gig-slot-apply", args=[gig["id"], slot_id])

        # M applies
        res = self.client_m.post(apply_url, {"instrument": "Alto Sax"}, format="json")
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["status"], "pending")
        application_id = res.data["id"]

        # Owner accepts
        res = self.client_owner.post(reverse("application-accept", args=[application_id]))
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["success"])
        self.assertEqual(res.data["application"]["status"], "accepted")
        self.assertEqual(res.data["gig_status"], "filled")
        self.assertEqual(Gig.objects.get(pk=gig["id"]).status, Gig.STATUS_FILLED)

        # N is too late
        res = self.client_n.post(apply_url, {"instrument": "Alto Sax"}, format="json")
        self.assertEqual(res.status_code, 409)
        self.assertFalse(res.data["success"])
        self.assertEqual(res.data["errors"]["code"], "SLOT_ALREADY_FILLED")

        # One mail to the owner, one confirmation to M
        self.assertEqual([m.to for m in mail.outbox], [["owner@example.com"], ["m@example.com"]])

    def test_gig_detail_reports_filled_slots(self):
        gig = self._create_gig([{"instruments": ["Alto Sax"]}, {"instruments": ["Drums"]}])
        res = self.client_m.get(reverse("gig-detail", args=[gig["id"]]))
        self.assertEqual(res.status_code, 200)
        self.assertEqual([s["is_filled"] for s in res.data["slots"]], [False, False])

        app = self.client_m.post(
            reverse("gig-slot-apply", args=[gig["id"], gig["slots"][0]["id"]]),
            {"instrument": "Alto Sax"},
            format="json",
        ).data
        self.client_owner.post(reverse("application-accept", args=[app["id"]]))

        res = self.client_m.get(reverse("gig-detail", args=[gig["id"]]))
        self.assertEqual([s["is_filled"] for s in res.data["slots"]], [True, False])
        self.assertEqual(res.data["status"], "open")

    def test_create_validation(self):
        res = self.client_owner.post(reverse("gig-create"), {"title": "Empty", "slots": []}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertIn("slots", res.data["errors"])

        res = self.client_owner.post(
            reverse("gig-create"),
            {"title": "Bad", "slots": [{"instruments": ["Drums", "Drums"]}]},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["errors"]["code"], "INVALID_SLOT")

    def test_unauthenticated(self):
        res = APIClient().post(reverse("gig-create"), {"title": "x", "slots": []}, format="json")
        self.assertEqual(res.status_code, 401)

    def test_invite_only_flow(self):
        gig = self._create_gig([{"instruments": ["Alto Sax"], "invite_only": True}])
        apply_url = reverse("gig-slot-apply", args=[gig["id"], gig["slots"][0]["id"]])

        res = self.client_m.post(apply_url, {"instrument": "Alto Sax"}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["errors"]["code"], "NOT_ELIGIBLE")

        invite_url = reverse("gig-invitations", args=[gig["id"]])
        res = self.client_owner.post(invite_url, {"musician_id": self.m.id, "instrument": "Alto Sax"}, format="json")
        self.assertEqual(res.status_code, 201)
        self.assertTrue(res.data["created"])
        res = self.client_owner.post(invite_url, {"musician_id": self.m.id, "instrument": "Alto Sax"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertFalse(res.data["created"])

        res = self.client_m.post(apply_url, {"instrument": "Alto Sax"}, format="json")
        self.assertEqual(res.status_code, 201)

        # Only the poster may grant invitations
        res = self.client_m.post(invite_url, {"musician_id": self.n.id, "instrument": "Alto Sax"}, format="json")
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.data["errors"]["code"], "NOT_GIG_OWNER")

        res = self.client_owner.delete(invite_url, {"musician_id": self.m.id, "instrument": "Alto Sax"}, format="json")
        self.assertTrue(res.data["revoked"])
        self.assertFalse(GigInvitation.objects.exists())

    def test_reject_and_list(self):
        gig = self._create_gig([{"instruments": ["Alto Sax"]}])
        apply_url = reverse("gig-slot-apply", args=[gig["id"], gig["slots"][0]["id"]])
        app_m = self.client_m.post(apply_url, {"instrument": "Alto Sax"}, format="json").data
        self.client_n.post(apply_url, {"instrument": "Alto Sax"}, format="json")

        res = self.client_owner.post(reverse("application-reject", args=[app_m["id"]]))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["application"]["status"], "rejected")

        res = self.client_owner.post(reverse("application-reject", args=[app_m["id"]]))
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["errors"]["code"], "APPLICATION_NOT_PENDING")

        res = self.client_owner.get(reverse("gig-applications", args=[gig["id"]]))
        self.assertEqual(res.status_code, 200)
        self.assertEqual([a["status"] for a in res.data], ["rejected", "pending"])
        self.assertEqual(res.data[0]["applicant_name"], "M")

        res = self.client_m.get(reverse("gig-applications", args=[gig["id"]]))
        self.assertEqual(res.status_code, 403)

    def test_cancel(self):
        gig = self._create_gig([{"instruments": ["Alto Sax"]}])
        res = self.client_m.post(reverse("gig-cancel", args=[gig["id"]]))
        self.assertEqual(res.status_code, 403)

        res = self.client_owner.post(reverse("gig-cancel", args=[gig["id"]]))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["status"], "cancelled")

        res = self.client_m.post(
            reverse("gig-slot-apply", args=[gig["id"], gig["slots"][0]["id"]]),
            {"instrument": "Alto Sax"},
            format="json",
        )
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["errors"]["code"], "GIG_NOT_OPEN")

    def test_not_found(self):
        res = self.client_m.get(reverse("gig-detail", args=[424242]))
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["errors"]["code"], "GIG_NOT_FOUND")

        res = self.client_owner.post(reverse("application-accept", args=[424242]))
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["errors"]["code"], "APPLICATION_NOT_FOUND")
        self.assertFalse(Application.objects.exists())
